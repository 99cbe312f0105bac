"""
Error types raised by the rollup probe.

Every error derives from ProbeError so callers can separate probe failures
from programming errors. Where a builtin exception describes the same
condition the probe error also derives from it.
"""


class ProbeError(Exception):
    """Base class for all rollup probe errors."""


class ChainConnectionError(ProbeError, ConnectionError):
    """The chain endpoint is misconfigured or unreachable."""


class InvalidInputError(ProbeError, ValueError):
    """An address or transaction hash is not well-formed hex."""


class NotFoundError(ProbeError, LookupError):
    """A transaction receipt or the expected log entry is absent."""


class DecodeError(ProbeError, ValueError):
    """Event data does not match the expected ABI layout."""


class RpcCallError(ProbeError):
    """A contract read call failed."""

    def __init__(self, message: str, function_name: str | None = None) -> None:
        super().__init__(message)
        self.function_name = function_name


class PollCancelledError(ProbeError):
    """A balance poll was aborted through its cancel event."""

    def __init__(self, message: str, attempts: int = 0, last_balance: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_balance = last_balance


class BridgeApiError(ProbeError):
    """The bridge indexer API returned an HTTP or application error."""
