#!/usr/bin/env python3
"""Configuration management for the rollup probe.

This module provides validated, immutable configuration dataclasses for
the chain endpoints, bridge contracts and polling budget. Configuration is
loaded from environment variables with sensible defaults where appropriate.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import ClassVar
from urllib.parse import urlparse

from web3 import Web3

from .exceptions import ChainConnectionError
from .models import PollPolicy

# Get logger for this module
logger = logging.getLogger(__name__)

API_KEY_PLACEHOLDER = "{api_key}"


@dataclass(frozen=True, slots=True)
class ConnectionDescriptor:
    """Identifies a chain endpoint.

    Attributes:
        url: HTTP(S) or WS(S) endpoint, or the name of a known preset
        api_key: Optional access key, substituted for ``{api_key}`` in the URL
            or sent as a bearer token to HTTP endpoints
        request_timeout: Per-request timeout in seconds
    """

    url: str
    api_key: str | None = field(default=None, repr=False)
    request_timeout: int = 30

    PRESETS: ClassVar[dict[str, str]] = {
        "ethereum": "https://ethereum-rpc.publicnode.com",
        "sepolia": "https://ethereum-sepolia.publicnode.com",
        "scroll": "https://rpc.scroll.io",
        "scroll-sepolia": "https://sepolia-rpc.scroll.io",
        "localhost": "http://localhost:8545",
    }
    HTTP_SCHEMES: ClassVar[set[str]] = {"http", "https"}
    WEBSOCKET_SCHEMES: ClassVar[set[str]] = {"ws", "wss"}

    def __post_init__(self) -> None:
        """Validate the endpoint."""
        if not self.url:
            raise ChainConnectionError("RPC URL or network preset is required")

        if "://" not in self.url and self.url not in self.PRESETS:
            raise ChainConnectionError(
                f"Unknown network preset: {self.url}. "
                f"Known presets: {', '.join(sorted(self.PRESETS))}"
            )

        parsed = urlparse(self.endpoint_url)
        if parsed.scheme not in self.HTTP_SCHEMES | self.WEBSOCKET_SCHEMES:
            raise ChainConnectionError(
                f"Invalid RPC URL scheme: {parsed.scheme}. "
                "Expected http, https, ws, or wss"
            )
        if not parsed.netloc:
            raise ChainConnectionError(f"RPC URL has no host: {self.url}")

        if self.api_key and self.is_websocket and API_KEY_PLACEHOLDER not in self.endpoint_url:
            raise ChainConnectionError(
                "WebSocket endpoints take the access key in the URL; "
                f"add an {API_KEY_PLACEHOLDER} placeholder to {self.url}"
            )

        if self.request_timeout <= 0:
            raise ChainConnectionError(
                f"Request timeout must be positive, got {self.request_timeout}"
            )

    @property
    def endpoint_url(self) -> str:
        """URL with the preset resolved and the placeholder left in place."""
        return self.PRESETS.get(self.url, self.url)

    @property
    def resolved_url(self) -> str:
        """URL with the access key substituted, ready for the transport."""
        url = self.endpoint_url
        if API_KEY_PLACEHOLDER in url:
            return url.replace(API_KEY_PLACEHOLDER, self.api_key or "")
        return url

    @property
    def is_websocket(self) -> bool:
        return urlparse(self.endpoint_url).scheme in self.WEBSOCKET_SCHEMES

    @property
    def headers(self) -> dict[str, str]:
        """Extra HTTP headers carrying the access key, if any."""
        if self.api_key and not self.is_websocket and API_KEY_PLACEHOLDER not in self.endpoint_url:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    @property
    def display_url(self) -> str:
        """Endpoint safe for logging."""
        return self.endpoint_url


def _checksum(address: str, label: str) -> str:
    if not Web3.is_address(address):
        raise ValueError(f"Invalid {label} address: {address}")
    return Web3.to_checksum_address(address)


@dataclass(frozen=True, slots=True)
class ContractsConfig:
    """Addresses of the L1 bridge contracts.

    Attributes:
        message_queue_address: L1 message queue proxy
        gas_oracle_address: L1 gas price oracle (optional)
        gateway_router_address: L1 gateway router (optional)
    """

    message_queue_address: str
    gas_oracle_address: str | None = None
    gateway_router_address: str | None = None

    def __post_init__(self) -> None:
        """Validate and checksum the contract addresses."""
        if not self.message_queue_address:
            raise ValueError(
                "Message queue address is required (L1_MESSAGE_QUEUE_ADDRESS)"
            )
        object.__setattr__(
            self, "message_queue_address",
            _checksum(self.message_queue_address, "message queue"),
        )
        if self.gas_oracle_address:
            object.__setattr__(
                self, "gas_oracle_address",
                _checksum(self.gas_oracle_address, "gas oracle"),
            )
        if self.gateway_router_address:
            object.__setattr__(
                self, "gateway_router_address",
                _checksum(self.gateway_router_address, "gateway router"),
            )


@dataclass(frozen=True, slots=True)
class PollingConfig:
    """Retry budget for balance polling."""
    max_attempts: int = 5
    interval_millis: int = 15_000  # 15 seconds between balance reads

    def __post_init__(self) -> None:
        """Validate polling configuration."""
        if self.max_attempts <= 0:
            raise ValueError(f"Max attempts must be positive, got {self.max_attempts}")
        if self.max_attempts > 100:
            raise ValueError(f"Max attempts too high (max 100), got {self.max_attempts}")
        if self.interval_millis < 0:
            raise ValueError(f"Poll interval must be non-negative, got {self.interval_millis}")
        if self.interval_millis > 600_000:
            raise ValueError(f"Poll interval too long (max 600000ms), got {self.interval_millis}")

    def to_policy(self) -> PollPolicy:
        return PollPolicy(max_attempts=self.max_attempts, interval_millis=self.interval_millis)


@dataclass(frozen=True, slots=True)
class ProbeConfig:
    """Main configuration for the rollup probe.

    Attributes:
        l1: Base layer endpoint
        l2: Rollup layer endpoint
        contracts: L1 bridge contract addresses
        polling: Balance polling budget
        bridge_api_uri: Base URI of the bridge indexer API (optional)
    """

    l1: ConnectionDescriptor
    l2: ConnectionDescriptor
    contracts: ContractsConfig
    polling: PollingConfig = field(default_factory=PollingConfig)
    bridge_api_uri: str | None = None

    def __post_init__(self) -> None:
        if self.bridge_api_uri:
            parsed = urlparse(self.bridge_api_uri)
            if parsed.scheme not in ("http", "https"):
                raise ValueError(
                    f"Invalid bridge API URI scheme: {parsed.scheme}. Expected http or https"
                )

    @classmethod
    def from_env(cls) -> "ProbeConfig":
        """Load configuration from environment variables.

        Returns:
            ProbeConfig instance with loaded values

        Raises:
            ValueError: If required environment variables are missing or invalid
            ChainConnectionError: If an RPC endpoint is malformed
        """
        l1_rpc_url = os.environ.get("L1_RPC_URL", "")
        if not l1_rpc_url:
            raise ValueError(
                "L1_RPC_URL environment variable is required. "
                "Example: https://ethereum-sepolia.publicnode.com or 'sepolia'"
            )

        l2_rpc_url = os.environ.get("L2_RPC_URL", "")
        if not l2_rpc_url:
            raise ValueError(
                "L2_RPC_URL environment variable is required. "
                "Example: https://sepolia-rpc.scroll.io or 'scroll-sepolia'"
            )

        api_key = os.environ.get("RPC_API_KEY") or None
        request_timeout = int(os.environ.get("REQUEST_TIMEOUT", "30"))

        message_queue = os.environ.get("L1_MESSAGE_QUEUE_ADDRESS", "")
        if not message_queue:
            raise ValueError(
                "L1_MESSAGE_QUEUE_ADDRESS environment variable is required. "
                "This is the L1 message queue proxy contract address."
            )

        contracts = ContractsConfig(
            message_queue_address=message_queue,
            gas_oracle_address=os.environ.get("L1_GAS_ORACLE_ADDRESS") or None,
            gateway_router_address=os.environ.get("L1_GATEWAY_ROUTER_ADDRESS") or None,
        )

        polling = PollingConfig(
            max_attempts=int(os.environ.get("POLL_MAX_ATTEMPTS", "5")),
            interval_millis=int(os.environ.get("POLL_INTERVAL_MS", "15000")),
        )

        return cls(
            l1=ConnectionDescriptor(l1_rpc_url, api_key=api_key, request_timeout=request_timeout),
            l2=ConnectionDescriptor(l2_rpc_url, api_key=api_key, request_timeout=request_timeout),
            contracts=contracts,
            polling=polling,
            bridge_api_uri=os.environ.get("BRIDGE_API_URI") or None,
        )

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Rollup Probe Configuration")
        logger.info("=" * 60)

        logger.info("Endpoints:")
        logger.info(f"  L1 RPC: {self.l1.display_url}")
        logger.info(f"  L2 RPC: {self.l2.display_url}")
        logger.info(f"  API Key: {'[SET]' if self.l1.api_key else '[NOT SET]'}")
        logger.info(f"  Request Timeout: {self.l1.request_timeout} seconds")

        logger.info("Contracts:")
        logger.info(f"  Message Queue: {self.contracts.message_queue_address}")
        logger.info(f"  Gas Oracle: {self.contracts.gas_oracle_address or '[NOT SET]'}")
        logger.info(f"  Gateway Router: {self.contracts.gateway_router_address or '[NOT SET]'}")

        logger.info("Polling Settings:")
        logger.info(f"  Max Attempts: {self.polling.max_attempts}")
        logger.info(f"  Interval: {self.polling.interval_millis} ms")

        logger.info(f"Bridge API: {self.bridge_api_uri or '[NOT SET]'}")
        logger.info("=" * 60)
