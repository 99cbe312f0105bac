"""
Rollup probe package.

Read-only inspection of L1 -> L2 bridge state: message correlation,
queue reads and balance confirmation.
"""

from .balance_poller import BalancePoller
from .config import ConnectionDescriptor, ProbeConfig
from .event_decoder import EventDataDecoder
from .message_resolver import CrossDomainMessageResolver
from .models import BalancePollResult, CrossDomainMessage, LogEntry, PollPolicy, PollState
from .queue_reader import PendingQueueIndexReader
from .receipt_locator import ReceiptLogLocator
from .utils.chain_client import ChainClient, ChainClientFactory

__all__ = [
    "BalancePoller",
    "BalancePollResult",
    "ChainClient",
    "ChainClientFactory",
    "ConnectionDescriptor",
    "CrossDomainMessage",
    "CrossDomainMessageResolver",
    "EventDataDecoder",
    "LogEntry",
    "PendingQueueIndexReader",
    "PollPolicy",
    "PollState",
    "ProbeConfig",
    "ReceiptLogLocator",
]
__version__ = "0.1.0"
