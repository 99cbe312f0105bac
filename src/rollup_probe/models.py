#!/usr/bin/env python3
"""Data models for the rollup probe.

This module provides immutable data classes for receipt logs, decoded
queue events, resolved cross-domain messages, balance polling and the
bridge API's withdrawal records.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hexbytes import HexBytes


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One log emitted by a mined transaction.

    Attributes:
        address: Address of the emitting contract, as reported by the node
        data: Raw non-indexed event payload
        topics: Indexed topics, signature first
        log_index: Position of the log in its block, if known
    """

    address: str
    data: bytes
    topics: tuple[bytes, ...] = ()
    log_index: int | None = None

    @classmethod
    def from_receipt_log(cls, log: Mapping[str, Any]) -> "LogEntry":
        """Build a LogEntry from a receipt log (AttributeDict or plain dict)."""
        return cls(
            address=str(log["address"]),
            data=bytes(HexBytes(log.get("data") or b"")),
            topics=tuple(bytes(HexBytes(topic)) for topic in log.get("topics", [])),
            log_index=log.get("logIndex"),
        )

    def is_from(self, address: str) -> bool:
        """Case-insensitive address comparison."""
        return self.address.lower() == address.lower()


@dataclass(frozen=True, slots=True)
class QueueTransactionPayload:
    """Non-indexed fields of a QueueTransaction event.

    The event is QueueTransaction(address indexed sender, address indexed
    target, uint256 value, uint64 queueIndex, uint256 gasLimit, bytes data),
    so the payload holds the last four fields in this order.
    """

    value: int
    queue_index: int
    gas_limit: int
    data: bytes

    def as_tuple(self) -> tuple[int, int, int, bytes]:
        return (self.value, self.queue_index, self.gas_limit, self.data)


@dataclass(frozen=True, slots=True)
class CrossDomainMessage:
    """An L1 enqueue resolved to its L2 message commitment.

    Attributes:
        queue_index: Position of the message in the L1 message queue
        message_commitment: 32-byte identifier of the L2 message
    """

    queue_index: int
    message_commitment: bytes

    @property
    def message_commitment_hex(self) -> str:
        return HexBytes(self.message_commitment).to_0x_hex()

    def __str__(self) -> str:
        return (
            f"CrossDomainMessage(queue_index={self.queue_index}, "
            f"commitment={self.message_commitment_hex[:10]}...)"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "queue_index": self.queue_index,
            "message_commitment": self.message_commitment_hex,
        }


@dataclass(frozen=True, slots=True)
class PollPolicy:
    """Retry budget for balance polling.

    Attributes:
        max_attempts: Number of balance reads before giving up
        interval_millis: Delay between consecutive reads
        cancel_event: Optional event that aborts the poll once set
    """

    max_attempts: int = 5
    interval_millis: int = 15_000
    cancel_event: asyncio.Event | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.interval_millis < 0:
            raise ValueError(f"interval_millis must be non-negative, got {self.interval_millis}")

    @property
    def interval_seconds(self) -> float:
        return self.interval_millis / 1000

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


class PollState(Enum):
    """States of the balance polling loop."""
    POLLING = "polling"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class BalancePollResult:
    """Terminal outcome of a balance poll."""

    state: PollState
    balance: int
    attempts: int

    @property
    def succeeded(self) -> bool:
        return self.state is PollState.SUCCESS


@dataclass(frozen=True, slots=True)
class CounterpartChainTx:
    """The transaction on the other layer that settled a withdrawal."""

    hash: str
    block_number: int

    @classmethod
    def from_api(cls, data: Mapping[str, Any] | None) -> "CounterpartChainTx":
        data = data or {}
        return cls(hash=data.get("hash", ""), block_number=data.get("block_number", 0))


@dataclass(frozen=True, slots=True)
class ClaimProof:
    batch_index: str
    merkle_proof: str


@dataclass(frozen=True, slots=True)
class ClaimInfo:
    """Data needed to relay a withdrawal message on L1."""

    from_address: str
    to_address: str
    value: str
    nonce: str
    message: str
    proof: ClaimProof
    claimable: bool

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "ClaimInfo":
        proof = data.get("proof") or {}
        return cls(
            from_address=data.get("from", ""),
            to_address=data.get("to", ""),
            value=data.get("value", "0"),
            nonce=data.get("nonce", "0"),
            message=data.get("message", ""),
            proof=ClaimProof(
                batch_index=proof.get("batch_index", "0"),
                merkle_proof=proof.get("merkle_proof", ""),
            ),
            claimable=bool(data.get("claimable", False)),
        )


@dataclass(frozen=True, slots=True)
class Withdrawal:
    """An L2 -> L1 withdrawal as reported by the bridge API."""

    hash: str
    from_address: str
    to_address: str
    value: str
    nonce: str
    block_number: int
    tx_status: int
    counterpart_chain_tx: CounterpartChainTx
    claim_info: ClaimInfo | None
    block_timestamp: int
    batch_deposit_fee: str

    @classmethod
    def from_api(cls, result: Mapping[str, Any]) -> "Withdrawal":
        claim_info = result.get("claim_info")
        return cls(
            hash=result["hash"],
            from_address=result.get("from", ""),
            to_address=result.get("to", ""),
            value=result.get("value", "0"),
            nonce=result.get("nonce", "0"),
            block_number=result.get("block_number", 0),
            tx_status=result.get("tx_status", 0),
            counterpart_chain_tx=CounterpartChainTx.from_api(result.get("counterpart_chain_tx")),
            claim_info=ClaimInfo.from_api(claim_info) if claim_info else None,
            block_timestamp=result.get("block_timestamp", 0),
            batch_deposit_fee=result.get("batch_deposit_fee", "0"),
        )


@dataclass(frozen=True, slots=True)
class UnclaimedWithdrawal:
    """A withdrawal that has not yet been relayed on L1."""

    hash: str
    message_hash: str
    token_type: int
    token_amounts: tuple[str, ...]
    l1_token_address: str
    l2_token_address: str
    block_number: int
    claimable: bool
    from_address: str
    to_address: str
    value: str

    @classmethod
    def from_api(cls, result: Mapping[str, Any]) -> "UnclaimedWithdrawal":
        claim_info = result.get("claim_info") or {}
        return cls(
            hash=result["hash"],
            message_hash=result.get("message_hash", ""),
            token_type=result.get("token_type", 0),
            token_amounts=tuple(result.get("token_amounts") or ()),
            l1_token_address=result.get("l1_token_address", ""),
            l2_token_address=result.get("l2_token_address", ""),
            block_number=result.get("block_number", 0),
            claimable=bool(claim_info.get("claimable", False)),
            from_address=claim_info.get("from", ""),
            to_address=claim_info.get("to", ""),
            value=claim_info.get("value", "0"),
        )
