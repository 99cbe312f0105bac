"""Shared fixtures for rollup probe tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from hexbytes import HexBytes
from web3 import Web3

from rollup_probe.event_decoder import EventDataDecoder

QUEUE_ADDRESS = "0x" + "ab" * 20
OTHER_ADDRESS = "0x" + "cd" * 20
TOKEN_ADDRESS = "0x" + "12" * 20
HOLDER_ADDRESS = "0x" + "34" * 20
TX_HASH = "0x" + "5e" * 32
COMMITMENT = bytes.fromhex("11" * 32)


def checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


def make_log(address: str, data: bytes = b"", log_index: int = 0) -> dict:
    """Build a receipt log shaped like web3's AttributeDict logs."""
    return {
        "address": address,
        "data": HexBytes(data),
        "topics": [HexBytes("0x" + "00" * 32)],
        "logIndex": log_index,
    }


def make_receipt(*logs: dict, block_number: int = 100) -> dict:
    return {"blockNumber": block_number, "status": 1, "logs": list(logs)}


def queue_payload(queue_index: int, value: int = 0, gas_limit: int = 1_000_000, data: bytes = b"") -> bytes:
    return EventDataDecoder.encode(value, queue_index, gas_limit, data)


@pytest.fixture
def mock_client():
    """Create a mock ChainClient instance."""
    client = MagicMock()
    client.get_transaction_receipt = AsyncMock(return_value=None)
    client.call_function = AsyncMock()
    client.get_finalized_block_number = AsyncMock()
    return client


@pytest.fixture
def fake_sleep():
    """Sleep replacement that records requested delays without waiting."""
    return AsyncMock(return_value=None)
