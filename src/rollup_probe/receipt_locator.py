"""
Locates the log entry a contract emitted within a transaction receipt.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from web3.types import TxReceipt

from .exceptions import NotFoundError
from .models import LogEntry
from .utils.chain_client import ChainClient
from .utils.hex_utility import require_address, require_tx_hash

logger = logging.getLogger(__name__)


class ReceiptLogLocator:
    """Fetches receipts and isolates the log emitted by a given contract."""

    def __init__(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
        """
        Initialize the locator.

        Args:
            sleep: Suspend primitive used between receipt polls
        """
        self._sleep = sleep

    async def locate(self, client: ChainClient, tx_hash: str, contract_address: str) -> LogEntry:
        """
        Find the first log in the receipt emitted by contract_address.

        Addresses are compared case-insensitively. Every log is scanned;
        later logs from the same contract are ignored.

        Args:
            client: Chain client for the layer the transaction was mined on
            tx_hash: Transaction hash
            contract_address: Address of the emitting contract

        Returns:
            The matching LogEntry

        Raises:
            InvalidInputError: If the hash or address is malformed
            NotFoundError: If the receipt or the log is absent
        """
        tx_hash = require_tx_hash(tx_hash)
        contract_address = require_address(contract_address)

        receipt = await client.get_transaction_receipt(tx_hash)
        if not receipt:
            raise NotFoundError("Transaction not found")

        return self.select_log(receipt, contract_address)

    def select_log(self, receipt: TxReceipt, contract_address: str) -> LogEntry:
        """Pick the first log from contract_address out of a fetched receipt."""
        selected: LogEntry | None = None
        extra_matches = 0

        for log in receipt.get("logs", []):
            entry = LogEntry.from_receipt_log(log)
            if not entry.is_from(contract_address):
                continue
            if selected is None:
                selected = entry
            else:
                extra_matches += 1

        if selected is None:
            raise NotFoundError("QueueTransaction event not found")

        if extra_matches:
            logger.debug(
                f"Receipt has {extra_matches} further log(s) from {contract_address}; "
                "using the first"
            )
        return selected

    async def wait_for_receipt(
        self,
        client: ChainClient,
        tx_hash: str,
        interval_seconds: float = 20,
        max_attempts: int | None = None
    ) -> TxReceipt:
        """
        Wait for a transaction to be mined and return its receipt.

        Args:
            client: Chain client
            tx_hash: Transaction hash
            interval_seconds: Delay between receipt lookups
            max_attempts: Give up after this many lookups (None waits forever)

        Returns:
            The transaction receipt

        Raises:
            NotFoundError: If max_attempts lookups found no receipt
        """
        tx_hash = require_tx_hash(tx_hash)
        attempts = 0

        while True:
            receipt = await client.get_transaction_receipt(tx_hash)
            attempts += 1
            if receipt:
                logger.info(f"Transaction {tx_hash[:10]}... mined in block {receipt.get('blockNumber')}")
                return receipt

            if max_attempts is not None and attempts >= max_attempts:
                raise NotFoundError(
                    f"Transaction {tx_hash} not mined after {attempts} attempts"
                )

            logger.info(f"Transaction not found yet. Retrying in {interval_seconds} seconds...")
            await self._sleep(interval_seconds)
