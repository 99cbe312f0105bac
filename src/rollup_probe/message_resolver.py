"""
Resolves an L1 enqueue transaction to its L2 message commitment.
"""

import logging

from .event_decoder import EventDataDecoder
from .exceptions import RpcCallError
from .models import CrossDomainMessage
from .receipt_locator import ReceiptLogLocator
from .utils.chain_client import ChainClient
from .utils.contract_utility import get_contract_abi
from .utils.hex_utility import require_address

logger = logging.getLogger(__name__)


class CrossDomainMessageResolver:
    """Correlates a QueueTransaction log with the queue's stored message."""

    COMMITMENT_LENGTH = 32

    def __init__(
        self,
        locator: ReceiptLogLocator | None = None,
        decoder: type[EventDataDecoder] = EventDataDecoder
    ) -> None:
        self.locator = locator or ReceiptLogLocator()
        self.decoder = decoder
        self.message_queue_abi = get_contract_abi("L1MessageQueue")

    async def resolve(
        self,
        client: ChainClient,
        tx_hash: str,
        queue_contract_address: str
    ) -> CrossDomainMessage:
        """
        Resolve the cross-domain message enqueued by an L1 transaction.

        Steps run strictly in order: locate the queue log, decode its data,
        then read getCrossDomainMessage(queueIndex) from the queue contract.

        Args:
            client: L1 chain client
            tx_hash: Hash of the enqueueing transaction
            queue_contract_address: L1 message queue proxy address

        Returns:
            CrossDomainMessage with queue index and message commitment

        Raises:
            NotFoundError: If the receipt or queue log is absent
            DecodeError: If the log data does not match the event layout
            RpcCallError: If the commitment read fails
        """
        queue_contract_address = require_address(queue_contract_address, "message queue")

        log_entry = await self.locator.locate(client, tx_hash, queue_contract_address)
        payload = self.decoder.decode(log_entry.data)
        queue_index = payload.queue_index
        logger.info(f"QueueTransaction in {tx_hash[:10]}... has queue index {queue_index}")

        commitment = await client.call_function(
            queue_contract_address,
            self.message_queue_abi,
            "getCrossDomainMessage",
            queue_index
        )

        commitment = bytes(commitment)
        if len(commitment) != self.COMMITMENT_LENGTH:
            raise RpcCallError(
                f"getCrossDomainMessage returned {len(commitment)} bytes, "
                f"expected {self.COMMITMENT_LENGTH}",
                "getCrossDomainMessage"
            )

        message = CrossDomainMessage(queue_index=queue_index, message_commitment=commitment)
        logger.info(f"Resolved {message}")
        return message
