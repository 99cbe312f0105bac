"""
Single-call read of the L1 message queue position.
"""

import logging

from .utils.chain_client import ChainClient
from .utils.contract_utility import get_contract_abi
from .utils.hex_utility import require_address

logger = logging.getLogger(__name__)


class PendingQueueIndexReader:
    """Reads the next unprocessed position of the L1 message queue."""

    def __init__(self) -> None:
        self.message_queue_abi = get_contract_abi("L1MessageQueue")

    async def read_pending_index(self, client: ChainClient, queue_contract_address: str) -> int:
        """
        Call pendingQueueIndex() once; no retry.

        Raises:
            RpcCallError: On transport or call failure
        """
        queue_contract_address = require_address(queue_contract_address, "message queue")
        index = await client.call_function(
            queue_contract_address,
            self.message_queue_abi,
            "pendingQueueIndex"
        )
        logger.info(f"Pending queue index on {queue_contract_address}: {index}")
        return int(index)
