"""
Decoder for the non-indexed data of QueueTransaction events.

The payload is standard ABI encoding of (uint256, uint64, uint256, bytes):
three 32-byte head words, a 32-byte offset word for the dynamic bytes
field, then its length word and right-padded content.
"""

import logging

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes

from .exceptions import DecodeError
from .models import QueueTransactionPayload

logger = logging.getLogger(__name__)


class EventDataDecoder:
    """Decodes QueueTransaction event data into typed fields."""

    SCHEMA: tuple[str, ...] = ("uint256", "uint64", "uint256", "bytes")

    @classmethod
    def decode(cls, payload: bytes | str) -> QueueTransactionPayload:
        """
        Decode an event payload against the fixed schema.

        Args:
            payload: Raw log data as bytes or a 0x-prefixed hex string

        Returns:
            QueueTransactionPayload with value, queue_index, gas_limit, data

        Raises:
            DecodeError: If the payload is not valid hex, is truncated, or
                violates the ABI layout
        """
        try:
            raw = bytes(HexBytes(payload))
        except (ValueError, TypeError) as e:
            raise DecodeError(f"Event data is not valid hex: {e}") from e

        try:
            value, queue_index, gas_limit, data = decode(list(cls.SCHEMA), raw)
        except DecodingError as e:
            raise DecodeError(
                f"Event data ({len(raw)} bytes) does not match "
                f"({', '.join(cls.SCHEMA)}): {e}"
            ) from e

        logger.debug(f"Decoded QueueTransaction data: queue_index={queue_index}, gas_limit={gas_limit}")
        return QueueTransactionPayload(
            value=value,
            queue_index=queue_index,
            gas_limit=gas_limit,
            data=bytes(data),
        )

    @classmethod
    def encode(cls, value: int, queue_index: int, gas_limit: int, data: bytes) -> bytes:
        """ABI-encode fields with the same schema the decoder expects."""
        return encode(list(cls.SCHEMA), [value, queue_index, gas_limit, data])
