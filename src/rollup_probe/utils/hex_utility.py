"""
Validation helpers for hex-encoded chain identifiers.
"""

import re

from web3 import Web3

from ..exceptions import InvalidInputError

TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def require_address(address: str, label: str = "contract") -> str:
    """
    Validate a 20-byte address and return it checksummed.

    Accepts lowercase, uppercase or correctly checksummed input.

    :param address: Hex address with 0x prefix
    :param label: Name used in the error message
    :return: Checksummed address
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidInputError(f"Invalid {label} address: {address!r}")
    return Web3.to_checksum_address(address)


def require_tx_hash(tx_hash: str) -> str:
    """
    Validate a 32-byte transaction hash and return it lowercased.

    :param tx_hash: Hex hash with 0x prefix
    :return: Normalized hash
    """
    if not isinstance(tx_hash, str) or not TX_HASH_PATTERN.match(tx_hash):
        raise InvalidInputError(
            f"Invalid transaction hash: {tx_hash!r}. Expected 0x followed by 64 hex characters"
        )
    return tx_hash.lower()
