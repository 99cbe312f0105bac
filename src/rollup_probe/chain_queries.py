"""
Miscellaneous read-only bridge queries.
"""

import logging

from web3 import Web3

from .utils.chain_client import ChainClient
from .utils.contract_utility import get_contract_abi
from .utils.hex_utility import require_address

logger = logging.getLogger(__name__)


async def get_finalized_block_height(client: ChainClient) -> int:
    """
    Height of the most recently finalized block.

    Not every network serves the "finalized" tag.
    """
    height = await client.get_finalized_block_number()
    logger.debug(f"Finalized block height: {height}")
    return height


async def get_l2_base_fee(client: ChainClient, gas_oracle_address: str) -> int:
    """Current L2 base fee as recorded by the L1 gas oracle."""
    gas_oracle_address = require_address(gas_oracle_address, "gas oracle")
    fee = await client.call_function(
        gas_oracle_address,
        get_contract_abi("L1GasOracle"),
        "l2BaseFee"
    )
    return int(fee)


async def get_l2_token_address(
    client: ChainClient,
    l1_token_address: str,
    gateway_router_address: str
) -> str:
    """
    Look up the L2 counterpart of an L1 token through the gateway router.

    Args:
        client: L1 chain client
        l1_token_address: Token address on L1
        gateway_router_address: L1 gateway router address

    Returns:
        Checksummed L2 token address
    """
    l1_token_address = require_address(l1_token_address, "L1 token")
    gateway_router_address = require_address(gateway_router_address, "gateway router")

    l2_token = await client.call_function(
        gateway_router_address,
        get_contract_abi("L1GatewayRouter"),
        "getL2ERC20Address",
        l1_token_address
    )
    l2_token = Web3.to_checksum_address(l2_token)
    logger.info(f"L1 token {l1_token_address} maps to L2 token {l2_token}")
    return l2_token
