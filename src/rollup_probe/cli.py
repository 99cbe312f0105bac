#!/usr/bin/env python3
"""Command-line entry point for the rollup probe.

Loads configuration from the environment, runs one read-only query and
logs its result.
"""

import argparse
import asyncio
import logging
import os
import sys

from .balance_poller import BalancePoller
from .bridge_api import BridgeApiClient
from .chain_queries import get_finalized_block_height, get_l2_base_fee, get_l2_token_address
from .config import ProbeConfig
from .exceptions import ProbeError
from .message_resolver import CrossDomainMessageResolver
from .models import PollPolicy
from .queue_reader import PendingQueueIndexReader
from .receipt_locator import ReceiptLogLocator
from .utils.chain_client import ChainClientFactory

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rollup-probe",
        description="Inspect L1 -> L2 bridge messages and confirm balances",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  L1_RPC_URL                - L1 endpoint URL or preset
  L2_RPC_URL                - L2 endpoint URL or preset
  RPC_API_KEY               - Optional access key for both endpoints
  L1_MESSAGE_QUEUE_ADDRESS  - L1 message queue proxy address
  L1_GAS_ORACLE_ADDRESS     - L1 gas oracle (for 'l2-base-fee')
  L1_GATEWAY_ROUTER_ADDRESS - L1 gateway router (for 'l2-token')
  BRIDGE_API_URI            - Bridge indexer API (for 'withdrawals')
  POLL_MAX_ATTEMPTS         - Balance poll attempts (default: 5)
  POLL_INTERVAL_MS          - Balance poll interval (default: 15000)
  REQUEST_TIMEOUT           - RPC and API timeout in seconds (default: 30)
  LOG_LEVEL                 - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser(
        "resolve-message", help="Resolve an L1 enqueue transaction to its L2 message"
    )
    resolve.add_argument("tx_hash", help="L1 transaction hash")
    resolve.add_argument(
        "--wait",
        action="store_true",
        default=False,
        help="Wait for the transaction to be mined (uses the poll settings)"
    )

    subparsers.add_parser("pending-index", help="Read the pending L1 queue index")

    height = subparsers.add_parser(
        "finalized-height", help="Read the most recent finalized block height"
    )
    height.add_argument("--layer", choices=["l1", "l2"], default="l1")

    subparsers.add_parser("l2-base-fee", help="Read the L2 base fee from the L1 gas oracle")

    token = subparsers.add_parser(
        "l2-token", help="Look up the L2 counterpart of an L1 token"
    )
    token.add_argument("l1_token", help="L1 token address")

    balance = subparsers.add_parser(
        "await-balance", help="Poll a token balance until it is non-zero"
    )
    balance.add_argument("holder", help="Account address")
    balance.add_argument("token", help="ERC-20 token address")
    balance.add_argument("--layer", choices=["l1", "l2"], default="l2")
    balance.add_argument("--attempts", type=int, default=None)
    balance.add_argument("--interval-ms", type=int, default=None)

    withdrawals = subparsers.add_parser(
        "withdrawals", help="List bridge withdrawals for an address"
    )
    withdrawals.add_argument("address", help="Account address")
    withdrawals.add_argument("--unclaimed", action="store_true", default=False)

    return parser


async def execute(args: argparse.Namespace, config: ProbeConfig) -> int:
    """Run the selected command. Returns the process exit code."""
    match args.command:
        case "resolve-message":
            async with await ChainClientFactory.create(config.l1) as client:
                if args.wait:
                    await ReceiptLogLocator().wait_for_receipt(
                        client,
                        args.tx_hash,
                        interval_seconds=config.polling.interval_millis / 1000,
                        max_attempts=config.polling.max_attempts,
                    )
                message = await CrossDomainMessageResolver().resolve(
                    client, args.tx_hash, config.contracts.message_queue_address
                )
            logger.info(f"Queue index: {message.queue_index}")
            logger.info(f"Message commitment: {message.message_commitment_hex}")

        case "pending-index":
            async with await ChainClientFactory.create(config.l1) as client:
                index = await PendingQueueIndexReader().read_pending_index(
                    client, config.contracts.message_queue_address
                )
            logger.info(f"Pending queue index: {index}")

        case "finalized-height":
            descriptor = config.l1 if args.layer == "l1" else config.l2
            async with await ChainClientFactory.create(descriptor) as client:
                height = await get_finalized_block_height(client)
            logger.info(f"Finalized block height ({args.layer}): {height}")

        case "l2-base-fee":
            if not config.contracts.gas_oracle_address:
                raise ValueError("L1_GAS_ORACLE_ADDRESS environment variable is required for 'l2-base-fee'")
            async with await ChainClientFactory.create(config.l1) as client:
                fee = await get_l2_base_fee(client, config.contracts.gas_oracle_address)
            logger.info(f"L2 base fee: {fee} wei")

        case "l2-token":
            if not config.contracts.gateway_router_address:
                raise ValueError("L1_GATEWAY_ROUTER_ADDRESS environment variable is required for 'l2-token'")
            async with await ChainClientFactory.create(config.l1) as client:
                l2_token = await get_l2_token_address(
                    client, args.l1_token, config.contracts.gateway_router_address
                )
            logger.info(f"L2 token: {l2_token}")

        case "await-balance":
            policy = PollPolicy(
                max_attempts=(
                    args.attempts if args.attempts is not None
                    else config.polling.max_attempts
                ),
                interval_millis=(
                    args.interval_ms if args.interval_ms is not None
                    else config.polling.interval_millis
                ),
            )
            descriptor = config.l1 if args.layer == "l1" else config.l2
            async with await ChainClientFactory.create(descriptor) as client:
                result = await BalancePoller().poll(client, args.holder, args.token, policy)
            if not result.succeeded:
                logger.warning(f"No balance after {result.attempts} attempts; last balance {result.balance}")
                return 2
            logger.info(f"Balance: {result.balance}")

        case "withdrawals":
            if not config.bridge_api_uri:
                raise ValueError("BRIDGE_API_URI environment variable is required for 'withdrawals'")
            api = BridgeApiClient(config.bridge_api_uri, timeout=config.l1.request_timeout)
            if args.unclaimed:
                records = await api.get_unclaimed_withdrawals(args.address)
            else:
                records = await api.get_withdrawals(args.address)
            for record in records:
                logger.info(f"  {record.hash} block={record.block_number}")

    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse arguments, load config, run the command."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = ProbeConfig.from_env()
        config.log_config()
        return await execute(args, config)

    except ProbeError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - L1_RPC_URL / L2_RPC_URL: chain endpoints")
        logger.error("  - L1_MESSAGE_QUEUE_ADDRESS: L1 message queue proxy")
        return 1


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
        sys.exit(130)
