#!/usr/bin/env python3
"""Tests for the command-line entry point."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from rollup_probe import cli
from rollup_probe.config import ProbeConfig
from rollup_probe.exceptions import PollCancelledError
from rollup_probe.utils.chain_client import ChainClient

from conftest import (
    COMMITMENT,
    HOLDER_ADDRESS,
    QUEUE_ADDRESS,
    TOKEN_ADDRESS,
    TX_HASH,
    checksum,
    make_log,
    make_receipt,
    queue_payload,
)

ENV = {
    "L1_RPC_URL": "localhost",
    "L2_RPC_URL": "scroll-sepolia",
    "L1_MESSAGE_QUEUE_ADDRESS": QUEUE_ADDRESS,
    "POLL_MAX_ATTEMPTS": "2",
    "POLL_INTERVAL_MS": "0",
}

GAS_ORACLE_ADDRESS = "0x" + "5a" * 20
GATEWAY_ROUTER_ADDRESS = "0x" + "6b" * 20
L2_TOKEN_ADDRESS = "0x" + "ef" * 20


@pytest.fixture
def config():
    with patch.dict(os.environ, ENV, clear=True):
        return ProbeConfig.from_env()


@pytest.fixture
def full_config():
    env = dict(
        ENV,
        L1_GAS_ORACLE_ADDRESS=GAS_ORACLE_ADDRESS,
        L1_GATEWAY_ROUTER_ADDRESS=GATEWAY_ROUTER_ADDRESS,
    )
    with patch.dict(os.environ, env, clear=True):
        return ProbeConfig.from_env()


@pytest.fixture
def patched_client(mock_client):
    """Patch the factory so every command gets mock_client."""
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    with patch.object(cli.ChainClientFactory, "create", AsyncMock(return_value=mock_client)):
        yield mock_client


@pytest.fixture
def unreachable_client(config):
    """Patch the factory to return a real client whose transport refuses connections."""
    w3 = MagicMock()
    refused = aiohttp.ClientOSError(111, "Connection refused")
    w3.eth.get_transaction_receipt = AsyncMock(side_effect=refused)
    w3.eth.contract.return_value.functions.balanceOf.return_value.call = AsyncMock(
        side_effect=refused
    )
    w3.provider.disconnect = AsyncMock()
    client = ChainClient(w3, config.l1)
    with patch.object(cli.ChainClientFactory, "create", AsyncMock(return_value=client)):
        yield client


class TestCli:
    """Test suite for the CLI commands."""

    def test_parser(self):
        args = cli.build_parser().parse_args(
            ["await-balance", "0x01", "0x02", "--layer", "l1", "--attempts", "3"]
        )
        assert args.command == "await-balance"
        assert args.layer == "l1"
        assert args.attempts == 3
        assert args.interval_ms is None

    def test_parser_query_commands(self):
        parser = cli.build_parser()

        assert parser.parse_args(["finalized-height"]).layer == "l1"
        assert parser.parse_args(["l2-token", TOKEN_ADDRESS]).l1_token == TOKEN_ADDRESS
        assert parser.parse_args(["resolve-message", TX_HASH, "--wait"]).wait
        assert not parser.parse_args(["resolve-message", TX_HASH]).wait

    @pytest.mark.asyncio
    async def test_pending_index(self, config, patched_client):
        patched_client.call_function.return_value = 17
        args = cli.build_parser().parse_args(["pending-index"])

        assert await cli.execute(args, config) == 0
        patched_client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resolve_message(self, config, patched_client, caplog):
        patched_client.get_transaction_receipt.return_value = make_receipt(
            make_log(QUEUE_ADDRESS, queue_payload(8))
        )
        patched_client.call_function.return_value = COMMITMENT
        args = cli.build_parser().parse_args(["resolve-message", TX_HASH])

        with caplog.at_level("INFO"):
            assert await cli.execute(args, config) == 0

        assert "Queue index: 8" in caplog.text

    @pytest.mark.asyncio
    async def test_await_balance_exhausted_exit_code(self, config, patched_client):
        patched_client.call_function.return_value = 0
        args = cli.build_parser().parse_args(["await-balance", "0x" + "34" * 20, "0x" + "12" * 20])

        assert await cli.execute(args, config) == 2
        assert patched_client.call_function.await_count == 2

    @pytest.mark.asyncio
    async def test_withdrawals_requires_api_uri(self, config):
        args = cli.build_parser().parse_args(["withdrawals", "0x" + "34" * 20])

        with pytest.raises(ValueError, match="BRIDGE_API_URI"):
            await cli.execute(args, config)

    @pytest.mark.asyncio
    async def test_main_reports_configuration_error(self):
        with patch.dict(os.environ, {}, clear=True):
            assert await cli.main(["pending-index"]) == 1

    @pytest.mark.asyncio
    async def test_main_reports_probe_error(self, patched_client):
        patched_client.get_transaction_receipt.return_value = None
        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(["resolve-message", TX_HASH]) == 1

    @pytest.mark.asyncio
    async def test_resolve_message_waits_for_receipt(self, config, patched_client):
        receipt = make_receipt(make_log(QUEUE_ADDRESS, queue_payload(3)))
        patched_client.get_transaction_receipt.side_effect = [None, receipt, receipt]
        patched_client.call_function.return_value = COMMITMENT
        args = cli.build_parser().parse_args(["resolve-message", TX_HASH, "--wait"])

        assert await cli.execute(args, config) == 0
        assert patched_client.get_transaction_receipt.await_count == 3

    @pytest.mark.asyncio
    async def test_resolve_message_wait_gives_up(self, patched_client):
        patched_client.get_transaction_receipt.return_value = None

        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(["resolve-message", TX_HASH, "--wait"]) == 1

        # POLL_MAX_ATTEMPTS bounds the receipt wait
        assert patched_client.get_transaction_receipt.await_count == 2

    @pytest.mark.asyncio
    async def test_finalized_height_on_l2(self, config, patched_client, caplog):
        patched_client.get_finalized_block_number.return_value = 4242
        args = cli.build_parser().parse_args(["finalized-height", "--layer", "l2"])

        with caplog.at_level("INFO"):
            assert await cli.execute(args, config) == 0

        cli.ChainClientFactory.create.assert_awaited_once_with(config.l2)
        assert "Finalized block height (l2): 4242" in caplog.text

    @pytest.mark.asyncio
    async def test_l2_base_fee(self, full_config, patched_client, caplog):
        patched_client.call_function.return_value = 1_000_000
        args = cli.build_parser().parse_args(["l2-base-fee"])

        with caplog.at_level("INFO"):
            assert await cli.execute(args, full_config) == 0

        assert patched_client.call_function.await_args.args[0] == checksum(GAS_ORACLE_ADDRESS)
        assert patched_client.call_function.await_args.args[2] == "l2BaseFee"
        assert "L2 base fee: 1000000 wei" in caplog.text

    @pytest.mark.asyncio
    async def test_l2_base_fee_requires_gas_oracle(self, config, patched_client):
        args = cli.build_parser().parse_args(["l2-base-fee"])

        with pytest.raises(ValueError, match="L1_GAS_ORACLE_ADDRESS"):
            await cli.execute(args, config)

        patched_client.call_function.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_l2_token(self, full_config, patched_client, caplog):
        patched_client.call_function.return_value = L2_TOKEN_ADDRESS
        args = cli.build_parser().parse_args(["l2-token", TOKEN_ADDRESS])

        with caplog.at_level("INFO"):
            assert await cli.execute(args, full_config) == 0

        patched_client.call_function.assert_awaited_once_with(
            checksum(GATEWAY_ROUTER_ADDRESS),
            patched_client.call_function.await_args.args[1],
            "getL2ERC20Address",
            checksum(TOKEN_ADDRESS),
        )
        assert f"L2 token: {checksum(L2_TOKEN_ADDRESS)}" in caplog.text

    @pytest.mark.asyncio
    async def test_l2_token_requires_gateway_router(self, config, patched_client):
        args = cli.build_parser().parse_args(["l2-token", TOKEN_ADDRESS])

        with pytest.raises(ValueError, match="L1_GATEWAY_ROUTER_ADDRESS"):
            await cli.execute(args, config)

    @pytest.mark.asyncio
    async def test_attempts_zero_is_rejected(self, config, patched_client):
        args = cli.build_parser().parse_args(
            ["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS, "--attempts", "0"]
        )

        with pytest.raises(ValueError, match="max_attempts"):
            await cli.execute(args, config)

        patched_client.call_function.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_attempts_flag_overrides_config(self, config, patched_client):
        patched_client.call_function.return_value = 0
        args = cli.build_parser().parse_args(
            ["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS, "--attempts", "4"]
        )

        assert await cli.execute(args, config) == 2
        assert patched_client.call_function.await_count == 4


class TestCliExitCodes:
    """Test suite for exit codes reported by main()."""

    @pytest.mark.asyncio
    async def test_unreachable_endpoint_exits_with_error(self, unreachable_client, caplog):
        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(["resolve-message", TX_HASH]) == 1

        assert "ChainConnectionError" in caplog.text
        unreachable_client.w3.provider.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_balance_read_transport_failure_exits_with_error(self, unreachable_client, caplog):
        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS]) == 1

        assert "RpcCallError" in caplog.text

    @pytest.mark.asyncio
    async def test_exhausted_balance_exits_with_two(self, patched_client):
        patched_client.call_function.return_value = 0

        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS]) == 2

        assert patched_client.call_function.await_count == 2

    @pytest.mark.asyncio
    async def test_positive_balance_exits_with_zero(self, patched_client):
        patched_client.call_function.side_effect = [0, 9]

        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS]) == 0

    @pytest.mark.asyncio
    async def test_cancelled_poll_exits_with_error(self, patched_client):
        cancelled = PollCancelledError("Balance poll cancelled after 1 attempts", attempts=1)

        with patch.dict(os.environ, ENV, clear=True), \
                patch.object(cli.BalancePoller, "poll", AsyncMock(side_effect=cancelled)):
            assert await cli.main(["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS]) == 1

    @pytest.mark.asyncio
    async def test_attempts_zero_exits_with_error(self, patched_client):
        with patch.dict(os.environ, ENV, clear=True):
            assert await cli.main(
                ["await-balance", HOLDER_ADDRESS, TOKEN_ADDRESS, "--attempts", "0"]
            ) == 1
