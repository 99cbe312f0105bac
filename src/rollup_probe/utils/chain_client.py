"""
Read-only chain client and its factory.

The client wraps an AsyncWeb3 instance behind the handful of calls the
probe needs, so HTTP and WebSocket transports look the same to callers.
"""

import asyncio
import logging
from typing import Any

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ProviderConnectionError, TransactionNotFound, Web3Exception
from web3.providers import WebSocketProvider
from web3.types import TxReceipt

from ..config import ConnectionDescriptor
from ..exceptions import ChainConnectionError, RpcCallError

logger = logging.getLogger(__name__)

# Failures that mean the endpoint could not be reached
TRANSPORT_ERRORS = (ProviderConnectionError, aiohttp.ClientError, OSError, asyncio.TimeoutError)

# Failures that mean the read call itself did not succeed
CALL_ERRORS = (Web3Exception, *TRANSPORT_ERRORS)


class ChainClient:
    """
    Handle for issuing read-only RPC calls against one chain endpoint.

    Use as an async context manager, or call close() when done.
    """

    def __init__(self, w3: AsyncWeb3, descriptor: ConnectionDescriptor) -> None:
        """
        Initialize the ChainClient.

        Args:
            w3: Connected (or lazily connecting) AsyncWeb3 instance
            descriptor: Endpoint the instance was built from
        """
        self.w3 = w3
        self.descriptor = descriptor

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_transaction_receipt(self, tx_hash: str) -> TxReceipt | None:
        """
        Fetch the receipt of a mined transaction.

        Returns None when the node does not know the transaction or it is not
        mined yet.

        Raises:
            ChainConnectionError: If the endpoint cannot be reached
            RpcCallError: If the node rejects the request
        """
        try:
            return await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except TRANSPORT_ERRORS as e:
            raise self._unreachable(e) from e
        except Web3Exception as e:
            raise RpcCallError(
                f"eth_getTransactionReceipt failed: {e}", "eth_getTransactionReceipt"
            ) from e

    async def call_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        *args: Any
    ) -> Any:
        """
        Issue an eth_call against a contract view function.

        Args:
            address: Contract address
            abi: Contract ABI containing the function
            function_name: Name of the view function
            *args: Function arguments

        Returns:
            The decoded return value

        Raises:
            RpcCallError: If the call fails for any transport or contract reason
        """
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=abi
        )
        if not hasattr(contract.functions, function_name):
            raise RpcCallError(f"Function {function_name} not found in contract ABI", function_name)

        try:
            result = await getattr(contract.functions, function_name)(*args).call()
        except CALL_ERRORS as e:
            raise RpcCallError(
                f"Call to {function_name} on {address} failed: {e}", function_name
            ) from e

        logger.debug(f"{function_name}{args} on {address} -> {result!r}")
        return result

    async def get_finalized_block_number(self) -> int:
        """Number of the most recent finalized block."""
        try:
            block = await self.w3.eth.get_block("finalized", full_transactions=False)
        except TRANSPORT_ERRORS as e:
            raise self._unreachable(e) from e
        except Web3Exception as e:
            raise RpcCallError(
                f"eth_getBlockByNumber(finalized) failed: {e}", "eth_getBlockByNumber"
            ) from e
        return int(block["number"])

    def _unreachable(self, error: BaseException) -> ChainConnectionError:
        return ChainConnectionError(
            f"Endpoint {self.descriptor.display_url} unreachable: {error}"
        )

    async def close(self) -> None:
        """Release the transport."""
        provider = self.w3.provider
        if hasattr(provider, "disconnect"):
            try:
                await provider.disconnect()
            except (Web3Exception, OSError) as e:
                logger.warning(f"Error during disconnect from {self.descriptor.display_url}: {e}")


class ChainClientFactory:
    """Builds ChainClient instances from connection descriptors."""

    @staticmethod
    async def create(
        descriptor: ConnectionDescriptor | str,
        verify_connection: bool = False
    ) -> ChainClient:
        """
        Create a read-only client for the endpoint.

        WebSocket endpoints are connected immediately; HTTP endpoints connect
        on first use unless verify_connection is set.

        Args:
            descriptor: Endpoint descriptor, or a URL / preset name
            verify_connection: Probe the endpoint before returning

        Returns:
            ChainClient for the endpoint

        Raises:
            ChainConnectionError: If the descriptor is invalid or the endpoint
                cannot be reached
        """
        if isinstance(descriptor, str):
            descriptor = ConnectionDescriptor(descriptor)

        url = descriptor.resolved_url
        if descriptor.is_websocket:
            w3 = AsyncWeb3(
                WebSocketProvider(url, request_timeout=descriptor.request_timeout)
            )
            logger.info(f"Connecting to WebSocket: {descriptor.display_url}")
            try:
                await w3.provider.connect()
            except (Web3Exception, OSError, asyncio.TimeoutError) as e:
                raise ChainConnectionError(
                    f"Failed to connect to {descriptor.display_url}: {e}"
                ) from e
        else:
            request_kwargs: dict[str, Any] = {
                "timeout": aiohttp.ClientTimeout(total=descriptor.request_timeout)
            }
            if headers := descriptor.headers:
                request_kwargs["headers"] = headers
            w3 = AsyncWeb3(AsyncHTTPProvider(url, request_kwargs=request_kwargs))
            logger.debug(f"Created HTTP client for {descriptor.display_url}")

        client = ChainClient(w3, descriptor)

        if verify_connection and not await w3.is_connected():
            await client.close()
            raise ChainConnectionError(f"Failed to connect to {descriptor.display_url}")

        return client
