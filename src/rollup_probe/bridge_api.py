"""
Client for the bridge indexer HTTP API.
"""

import logging
from typing import Any, TypeVar

import httpx

from .exceptions import BridgeApiError
from .models import UnclaimedWithdrawal, Withdrawal
from .utils.hex_utility import require_address

logger = logging.getLogger(__name__)

T = TypeVar("T", Withdrawal, UnclaimedWithdrawal)


class BridgeApiClient:
    """Fetches withdrawal records for an address from the bridge API."""

    PAGE_SIZE = 100

    def __init__(
        self,
        api_uri: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        """
        Initialize the client.

        Args:
            api_uri: Base URI of the API, e.g. https://sepolia-api-bridge-v2.scroll.io/api
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not api_uri:
            raise ValueError("Bridge API URI is required")
        self.api_uri = api_uri.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _get_results(self, path: str, address: str) -> list[dict[str, Any]]:
        params = {"address": address, "page": 1, "page_size": self.PAGE_SIZE}

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            logger.debug(f"GET {self.api_uri + path} {params}")
            try:
                response = await client.get(self.api_uri + path, params=params)
            except httpx.HTTPError as e:
                raise BridgeApiError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            raise BridgeApiError(f"HTTP error! status: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise BridgeApiError(f"Invalid JSON from {path}: {e}") from e

        if not isinstance(data, dict):
            raise BridgeApiError(f"Unexpected response from {path}: {type(data).__name__}")

        if data.get("errcode") != 0:
            raise BridgeApiError(f"API error: {data.get('errmsg')}")

        payload = data.get("data") or {}
        results = payload.get("results") or [] if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise BridgeApiError(f"Unexpected data from {path}: {payload!r}")
        return results

    @staticmethod
    def _parse(results: list[dict[str, Any]], record_type: type[T]) -> list[T]:
        try:
            return [record_type.from_api(result) for result in results]
        except (KeyError, TypeError, AttributeError) as e:
            raise BridgeApiError(f"Malformed {record_type.__name__} record: {e!r}") from e

    async def get_withdrawals(self, address: str) -> list[Withdrawal]:
        """Withdrawals initiated by address (first page)."""
        address = require_address(address, "account")
        results = await self._get_results("/l2/withdrawals", address)
        withdrawals = self._parse(results, Withdrawal)
        logger.info(f"Found {len(withdrawals)} withdrawals for {address}")
        return withdrawals

    async def get_unclaimed_withdrawals(self, address: str) -> list[UnclaimedWithdrawal]:
        """Withdrawals of address that have not been relayed on L1 yet."""
        address = require_address(address, "account")
        results = await self._get_results("/l2/unclaimed/withdrawals", address)
        withdrawals = self._parse(results, UnclaimedWithdrawal)
        logger.info(f"Found {len(withdrawals)} unclaimed withdrawals for {address}")
        return withdrawals
