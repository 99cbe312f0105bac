"""
Bounded polling of ERC-20 balances.

Used to confirm that a deposit, withdrawal or funding transfer has landed:
the holder's balance is read until it becomes positive or the attempt
budget runs out.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .exceptions import PollCancelledError
from .models import BalancePollResult, PollPolicy, PollState
from .utils.chain_client import ChainClient
from .utils.contract_utility import get_contract_abi
from .utils.hex_utility import require_address

logger = logging.getLogger(__name__)

AttemptObserver = Callable[[int, int], None]


class BalancePoller:
    """
    Polls balanceOf(holder) on a token contract.

    The loop is a small state machine: POLLING until a read returns a
    positive balance (SUCCESS) or the last allowed read returns zero
    (EXHAUSTED). Exhaustion is reported as a result, not an exception.
    """

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_attempt: AttemptObserver | None = None
    ) -> None:
        """
        Initialize the poller.

        Args:
            sleep: Suspend primitive used between attempts
            on_attempt: Called with (attempt, balance) after every read
        """
        self._sleep = sleep
        self._on_attempt = on_attempt
        self.erc20_abi = get_contract_abi("ERC20")

    async def poll(
        self,
        client: ChainClient,
        holder: str,
        token_address: str,
        policy: PollPolicy | None = None
    ) -> BalancePollResult:
        """
        Read the balance until it is positive or attempts run out.

        A failing read propagates at once without consuming a retry.

        Args:
            client: Client for the layer the token lives on
            holder: Account whose balance is read
            token_address: ERC-20 contract address
            policy: Attempt budget, interval and optional cancel event

        Returns:
            BalancePollResult in state SUCCESS or EXHAUSTED

        Raises:
            RpcCallError: If a balance read fails
            PollCancelledError: If the policy's cancel event is set
        """
        policy = policy or PollPolicy()
        holder = require_address(holder, "holder")
        token_address = require_address(token_address, "token")

        state = PollState.POLLING
        attempt = 0
        balance = 0

        while state is PollState.POLLING:
            if policy.cancelled:
                raise self._cancelled(attempt, balance)

            balance = int(await client.call_function(
                token_address, self.erc20_abi, "balanceOf", holder
            ))
            attempt += 1
            self._report(attempt, balance, policy, holder)

            if balance > 0:
                state = PollState.SUCCESS
            elif attempt >= policy.max_attempts:
                state = PollState.EXHAUSTED
            else:
                await self._wait(policy, attempt, balance)

        if state is PollState.EXHAUSTED:
            logger.warning(
                f"Balance of {holder} on {token_address} still zero after {attempt} attempts"
            )
        return BalancePollResult(state=state, balance=balance, attempts=attempt)

    async def await_balance(
        self,
        client: ChainClient,
        holder: str,
        token_address: str,
        policy: PollPolicy | None = None
    ) -> int:
        """Like poll(), but return only the final balance."""
        result = await self.poll(client, holder, token_address, policy)
        return result.balance

    def _report(self, attempt: int, balance: int, policy: PollPolicy, holder: str) -> None:
        logger.info(
            f"Attempt {attempt}/{policy.max_attempts}: balance of {holder[:10]}... is {balance}"
        )
        if self._on_attempt:
            self._on_attempt(attempt, balance)

    async def _wait(self, policy: PollPolicy, attempt: int, balance: int) -> None:
        """Sleep for the interval, waking early if the cancel event fires."""
        if policy.cancel_event is None:
            await self._sleep(policy.interval_seconds)
            return

        sleeper = asyncio.ensure_future(self._sleep(policy.interval_seconds))
        canceller = asyncio.ensure_future(policy.cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {sleeper, canceller}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (sleeper, canceller):
                if not task.done():
                    task.cancel()

        if canceller in done:
            raise self._cancelled(attempt, balance)

    @staticmethod
    def _cancelled(attempt: int, balance: int) -> PollCancelledError:
        logger.info(f"Balance poll cancelled after {attempt} attempts")
        return PollCancelledError(
            f"Balance poll cancelled after {attempt} attempts",
            attempts=attempt,
            last_balance=balance,
        )
