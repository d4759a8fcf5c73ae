"""Combined on-chain and off-chain reads, with failures mapped to the monitor's taxonomy."""

import asyncio
import logging

from ..core.errors import FetchFailure, ListFailure
from ..core.types import OffChainStatus, OnChainBalances
from .onchain import OnChainDataProvider
from .status_api import BlockStatusProvider

logger = logging.getLogger(__name__)


class ChainReader:
    """Every external read the refresh pipeline and /chaindata need."""

    def __init__(
        self,
        onchain: OnChainDataProvider | None = None,
        status: BlockStatusProvider | None = None,
    ):
        self.onchain = onchain or OnChainDataProvider()
        self.status = status or BlockStatusProvider()

    async def list_validators(self) -> list[str]:
        """Get the current validator set. Raises ListFailure."""
        try:
            return await self.onchain.get_validators()
        except Exception as e:
            raise ListFailure(f"Cannot list validators: {e}") from e

    async def fetch_on_chain(self, address: str) -> OnChainBalances:
        """Get stake and reward balances. Raises FetchFailure."""
        try:
            stake, rewards = await asyncio.gather(
                self.onchain.get_account_stake(address),
                self.onchain.get_reward_balance(address),
            )
        except Exception as e:
            raise FetchFailure("onchain", address, str(e)) from e
        return OnChainBalances(stake=stake, rewards=rewards)

    async def fetch_off_chain(self, address: str) -> OffChainStatus:
        """Get activity and block counter from the status API. Raises FetchFailure."""
        try:
            return await self.status.get_status(address)
        except Exception as e:
            raise FetchFailure("offchain", address, str(e)) from e

    async def fetch_chain_summary(self) -> tuple[str | int | bytes, int]:
        """Get the raw current epoch and total staked amount. Raises FetchFailure."""
        try:
            epoch, total_staked = await asyncio.gather(
                self.onchain.get_current_block_epoch(),
                self.onchain.get_staked_amount(),
            )
        except Exception as e:
            raise FetchFailure("chaindata", None, str(e)) from e
        return epoch, total_staked

    async def close(self) -> None:
        try:
            await self.status.aclose()
        finally:
            await self.onchain.close()
