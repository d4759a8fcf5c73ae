"""Refresh cycle: list validators, fetch per-validator data, merge, publish."""

import asyncio
import logging
import time
from enum import Enum

from ..core.config import get_settings
from ..core.errors import FetchFailure, ListFailure, MonitorError
from ..core.types import (
    BlockEvent,
    OffChainStatus,
    OnChainBalances,
    RefreshResult,
    ValidatorRecord,
    ValidatorStatus,
)
from ..core.units import REWARD_UNIT, STAKE_UNIT, format_token_amount
from ..data.cache import SnapshotCache
from ..data.chain_reader import ChainReader
from ..data.names import NameStore

logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    IDLE = "idle"
    LISTING = "listing"
    FETCHING = "fetching"
    MERGING = "merging"
    PUBLISHED = "published"


def merge_record(
    address: str,
    balances: OnChainBalances,
    status: OffChainStatus,
    name: str | None,
) -> ValidatorRecord:
    """Combine chain balances, off-chain status and stored name into one record."""
    return ValidatorRecord(
        address=address,
        name=name or "",
        stake=format_token_amount(balances.stake, STAKE_UNIT),
        rewards=format_token_amount(balances.rewards, REWARD_UNIT),
        validated_blocks_count=status.validated_count,
        validated_blocks_status=(
            ValidatorStatus.ACTIVE if status.is_active else ValidatorStatus.INACTIVE
        ),
    )


class RefreshPipeline:
    """
    Keeps the SnapshotCache in step with the chain.

    One cycle runs at a time. Within a cycle every validator is fetched
    concurrently (up to max_concurrency at once); a validator whose fetch
    fails keeps its previous record while the others are updated. With
    isolate_failures=False any single failure discards the whole cycle.
    """

    def __init__(
        self,
        reader: ChainReader,
        names: NameStore,
        cache: SnapshotCache | None = None,
        max_concurrency: int | None = None,
        fetch_timeout: float | None = None,
        cycle_timeout: float | None = None,
        isolate_failures: bool | None = None,
    ):
        settings = get_settings()
        self.reader = reader
        self.names = names
        self.cache = cache if cache is not None else SnapshotCache()
        self.max_concurrency = max(1, max_concurrency or settings.max_concurrency)
        self.fetch_timeout = fetch_timeout or settings.fetch_timeout_seconds
        self.cycle_timeout = cycle_timeout or settings.cycle_timeout_seconds
        self.isolate_failures = (
            settings.isolate_fetch_failures if isolate_failures is None else isolate_failures
        )

        self.state = RefreshState.IDLE
        self.last_result: RefreshResult | None = None
        self._lock = asyncio.Lock()

    async def refresh(self, block_number: int | None = None) -> RefreshResult:
        """Run one full cycle. Waits for an in-flight cycle to finish first."""
        async with self._lock:
            started = time.monotonic()
            try:
                result = await asyncio.wait_for(
                    self._run_cycle(block_number), timeout=self.cycle_timeout
                )
            except asyncio.TimeoutError:
                logger.error(
                    f"Refresh for block {block_number} timed out after "
                    f"{self.cycle_timeout}s, snapshot left unchanged"
                )
                result = RefreshResult(block_number=block_number, aborted=True)
            finally:
                self.state = RefreshState.IDLE

            elapsed = time.monotonic() - started
            if not result.aborted:
                logger.info(
                    f"Refreshed {len(result.updated)}/{result.listed} validators "
                    f"for block {block_number} in {elapsed:.2f}s"
                )
            self.last_result = result
            return result

    async def _run_cycle(self, block_number: int | None) -> RefreshResult:
        result = RefreshResult(block_number=block_number)

        # Step 1: List current validator set
        self.state = RefreshState.LISTING
        try:
            addresses = await self.reader.list_validators()
        except ListFailure as e:
            logger.error(f"Refresh for block {block_number} aborted: {e}")
            result.aborted = True
            return result
        result.listed = len(addresses)

        # Step 2: Fetch chain, off-chain and name data for every validator
        self.state = RefreshState.FETCHING
        semaphore = asyncio.Semaphore(self.max_concurrency)
        fetched = await asyncio.gather(
            *(self._fetch_validator(address, semaphore) for address in addresses)
        )

        # Step 3: Merge what succeeded
        self.state = RefreshState.MERGING
        records: list[ValidatorRecord] = []
        for address, outcome in zip(addresses, fetched):
            if isinstance(outcome, MonitorError):
                result.failed[address] = str(outcome)
                continue
            balances, status, name = outcome
            try:
                records.append(merge_record(address, balances, status, name))
            except ValueError as e:
                failure = FetchFailure("merge", address, str(e))
                logger.warning(f"Keeping previous data for {address}: {failure}")
                result.failed[address] = str(failure)

        if result.failed and not self.isolate_failures:
            logger.error(
                f"Refresh for block {block_number} aborted: "
                f"{len(result.failed)} validator(s) failed"
            )
            result.aborted = True
            return result

        # Step 4: Publish to readers in one swap
        self.state = RefreshState.PUBLISHED
        self.cache.publish(records)
        result.updated = [record.address for record in records]
        return result

    async def _fetch_validator(
        self, address: str, semaphore: asyncio.Semaphore
    ) -> tuple[OnChainBalances, OffChainStatus, str | None] | MonitorError:
        """Fetch all three sources for one address; failures are returned, not raised."""
        async with semaphore:
            outcomes = await asyncio.gather(
                self._with_timeout("onchain", address, self.reader.fetch_on_chain(address)),
                self._with_timeout("offchain", address, self.reader.fetch_off_chain(address)),
                self._with_timeout("name", address, self.names.get(address)),
                return_exceptions=True,
            )

        for outcome in outcomes:
            if isinstance(outcome, MonitorError):
                logger.warning(f"Keeping previous data for {address}: {outcome}")
                return outcome
            if isinstance(outcome, BaseException):
                raise outcome
        return outcomes[0], outcomes[1], outcomes[2]

    async def _with_timeout(self, operation: str, address: str, awaitable):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.fetch_timeout)
        except asyncio.TimeoutError as e:
            raise FetchFailure(operation, address, f"timed out after {self.fetch_timeout}s") from e

    async def run(self, events: "asyncio.Queue[BlockEvent | None]") -> None:
        """
        Refresh once at startup, then once per block event.

        Events queued while a cycle is running are collapsed into a single
        follow-up cycle for the newest block. A None event stops the loop.
        """
        logger.info("Initial fetch and store...")
        await self._refresh_logged(None)

        while True:
            event = await events.get()
            stop = event is None
            coalesced = 0
            while not events.empty():
                pending = events.get_nowait()
                if pending is None:
                    stop = True
                else:
                    event = pending
                    coalesced += 1

            if event is not None:
                if coalesced:
                    logger.debug(f"Coalesced {coalesced} block event(s) into block {event.number}")
                logger.info(f"New block received: {event.number}, updating data...")
                await self._refresh_logged(event.number)
            if stop:
                return

    async def _refresh_logged(self, block_number: int | None) -> None:
        # Next block retries
        try:
            await self.refresh(block_number)
        except Exception:
            logger.exception(f"Error updating validator data for block {block_number}")
