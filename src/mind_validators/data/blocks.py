"""New-block notifications delivered as events on a queue."""

import asyncio
import logging

from ..core.config import get_settings
from ..core.types import BlockEvent
from .onchain import OnChainDataProvider

logger = logging.getLogger(__name__)


def make_block_queue() -> "asyncio.Queue[BlockEvent | None]":
    """Queue holding at most one pending block; extra blocks are coalesced."""
    return asyncio.Queue(maxsize=1)


class BlockWatcher:
    """
    Polls the latest block number and publishes a BlockEvent per new block.

    The first poll only records a baseline. When the queue is full the
    consumer is still busy with an earlier block, so the event is dropped:
    the pending refresh will read current state anyway.
    """

    def __init__(
        self,
        onchain: OnChainDataProvider,
        events: "asyncio.Queue[BlockEvent | None]",
        poll_interval: float | None = None,
    ):
        self.onchain = onchain
        self.events = events
        self.poll_interval = poll_interval or get_settings().block_poll_interval
        self.last_block: int | None = None

    async def poll_once(self) -> BlockEvent | None:
        """Check for a new block, publishing an event if one arrived."""
        number = await self.onchain.get_block_number()
        if self.last_block is None:
            self.last_block = number
            logger.info(f"Watching blocks from #{number}")
            return None
        if number <= self.last_block:
            return None

        self.last_block = number
        event = BlockEvent(number=number)
        try:
            self.events.put_nowait(event)
        except asyncio.QueueFull:
            logger.debug(f"Refresh already pending, coalescing block #{number}")
        return event

    async def run(self) -> None:
        """Poll until cancelled."""
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                logger.warning(f"Failed to poll block number: {e}")
            await asyncio.sleep(self.poll_interval)
