"""Operations behind the HTTP API and CLI."""

import logging

from ..core.errors import DuplicateNameFailure, FetchFailure
from ..core.types import ChainSummary, ValidatorRecord
from ..core.units import STAKE_UNIT, decode_epoch, format_token_amount
from ..data.cache import SnapshotCache
from ..data.chain_reader import ChainReader
from ..data.names import NameStore
from .refresh import RefreshPipeline

logger = logging.getLogger(__name__)


class ValidatorService:
    """Read side over the snapshot, plus name assignment."""

    def __init__(
        self,
        reader: ChainReader | None = None,
        names: NameStore | None = None,
        pipeline: RefreshPipeline | None = None,
    ):
        self.reader = reader or ChainReader()
        self.names = names or NameStore()
        self.pipeline = pipeline or RefreshPipeline(self.reader, self.names)

    @property
    def cache(self) -> SnapshotCache:
        return self.pipeline.cache

    def list_validators(self) -> list[ValidatorRecord]:
        """Current snapshot, most recently updated validators first."""
        return self.cache.list_all()

    async def add_name(self, address: str, name: str) -> None:
        """
        Assign a name to a validator address.

        The name shows up in /validators after the next refresh cycle.
        Raises DuplicateNameFailure if a name is already set, StoreFailure
        if the store is unavailable.
        """
        if not await self.names.put(address, name):
            logger.info(f"Rejected name {name!r} for {address}: already assigned")
            raise DuplicateNameFailure(address)

    async def get_chain_summary(self) -> ChainSummary:
        """Fetch epoch and total stake fresh; count comes from the snapshot."""
        epoch, total_staked = await self.reader.fetch_chain_summary()
        try:
            current_epoch = decode_epoch(epoch)
        except ValueError as e:
            raise FetchFailure("chaindata", None, f"undecodable epoch {epoch!r}") from e
        return ChainSummary(
            current_block_epoch=current_epoch,
            total_staked_amount=format_token_amount(total_staked, STAKE_UNIT),
            total_validator_addresses=self.cache.size,
        )

    async def close(self) -> None:
        await self.reader.close()
