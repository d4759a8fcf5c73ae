"""In-memory snapshot of merged validator records."""

import logging
from collections import OrderedDict
from typing import Iterable

from ..core.types import ValidatorRecord

logger = logging.getLogger(__name__)


class SnapshotCache:
    """
    Last-known record per validator address, ordered by update recency.

    Writers never mutate the live map: each upsert or publish builds a new
    OrderedDict and swaps it in, so a reader iterating a snapshot never sees
    a half-applied batch. Records themselves are frozen models.
    """

    def __init__(self) -> None:
        self._records: OrderedDict[str, ValidatorRecord] = OrderedDict()

    def upsert(self, record: ValidatorRecord) -> None:
        """Replace any record for this address and mark it most recent."""
        self.publish([record])

    def publish(self, records: Iterable[ValidatorRecord]) -> None:
        """Upsert a batch in order as one atomic swap."""
        updated = OrderedDict(self._records)
        for record in records:
            # Move to end so the latest upsert is listed first
            updated.pop(record.address, None)
            updated[record.address] = record
        self._records = updated

    def list_all(self) -> list[ValidatorRecord]:
        """Point-in-time snapshot, most recently upserted first."""
        return list(reversed(self._records.values()))

    def get(self, address: str) -> ValidatorRecord | None:
        return self._records.get(address)

    @property
    def size(self) -> int:
        """Current number of validators in the snapshot."""
        return len(self._records)
