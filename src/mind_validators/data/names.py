"""SQLite key-value store for operator-assigned validator names."""

import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ..core.config import get_settings
from ..core.errors import StoreFailure

logger = logging.getLogger(__name__)


class NameStore:
    """
    Maps validator address -> human-readable name.

    Names are write-once: put() never overwrites an existing entry. The
    existence check and the insert are one statement against the primary
    key, so concurrent assignments for the same address cannot both win.
    """

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path or get_settings().names_db_path)
        self._initialized = False

    async def init_db(self) -> None:
        """Create the schema if it doesn't exist yet."""
        if self._initialized:
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS validator_names (
                        address TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StoreFailure(f"Cannot initialize name store at {self.db_path}: {e}") from e
        self._initialized = True

    async def get(self, address: str) -> str | None:
        """Return the name assigned to an address, or None if unset."""
        await self.init_db()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(
                    "SELECT name FROM validator_names WHERE address = ?",
                    (address,),
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreFailure(f"Cannot read name for {address}: {e}") from e
        return row[0] if row is not None else None

    async def put(self, address: str, name: str) -> bool:
        """Assign a name to an address.

        Returns:
            True if the name was stored, False if the address already has one
        """
        await self.init_db()
        now = datetime.now(timezone.utc).isoformat()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute("""
                    INSERT INTO validator_names (address, name, created_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(address) DO NOTHING
                """, (address, name, now))
                await db.commit()
                stored = cursor.rowcount == 1
        except aiosqlite.Error as e:
            raise StoreFailure(f"Cannot store name for {address}: {e}") from e

        if stored:
            logger.info(f"Assigned name {name!r} to {address}")
        return stored

    async def all(self) -> dict[str, str]:
        """Get every assigned name, oldest first."""
        await self.init_db()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(
                    "SELECT address, name FROM validator_names ORDER BY created_at, rowid"
                ) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreFailure(f"Cannot list names: {e}") from e
        return {address: name for address, name in rows}
