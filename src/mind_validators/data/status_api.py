"""Fetch validator activity and block counters from the explorer API."""

import asyncio
import logging

import httpx

from ..core.config import get_settings
from ..core.types import OffChainStatus

logger = logging.getLogger(__name__)


class BlockStatusProvider:
    """
    Queries the block counter API, keyed by validator address.

    The status endpoint returns something like:
        {"has_validated_blocks": true, "validations_count": 42}

    Either field may be missing; a missing flag means inactive and a
    missing counter means zero.
    """

    def __init__(
        self,
        status_url: str | None = None,
        counter_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.status_url = status_url or settings.block_status_api_url
        self.counter_url = counter_url or settings.block_counter_api_url
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    async def _get_json(self, base_url: str, address: str) -> dict:
        response = await self._client.get(f"{base_url}{address}")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected payload from {base_url}: {type(data).__name__}")
        return data

    async def get_status(self, address: str) -> OffChainStatus:
        """
        Get activity flag and validation count for an address.

        Raises httpx.HTTPError or ValueError on a failed or malformed response.
        """
        if self.counter_url:
            status, counters = await asyncio.gather(
                self._get_json(self.status_url, address),
                self._get_json(self.counter_url, address),
            )
        else:
            status = counters = await self._get_json(self.status_url, address)

        return OffChainStatus(
            is_active=bool(status.get("has_validated_blocks", False)),
            validated_count=int(counters.get("validations_count") or 0),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
