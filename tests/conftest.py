"""
Pytest fixtures for the validator monitor. External reads are faked; the
name store uses a temporary SQLite file.
"""

from __future__ import annotations

import asyncio

import pytest

from mind_validators.core.errors import FetchFailure, ListFailure
from mind_validators.core.types import OffChainStatus, OnChainBalances
from mind_validators.data.cache import SnapshotCache
from mind_validators.data.names import NameStore
from mind_validators.services.refresh import RefreshPipeline
from mind_validators.services.validator_service import ValidatorService

# Checksummed addresses
VALIDATOR_A = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
VALIDATOR_B = "0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84"
VALIDATOR_C = "0xdA7dE2ECdDfccC6c3AF10108Db212ACBBf9EA83F"

ONE_TOKEN = 10**18


class FakeChainReader:
    """In-memory stand-in for ChainReader with switchable failures."""

    def __init__(self, validators=(), balances=None, statuses=None):
        self.validators = list(validators)
        self.balances: dict[str, tuple[int, int]] = dict(balances or {})
        self.statuses: dict[str, OffChainStatus] = dict(statuses or {})
        self.epoch: str | int | bytes = "0x1a"
        self.total_staked = 5 * ONE_TOKEN

        self.list_error = False
        self.summary_error = False
        self.fail_on_chain: set[str] = set()
        self.fail_off_chain: set[str] = set()
        self.hang: set[str] = set()
        self.delay = 0.0

        self.list_calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def list_validators(self) -> list[str]:
        self.list_calls += 1
        if self.list_error:
            raise ListFailure("registry unavailable")
        return list(self.validators)

    async def fetch_on_chain(self, address: str) -> OnChainBalances:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if address in self.hang:
                await asyncio.sleep(3600)
            if address in self.fail_on_chain:
                raise FetchFailure("onchain", address, "execution reverted")
            stake, rewards = self.balances.get(address, (0, 0))
            return OnChainBalances(stake=stake, rewards=rewards)
        finally:
            self.in_flight -= 1

    async def fetch_off_chain(self, address: str) -> OffChainStatus:
        if address in self.fail_off_chain:
            raise FetchFailure("offchain", address, "HTTP 503")
        return self.statuses.get(address, OffChainStatus())

    async def fetch_chain_summary(self):
        if self.summary_error:
            raise FetchFailure("chaindata", None, "connection refused")
        return self.epoch, self.total_staked

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def reader():
    return FakeChainReader(
        validators=[VALIDATOR_A, VALIDATOR_B, VALIDATOR_C],
        balances={
            VALIDATOR_A: (5 * ONE_TOKEN, 15 * ONE_TOKEN // 10),
            VALIDATOR_B: (1, 0),
            VALIDATOR_C: (1000 * ONE_TOKEN, 250 * ONE_TOKEN),
        },
        statuses={
            VALIDATOR_A: OffChainStatus(is_active=True, validated_count=42),
            VALIDATOR_B: OffChainStatus(is_active=False, validated_count=0),
            VALIDATOR_C: OffChainStatus(is_active=True, validated_count=7),
        },
    )


@pytest.fixture
def names(tmp_path):
    return NameStore(tmp_path / "names.db")


@pytest.fixture
def cache():
    return SnapshotCache()


@pytest.fixture
def pipeline(reader, names, cache):
    return RefreshPipeline(
        reader,
        names,
        cache,
        max_concurrency=4,
        fetch_timeout=1.0,
        cycle_timeout=10.0,
        isolate_failures=True,
    )


@pytest.fixture
def service(reader, names, pipeline):
    return ValidatorService(reader=reader, names=names, pipeline=pipeline)


@pytest.fixture
def client(service):
    """FastAPI TestClient without the block watcher."""
    from fastapi.testclient import TestClient

    from mind_validators.web.app import create_app

    return TestClient(create_app(service, watch_blocks=False))
