"""
Tests for ChainReader over fake web3 contracts and a mocked status API.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from mind_validators.core.errors import FetchFailure, ListFailure
from mind_validators.data.chain_reader import ChainReader
from mind_validators.data.onchain import OnChainDataProvider
from mind_validators.data.status_api import BlockStatusProvider

VALIDATOR = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
STATUS_URL = "https://explorer.test/api/status/"
COUNTER_URL = "https://explorer.test/api/counters/"


class FakeCall:
    def __init__(self, impl, args):
        self.impl = impl
        self.args = args

    async def call(self):
        result = self.impl(*self.args)
        if isinstance(result, Exception):
            raise result
        return result


class FakeFunctions:
    def __init__(self, impls):
        self._impls = impls

    def __getattr__(self, name):
        impl = self._impls[name]
        return lambda *args: FakeCall(impl, args)


class FakeContract:
    def __init__(self, address, impls):
        self.address = address
        self.functions = FakeFunctions(impls)


class FakeEth:
    def __init__(self, impls):
        self.impls = impls

    def contract(self, address, abi):
        return FakeContract(address, self.impls)


class FakeProvider:
    def __init__(self):
        self.disconnected = False

    async def disconnect(self):
        self.disconnected = True


class FakeWeb3:
    """Just enough of AsyncWeb3 for contract reads."""

    def __init__(self, impls):
        self.eth = FakeEth(impls)
        self.provider = FakeProvider()


def contract_impls(**overrides):
    impls = {
        "validators": lambda: [VALIDATOR],
        "accountStake": lambda address: 5 * 10**18,
        "balanceOf": lambda address: 15 * 10**17,
        "stakedAmount": lambda: 5 * 10**18,
        "getCurrentBlockEpoch": lambda: "0x1a",
    }
    impls.update(overrides)
    return impls


def make_reader(handler=None, counter_url=None, **contract_overrides) -> ChainReader:
    def default_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"has_validated_blocks": True, "validations_count": 42})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler or default_handler))
    return ChainReader(
        onchain=OnChainDataProvider(w3=FakeWeb3(contract_impls(**contract_overrides))),
        status=BlockStatusProvider(STATUS_URL, counter_url, client=client),
    )


def test_list_validators():
    assert asyncio.run(make_reader().list_validators()) == [VALIDATOR]


def test_list_validators_failure_is_propagated():
    reader = make_reader(validators=lambda: ConnectionError("rpc down"))

    with pytest.raises(ListFailure, match="rpc down"):
        asyncio.run(reader.list_validators())


def test_fetch_on_chain_reads_stake_and_rewards():
    balances = asyncio.run(make_reader().fetch_on_chain(VALIDATOR))

    assert balances.stake == 5 * 10**18
    assert balances.rewards == 15 * 10**17


def test_fetch_on_chain_failure_names_address():
    reader = make_reader(balanceOf=lambda address: ValueError("execution reverted"))

    with pytest.raises(FetchFailure) as excinfo:
        asyncio.run(reader.fetch_on_chain(VALIDATOR))

    assert excinfo.value.address == VALIDATOR
    assert excinfo.value.operation == "onchain"


def test_fetch_off_chain_parses_status():
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, json={"has_validated_blocks": True, "validations_count": 42})

    status = asyncio.run(make_reader(handler).fetch_off_chain(VALIDATOR))

    assert status.is_active is True
    assert status.validated_count == 42
    assert requested == [f"{STATUS_URL}{VALIDATOR}"]


def test_fetch_off_chain_defaults_missing_fields():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    status = asyncio.run(make_reader(handler).fetch_off_chain(VALIDATOR))

    assert status.is_active is False
    assert status.validated_count == 0


def test_fetch_off_chain_null_counter_is_zero():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"has_validated_blocks": False, "validations_count": None})

    assert asyncio.run(make_reader(handler).fetch_off_chain(VALIDATOR)).validated_count == 0


def test_fetch_off_chain_uses_separate_counter_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url).startswith(COUNTER_URL):
            return httpx.Response(200, json={"validations_count": 7})
        return httpx.Response(200, json={"has_validated_blocks": True})

    status = asyncio.run(make_reader(handler, counter_url=COUNTER_URL).fetch_off_chain(VALIDATOR))

    assert status.is_active is True
    assert status.validated_count == 7


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_fetch_off_chain_bad_responses_raise_fetch_failure(response):
    reader = make_reader(lambda request: response)

    with pytest.raises(FetchFailure) as excinfo:
        asyncio.run(reader.fetch_off_chain(VALIDATOR))

    assert excinfo.value.operation == "offchain"


def test_fetch_chain_summary():
    epoch, total_staked = asyncio.run(make_reader().fetch_chain_summary())

    assert epoch == "0x1a"
    assert total_staked == 5 * 10**18


def test_fetch_chain_summary_failure():
    reader = make_reader(stakedAmount=lambda: TimeoutError("rpc timeout"))

    with pytest.raises(FetchFailure, match="chaindata"):
        asyncio.run(reader.fetch_chain_summary())


def test_fetch_off_chain_negative_counter_raises_fetch_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"has_validated_blocks": True, "validations_count": -1})

    with pytest.raises(FetchFailure) as excinfo:
        asyncio.run(make_reader(handler).fetch_off_chain(VALIDATOR))

    assert excinfo.value.operation == "offchain"


def test_close_releases_http_client_and_rpc_provider():
    reader = make_reader()

    asyncio.run(reader.close())

    assert reader.status._client.is_closed
    assert reader.onchain.w3.provider.disconnected
