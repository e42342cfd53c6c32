"""Tests for pool discovery, chain data and cost collaborators."""

import asyncio
from decimal import Decimal

import httpx
import pytest

from sor.errors import DataUnavailableError
from sor.models.pools import PoolUniverse
from sor.providers import (
    ChainDataProvider,
    CostEstimator,
    HttpPoolDiscovery,
    NativePriceCostEstimator,
    PassthroughChainData,
    PoolDiscovery,
    StaticPoolDiscovery,
)
from tests.helpers import DAI, POOL_1, USDC, WETH

POOLS_URL = "https://pools.example/api/pools"

RAW_POOLS = {
    "pools": [
        {
            "id": POOL_1,
            "poolType": "Weighted",
            "swapFee": "0.003",
            "totalShares": "100",
            "tokens": [
                {"address": DAI, "balance": "1000", "weight": "0.5"},
                {"address": WETH, "balance": "1", "weight": "0.5"},
            ],
        }
    ]
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestStaticPoolDiscovery:
    """Tests for StaticPoolDiscovery."""

    def test_serves_universe(self, two_pool_universe):
        discovery = StaticPoolDiscovery(two_pool_universe)
        assert asyncio.run(discovery.get_pools()) is two_pool_universe

    def test_validates_raw_payload(self):
        universe = asyncio.run(StaticPoolDiscovery(RAW_POOLS).get_pools())
        assert universe.pools[0].swap_fee == Decimal("0.003")

    def test_invalid_payload_is_unavailable(self):
        with pytest.raises(DataUnavailableError):
            asyncio.run(StaticPoolDiscovery({"pools": [{"id": POOL_1}]}).get_pools())

    def test_satisfies_protocol(self, two_pool_universe):
        assert isinstance(StaticPoolDiscovery(two_pool_universe), PoolDiscovery)
        assert isinstance(PassthroughChainData(), ChainDataProvider)


class TestPassthroughChainData:
    def test_returns_universe_unchanged(self, two_pool_universe):
        assert asyncio.run(PassthroughChainData().get_balances(two_pool_universe)) is (
            two_pool_universe
        )

    def test_empty_universe(self):
        empty = PoolUniverse.empty()
        assert asyncio.run(PassthroughChainData().get_balances(empty)).is_empty


class TestHttpPoolDiscovery:
    """Tests for HttpPoolDiscovery with a mocked transport."""

    def test_fetches_pools(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, json=RAW_POOLS)

        discovery = HttpPoolDiscovery(POOLS_URL, client=_client(handler))

        universe = asyncio.run(discovery.get_pools())

        assert requested == [POOLS_URL]
        assert universe.pools[0].id == POOL_1

    def test_http_error_is_unavailable(self):
        discovery = HttpPoolDiscovery(
            POOLS_URL, client=_client(lambda request: httpx.Response(503))
        )
        with pytest.raises(DataUnavailableError):
            asyncio.run(discovery.get_pools())

    def test_transport_error_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        discovery = HttpPoolDiscovery(POOLS_URL, client=_client(handler))
        with pytest.raises(DataUnavailableError):
            asyncio.run(discovery.get_pools())

    def test_non_json_is_unavailable(self):
        discovery = HttpPoolDiscovery(
            POOLS_URL, client=_client(lambda request: httpx.Response(200, text="<html>"))
        )
        with pytest.raises(DataUnavailableError):
            asyncio.run(discovery.get_pools())

    def test_invalid_schema_is_unavailable(self):
        discovery = HttpPoolDiscovery(
            POOLS_URL,
            client=_client(lambda request: httpx.Response(200, json={"pools": "nope"})),
        )
        with pytest.raises(DataUnavailableError):
            asyncio.run(discovery.get_pools())


class TestNativePriceCostEstimator:
    """Tests for gas-based per-pool cost."""

    def test_cost_in_token(self):
        estimator = NativePriceCostEstimator({USDC: "2000"})
        assert isinstance(estimator, CostEstimator)

        # 50 gwei * 100k gas = 0.005 native = 10 USDC
        cost = asyncio.run(
            estimator.get_cost_per_pool(USDC.upper(), Decimal(50 * 10**9), 100_000)
        )

        assert cost == Decimal(10)

    def test_unknown_token_costs_nothing(self):
        estimator = NativePriceCostEstimator({USDC: "2000"})
        assert asyncio.run(estimator.get_cost_per_pool(DAI, Decimal(10**9), 100_000)) == 0
