"""End-to-end routing scenarios through SmartOrderRouter.

These tests run the whole pipeline (discovery, parsing, path building,
pricing, allocation and formatting) over small, hand-checked universes.
"""

import asyncio
from decimal import Decimal

import httpx
import pytest

from sor.config import RouterConfig
from sor.models.types import SwapType
from sor.providers import HttpPoolDiscovery
from sor.router import SmartOrderRouter
from tests.helpers import (
    BAL,
    DAI,
    EPUSDC,
    POOL_1,
    POOL_2,
    POOL_5,
    USDC,
    element_snapshot,
    make_universe,
    relative_diff,
    weighted_snapshot,
)

D = Decimal


class TestTwoPoolSplit:
    """Two X/Y pools (1000/1000 at 0.3%, 500/500 at 0.1%), 100 X in, two paths."""

    def test_split_across_both_pools(self, two_pool_router):
        info = two_pool_router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(100))

        amounts = {leg.pool_id: leg.amount for leg in info.swaps}

        assert set(amounts) == {POOL_1, POOL_2}
        assert all(a > 0 for a in amounts.values())
        assert sum(amounts.values()) == D(100)

    def test_marginal_prices_equalized(self, two_pool_router):
        two_pool_router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(100))
        processed = two_pool_router.context.get_processed((DAI, BAL, SwapType.EXACT_IN))
        info = two_pool_router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(100))

        paths = {p.id: p for p in processed.paths}
        prices = [
            paths[leg.pool_id].spot_price_after(leg.amount).unwrap() for leg in info.swaps
        ]

        assert relative_diff(prices[0], prices[1]) < D("1e-8")


class TestElementWithoutTimeDecay:
    """An element pool at t = 0 trades one for one."""

    @pytest.mark.parametrize("amount", ["1", "10", "123.456789"])
    def test_constant_sum_output(self, make_router, amount):
        router = make_router(
            make_universe(
                element_snapshot(
                    POOL_5, base_balance="1000", principal_balance="800", time="0", fee="0.05"
                )
            )
        )

        info = router.get_swaps(USDC, EPUSDC, SwapType.EXACT_IN, D(amount))

        assert [leg.pool_id for leg in info.swaps] == [POOL_5]
        assert info.return_amount == D(amount)


class TestZeroAmount:
    @pytest.mark.parametrize("swap_type", list(SwapType))
    def test_zero_amount(self, two_pool_router, swap_type):
        info = two_pool_router.get_swaps(DAI, BAL, swap_type, D(0))

        assert info.swaps == []
        assert info.return_amount == 0


class TestSinglePath:
    """max_pools = 1 picks the best single path by net result."""

    def test_matches_best_single_path(self, make_router, two_pool_universe):
        router = make_router(two_pool_universe, config=RouterConfig(max_pools=1))

        info = router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(100))

        processed = router.context.get_processed((DAI, BAL, SwapType.EXACT_IN))
        best = max(processed.paths, key=lambda p: p.result(D(100)).unwrap())
        assert [leg.pool_id for leg in info.swaps] == [best.id]
        assert relative_diff(info.return_amount, best.result(D(100)).unwrap()) < D("1e-17")


class TestSnapshotImmutability:
    def test_routing_does_not_change_snapshot(self, two_pool_router, two_pool_universe):
        before = two_pool_universe.model_dump()

        for swap_type in SwapType:
            two_pool_router.get_swaps(DAI, BAL, swap_type, D(100))

        assert two_pool_router.context.universe.model_dump() == before


class TestHttpDiscoveryPipeline:
    """Pools fetched over HTTP feed the router."""

    def test_fetch_and_route(self):
        payload = make_universe(
            weighted_snapshot(POOL_1, {DAI: "1000", BAL: "1000"}),
        ).model_dump(mode="json", by_alias=True)

        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
        )
        router = SmartOrderRouter(HttpPoolDiscovery("https://pools.example", client=client))

        assert asyncio.run(router.fetch_pools()) is True
        info = router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(10))

        assert [leg.pool_id for leg in info.swaps] == [POOL_1]
        assert D(9) < info.return_amount < D(10)

    def test_source_down_then_recovered(self):
        state = {"up": False}
        payload = make_universe(
            weighted_snapshot(POOL_1, {DAI: "1000", BAL: "1000"}),
        ).model_dump(mode="json", by_alias=True)

        def handler(request: httpx.Request) -> httpx.Response:
            if not state["up"]:
                return httpx.Response(502)
            return httpx.Response(200, json=payload)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        router = SmartOrderRouter(HttpPoolDiscovery("https://pools.example", client=client))

        assert asyncio.run(router.fetch_pools()) is False
        assert router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(10)).is_empty

        state["up"] = True

        assert asyncio.run(router.fetch_pools()) is True
        assert not router.get_swaps(DAI, BAL, SwapType.EXACT_IN, D(10)).is_empty
