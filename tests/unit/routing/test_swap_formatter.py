"""Tests for turning allocations into SwapInfo."""

from decimal import Decimal

import pytest

from sor.math import quantize_down, quantize_up
from sor.models.types import SwapType
from sor.pools import parse_pools
from sor.routing.allocator import smart_order_router
from sor.routing.formatter import format_swaps
from sor.routing.pathfinding import build_paths
from sor.routing.pricer import price_path
from sor.routing.types import Allocation
from tests.helpers import BAL, DAI, POOL_3, POOL_4, USDC, WETH

D = Decimal


@pytest.fixture
def two_hop_path(multi_hop_universe):
    _, paths = build_paths(parse_pools(multi_hop_universe), DAI, WETH)
    return paths[1]


class TestTwoHopLegs:
    """A two-hop path becomes two legs with local amounts."""

    def test_exact_in(self, two_hop_path):
        priced = price_path(two_hop_path, SwapType.EXACT_IN)
        allocation = Allocation(
            swap_type=SwapType.EXACT_IN,
            entries=((priced, D(1000)),),
            total=D("0.49"),
            objective=D("0.49"),
        )

        info = format_swaps(allocation, SwapType.EXACT_IN, D(1000), DAI, WETH, D("2000"))

        assert info.token_addresses == [DAI, WETH, USDC]
        assert [leg.pool_id for leg in info.swaps] == [POOL_3, POOL_4]
        first, second = info.swaps
        assert first.amount == D(1000)
        assert (first.asset_in_index, first.asset_out_index) == (0, 2)
        assert (second.asset_in_index, second.asset_out_index) == (2, 1)
        usdc = priced.local_amounts(D(1000))[1]
        assert second.amount == quantize_down(usdc, 6)
        assert info.return_amount == D("0.49")
        assert info.market_sp == D(2000)

    def test_exact_out(self, two_hop_path):
        priced = price_path(two_hop_path, SwapType.EXACT_OUT)
        allocation = Allocation(swap_type=SwapType.EXACT_OUT, entries=((priced, D(1)),))

        info = format_swaps(allocation, SwapType.EXACT_OUT, D(1), DAI, WETH)

        first, second = info.swaps
        assert second.amount == D(1)
        usdc = priced.local_amounts(D(1))[0]
        # The intermediate output is rounded up so the second leg is covered
        assert first.amount == quantize_up(usdc, 6)
        assert first.amount >= usdc
        assert first.token_out == second.token_in == USDC


class TestFormatSwaps:
    """Tests for whole allocations."""

    def test_empty_allocation(self):
        info = format_swaps(Allocation.empty(SwapType.EXACT_IN), SwapType.EXACT_IN, D(5), DAI, BAL)

        assert info.is_empty
        assert info.return_amount == 0
        assert info.token_addresses == []

    def test_split_legs_share_token_indexes(self, two_pool_pools):
        _, paths = build_paths(two_pool_pools, DAI, BAL)
        priced = [price_path(p, SwapType.EXACT_IN) for p in paths]
        allocation = smart_order_router(priced, SwapType.EXACT_IN, D(100), max_pools=2)

        info = format_swaps(allocation, SwapType.EXACT_IN, D(100), DAI.upper(), BAL)

        assert info.token_in == DAI
        assert info.token_addresses == [DAI, BAL]
        assert len(info.swaps) == 2
        assert sum(leg.amount for leg in info.swaps) == D(100)
        assert all(leg.asset_in_index == 0 and leg.asset_out_index == 1 for leg in info.swaps)
        assert info.swap_amount == D(100)

    def test_serializes_with_aliases(self, two_pool_pools):
        _, paths = build_paths(two_pool_pools, DAI, BAL)
        priced = [price_path(p, SwapType.EXACT_IN) for p in paths]
        allocation = smart_order_router(priced, SwapType.EXACT_IN, D(10), max_pools=1)

        data = format_swaps(allocation, SwapType.EXACT_IN, D(10), DAI, BAL).model_dump(
            by_alias=True
        )

        assert set(data) >= {"tokenAddresses", "swaps", "returnAmount", "marketSp"}
        assert set(data["swaps"][0]) >= {"poolId", "assetInIndex", "assetOutIndex", "amount"}
