"""Tests for the snapshot-scoped router context."""

from decimal import Decimal

from sor.context import ProcessedPairData, RouterContext
from sor.models.pools import PoolUniverse
from sor.models.types import SwapType
from tests.helpers import BAL, DAI, POOL_1, make_universe, weighted_snapshot


def _cached() -> ProcessedPairData:
    return ProcessedPairData(pools={}, paths=(), market_sp=Decimal(1))


class TestRouterContext:
    """Tests for RouterContext."""

    def test_empty(self):
        context = RouterContext.empty()
        assert context.is_empty
        assert context.pools == {}
        assert not context.finished_fetching

    def test_from_universe_parses_pools(self, two_pool_universe):
        context = RouterContext.from_universe(two_pool_universe)
        assert len(context.pools) == 2
        assert context.finished_fetching

    def test_equal_snapshot_keeps_cache(self, two_pool_universe):
        context = RouterContext.from_universe(two_pool_universe)
        key = (DAI, BAL, SwapType.EXACT_IN)
        context.store_processed(key, _cached())

        # Same contents, different object
        successor = context.successor(PoolUniverse.model_validate(two_pool_universe.model_dump()))

        assert successor.get_processed(key) is not None
        assert successor.pools is context.pools

    def test_changed_snapshot_drops_cache(self, two_pool_universe):
        context = RouterContext.from_universe(two_pool_universe)
        key = (DAI, BAL, SwapType.EXACT_IN)
        context.store_processed(key, _cached())

        successor = context.successor(
            make_universe(weighted_snapshot(POOL_1, {DAI: "1", BAL: "1"}))
        )

        assert successor.get_processed(key) is None
        assert context.get_processed(key) is not None
        assert list(successor.pools) == [POOL_1]
