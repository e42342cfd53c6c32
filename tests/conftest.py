"""Pytest configuration and fixtures."""

import asyncio

import pytest

from sor.models.pools import PoolUniverse
from sor.pools import Pool, parse_pools
from sor.providers.static import StaticPoolDiscovery
from sor.router import SmartOrderRouter
from tests.helpers import (
    BAL,
    DAI,
    POOL_1,
    POOL_2,
    POOL_3,
    POOL_4,
    USDC,
    WETH,
    make_universe,
    stable_snapshot,
    weighted_snapshot,
)

# =============================================================================
# Pool universes
# =============================================================================


@pytest.fixture
def two_pool_universe() -> PoolUniverse:
    """Two DAI/BAL weighted pools of different depth and fee.

    P1: 1000/1000, fee 0.3%. P2: 500/500, fee 0.1%.
    """
    return make_universe(
        weighted_snapshot(POOL_1, {DAI: "1000", BAL: "1000"}, fee="0.003"),
        weighted_snapshot(POOL_2, {DAI: "500", BAL: "500"}, fee="0.001"),
    )


@pytest.fixture
def two_pool_pools(two_pool_universe: PoolUniverse) -> dict[str, Pool]:
    return parse_pools(two_pool_universe)


@pytest.fixture
def multi_hop_universe() -> PoolUniverse:
    """DAI -> WETH directly, and DAI -> USDC -> WETH through two pools.

    Also carries a stable DAI/USDC pool so the DAI -> USDC leg has a choice.
    """
    return make_universe(
        weighted_snapshot(POOL_1, {DAI: "2000000", WETH: "1000"}, fee="0.003"),
        weighted_snapshot(POOL_2, {DAI: "1000000", USDC: "1000000"}, fee="0.003"),
        stable_snapshot(POOL_3, {DAI: "5000000", USDC: "5000000"}, amp="200"),
        weighted_snapshot(POOL_4, {USDC: "3000000", WETH: "1500"}, fee="0.002"),
    )


# =============================================================================
# Router fixtures
# =============================================================================


@pytest.fixture
def make_router():
    """Factory for a router over a fixed universe, already fetched."""

    def _make(universe: PoolUniverse, **kwargs) -> SmartOrderRouter:
        router = SmartOrderRouter(StaticPoolDiscovery(universe), **kwargs)
        assert asyncio.run(router.fetch_pools()) is True
        return router

    return _make


@pytest.fixture
def two_pool_router(make_router, two_pool_universe: PoolUniverse) -> SmartOrderRouter:
    return make_router(two_pool_universe)
