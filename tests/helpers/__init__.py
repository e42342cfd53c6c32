"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses and synthetic pool ids
- factories: Pool snapshot, pool and pair factory functions
"""

from tests.helpers.constants import (
    BAL,
    DAI,
    EPUSDC,
    POOL_1,
    POOL_2,
    POOL_3,
    POOL_4,
    POOL_5,
    TOKEN_DECIMALS,
    USDC,
    USDT,
    WETH,
)
from tests.helpers.factories import (
    element_snapshot,
    make_element_pool,
    make_pair,
    make_stable_pool,
    make_universe,
    make_weighted_pool,
    relative_diff,
    stable_snapshot,
    weighted_snapshot,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "BAL",
    "EPUSDC",
    "POOL_1",
    "POOL_2",
    "POOL_3",
    "POOL_4",
    "POOL_5",
    "TOKEN_DECIMALS",
    # Factories
    "weighted_snapshot",
    "stable_snapshot",
    "element_snapshot",
    "make_weighted_pool",
    "make_stable_pool",
    "make_element_pool",
    "make_pair",
    "make_universe",
    "relative_diff",
]
