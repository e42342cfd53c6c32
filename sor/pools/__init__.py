"""Pool domain package.

Provides the parsed Pool dataclasses, snapshot parsing, and the pair
projector that derives direction-specific pool views.
"""

from .parsing import parse_pool, parse_pools
from .pool import Pool, PoolToken
from .projection import BPT_DECIMALS, PoolPairData, parse_pool_pair_data
from .types import PairType, PoolType

__all__ = [
    "Pool",
    "PoolToken",
    "PoolType",
    "PairType",
    "PoolPairData",
    "BPT_DECIMALS",
    "parse_pool",
    "parse_pools",
    "parse_pool_pair_data",
]
