"""Routing pipeline.

Module structure:
- types.py: Hop, Path and Allocation dataclasses
- pathfinding.py: Direct and two-hop path building
- pricer.py: PricedPath composition and ranking
- allocator.py: Multi-path split optimization
- formatter.py: Allocation to SwapInfo conversion
"""

from sor.routing.allocator import smart_order_router
from sor.routing.formatter import format_swaps
from sor.routing.pathfinding import (
    build_paths,
    filter_pools,
    parse_pool_data,
    sort_pools_most_liquid,
)
from sor.routing.pricer import PricedPath, get_market_spot_price, process_paths
from sor.routing.types import Allocation, Hop, Path

__all__ = [
    "Allocation",
    "Hop",
    "Path",
    "PricedPath",
    "build_paths",
    "filter_pools",
    "format_swaps",
    "get_market_spot_price",
    "parse_pool_data",
    "process_paths",
    "smart_order_router",
    "sort_pools_most_liquid",
]
