"""Data models for pool snapshots and routing results."""

from sor.models.pools import PoolSnapshot, PoolTokenSnapshot, PoolUniverse
from sor.models.swap import SwapInfo, SwapLeg, SwapRequest
from sor.models.types import Amount, SwapType, is_valid_address, normalize_address

__all__ = [
    # Snapshot
    "PoolSnapshot",
    "PoolTokenSnapshot",
    "PoolUniverse",
    # Results
    "SwapInfo",
    "SwapLeg",
    "SwapRequest",
    # Types
    "Amount",
    "SwapType",
    "is_valid_address",
    "normalize_address",
]
