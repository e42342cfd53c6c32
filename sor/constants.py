"""Routing constants.

Centralizes protocol parameters and allocator defaults.
"""

from decimal import Decimal

# Gas charged per pool touched by a route (Balancer V2 swap step)
SWAP_GAS_COST = 100_000

# Weighted pool trade-size limits, as a fraction of the relevant balance
MAX_IN_RATIO = Decimal("0.3")
MAX_OUT_RATIO = Decimal("0.3")

# Default bound on the number of pools (paths) an allocation may use
DEFAULT_MAX_POOLS = 4

# Allocator stops once (worst - best) / best marginal price is within this bound
DEFAULT_EPSILON = Decimal("1e-9")

# Upper bound on amount-shifting steps per allocator run
DEFAULT_MAX_ITERATIONS = 200

# Stable invariant Newton iteration
STABLE_MAX_ITERATIONS = 255
STABLE_INVARIANT_TOLERANCE = Decimal("1e-40")

# Trade sizes probed when deciding which pools a pair actually uses
DEFAULT_FILTER_AMOUNTS = (
    Decimal("0.01"),
    Decimal("0.1"),
    Decimal("1"),
    Decimal("10"),
    Decimal("100"),
    Decimal("1000"),
)

__all__ = [
    "DEFAULT_EPSILON",
    "DEFAULT_FILTER_AMOUNTS",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_MAX_POOLS",
    "MAX_IN_RATIO",
    "MAX_OUT_RATIO",
    "STABLE_INVARIANT_TOLERANCE",
    "STABLE_MAX_ITERATIONS",
    "SWAP_GAS_COST",
]
