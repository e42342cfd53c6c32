"""Pool math error classes.

These are raised by the pure math modules for invalid inputs. The pricing
strategies check their domain first and report PricingError outcomes, so
these only escape for genuinely malformed pool data.
"""


class PoolMathError(Exception):
    """Base error for pool math operations."""

    pass


class InvalidFeeError(PoolMathError):
    """Swap fee must be in range [0, 1)."""

    pass


class ZeroBalanceError(PoolMathError):
    """Token balance must be positive for swaps."""

    pass


class ZeroWeightError(PoolMathError):
    """Token weight must be positive."""

    pass


class InvalidTimeError(PoolMathError):
    """Element time-to-maturity must be in range [0, 1)."""

    pass


class StableInvariantDidNotConverge(PoolMathError):
    """Newton-Raphson iteration for stable invariant D did not converge."""

    pass


class AmountOutsideDomainError(PoolMathError):
    """Amount cannot be served by the pool invariant (e.g. exceeds balance)."""

    pass
