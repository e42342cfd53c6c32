"""Shared high-precision Decimal utilities for pool math.

Every pool formula is evaluated with Decimal inside DECIMAL_CONTEXT so that
results do not depend on the caller's ambient context and no formula mixes
float and Decimal arithmetic. Fractional powers (weighted exponents, the
element time exponent) rely on Decimal's correctly rounded ``**``.

Rounding rule: intermediate values carry 50 significant digits; amounts
reported to callers are quantized to the token's decimals, rounding outputs
down and required inputs up.
"""

from __future__ import annotations

import decimal
import functools
from collections.abc import Callable
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, ROUND_UP, Decimal
from typing import Any, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

# 50 digits keeps ~30 digits of headroom above 18-decimal token amounts
DECIMAL_CONTEXT = decimal.Context(prec=50, rounding=ROUND_HALF_EVEN)

ZERO = Decimal(0)
ONE = Decimal(1)


def decimal_context(func: Callable[P, R]) -> Callable[P, R]:
    """Run ``func`` with DECIMAL_CONTEXT as the active Decimal context."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with decimal.localcontext(DECIMAL_CONTEXT):
            return func(*args, **kwargs)

    return wrapper


def to_decimal(value: Any) -> Decimal:
    """Convert str/int/Decimal input to Decimal.

    Floats are converted through ``str`` so that 0.003 becomes Decimal("0.003")
    rather than its binary expansion.

    Raises:
        ValueError: If the value cannot be parsed as a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(value)
        except (decimal.InvalidOperation, TypeError) as err:
            raise ValueError(f"Not a decimal number: {value!r}") from err
    if not result.is_finite():
        raise ValueError(f"Not a finite decimal number: {value!r}")
    return result


def min_unit(decimals: int) -> Decimal:
    """Smallest representable amount of a token with ``decimals`` decimals."""
    return Decimal(1).scaleb(-decimals)


def quantize_down(amount: Decimal, decimals: int) -> Decimal:
    """Round an amount down to the token's precision (used for outputs)."""
    with decimal.localcontext(DECIMAL_CONTEXT):
        return amount.quantize(min_unit(decimals), rounding=ROUND_DOWN)


def quantize_up(amount: Decimal, decimals: int) -> Decimal:
    """Round an amount up to the token's precision (used for required inputs)."""
    with decimal.localcontext(DECIMAL_CONTEXT):
        return amount.quantize(min_unit(decimals), rounding=ROUND_UP)


def sign(value: Decimal) -> int:
    """Return -1, 0 or 1."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


__all__ = [
    "DECIMAL_CONTEXT",
    "ONE",
    "ZERO",
    "decimal_context",
    "min_unit",
    "quantize_down",
    "quantize_up",
    "sign",
    "to_decimal",
]
