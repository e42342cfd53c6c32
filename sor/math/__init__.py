"""Mathematical utilities for the smart order router.

This package provides the single numeric domain used by every pool formula:
- Decimal evaluation context (50 significant digits)
- Quantization helpers for token-decimal rounding
"""

from sor.math.decimal_math import (
    DECIMAL_CONTEXT,
    ONE,
    ZERO,
    decimal_context,
    min_unit,
    quantize_down,
    quantize_up,
    sign,
    to_decimal,
)

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
