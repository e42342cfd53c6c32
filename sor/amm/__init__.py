"""Pool pricing strategies.

One PoolPricing subclass per pool type, looked up through the registry.
"""

from .base import PoolPricing, PriceResult, PricingError
from .element import ElementPricing
from .errors import (
    AmountOutsideDomainError,
    InvalidFeeError,
    InvalidTimeError,
    PoolMathError,
    StableInvariantDidNotConverge,
    ZeroBalanceError,
    ZeroWeightError,
)
from .registry import PRICING_REGISTRY, PricingRegistry, build_default_registry, get_pricing
from .stable import StablePricing
from .weighted import WeightedPricing

__all__ = [
    # Strategies
    "PoolPricing",
    "WeightedPricing",
    "StablePricing",
    "ElementPricing",
    # Results
    "PriceResult",
    "PricingError",
    # Registry
    "PricingRegistry",
    "PRICING_REGISTRY",
    "build_default_registry",
    "get_pricing",
    # Errors
    "PoolMathError",
    "AmountOutsideDomainError",
    "InvalidFeeError",
    "InvalidTimeError",
    "StableInvariantDidNotConverge",
    "ZeroBalanceError",
    "ZeroWeightError",
]
