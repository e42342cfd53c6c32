"""Registry mapping pool types to their pricing strategies.

Routing code looks a strategy up by the pool's type tag instead of
branching on it, so a new pool type only needs a PoolPricing subclass and
a register() call.
"""

from __future__ import annotations

from sor.pools.types import PoolType

from .base import PoolPricing
from .element import ElementPricing
from .stable import StablePricing
from .weighted import WeightedPricing


class PricingRegistry:
    """Registry of PoolPricing strategies keyed by PoolType.

    Usage:
        registry = PricingRegistry()
        registry.register(WeightedPricing())

        pricing = registry.get(PoolType.WEIGHTED)
        result = pricing.out_given_in(pair, amount)
    """

    def __init__(self) -> None:
        self._strategies: dict[PoolType, PoolPricing] = {}

    def register(self, pricing: PoolPricing) -> None:
        """Register a strategy under its own pool_type, replacing any previous one."""
        self._strategies[pricing.pool_type] = pricing

    def get(self, pool_type: PoolType) -> PoolPricing:
        """Get the strategy for a pool type.

        Raises:
            KeyError: If no strategy is registered for the type
        """
        try:
            return self._strategies[pool_type]
        except KeyError:
            raise KeyError(f"No pricing registered for pool type {pool_type}") from None


def build_default_registry() -> PricingRegistry:
    """Registry with every built-in pool type."""
    registry = PricingRegistry()
    registry.register(WeightedPricing())
    registry.register(StablePricing())
    registry.register(ElementPricing())
    return registry


# Shared by the routing pipeline; strategies are stateless
PRICING_REGISTRY = build_default_registry()


def get_pricing(pool_type: PoolType) -> PoolPricing:
    """Strategy for a pool type from the shared registry."""
    return PRICING_REGISTRY.get(pool_type)


__all__ = ["PRICING_REGISTRY", "PricingRegistry", "build_default_registry", "get_pricing"]
