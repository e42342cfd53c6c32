"""Router configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from sor.constants import (
    DEFAULT_EPSILON,
    DEFAULT_FILTER_AMOUNTS,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MAX_POOLS,
    SWAP_GAS_COST,
)
from sor.math import to_decimal
from sor.models.types import normalize_address


@dataclass(frozen=True)
class RouterConfig:
    """Centralized configuration for routing.

    Attributes:
        max_pools: Upper bound on paths in one allocation (default: 4)
        swap_gas_cost: Gas charged per pool touched (default: 100,000)
        epsilon: Relative marginal-price spread at which the allocator
            stops shifting amounts between paths
        max_iterations: Cap on allocator shifting steps; a non-converged
            result is still returned
        disabled_tokens: Tokens never used as a hop token
        filter_amounts: Trade sizes probed by fetch_filtered_pair_pools
    """

    max_pools: int = DEFAULT_MAX_POOLS
    swap_gas_cost: int = SWAP_GAS_COST
    epsilon: Decimal = DEFAULT_EPSILON
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    disabled_tokens: frozenset[str] = field(default_factory=frozenset)
    filter_amounts: tuple[Decimal, ...] = DEFAULT_FILTER_AMOUNTS

    def __post_init__(self) -> None:
        if self.max_pools < 1:
            raise ValueError(f"max_pools must be at least 1, got {self.max_pools}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        object.__setattr__(
            self, "disabled_tokens", frozenset(normalize_address(t) for t in self.disabled_tokens)
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RouterConfig:
        """Build a config from SOR_* environment variables.

        - SOR_MAX_POOLS: Path bound (default: 4)
        - SOR_EPSILON: Allocator convergence bound (default: 1e-9)
        - SOR_MAX_ITERATIONS: Allocator step cap (default: 200)
        - SOR_DISABLED_TOKENS: Comma-separated hop tokens to skip
        """
        env = os.environ if environ is None else environ
        disabled = env.get("SOR_DISABLED_TOKENS", "")
        return cls(
            max_pools=int(env.get("SOR_MAX_POOLS", str(DEFAULT_MAX_POOLS))),
            epsilon=to_decimal(env.get("SOR_EPSILON", str(DEFAULT_EPSILON))),
            max_iterations=int(env.get("SOR_MAX_ITERATIONS", str(DEFAULT_MAX_ITERATIONS))),
            disabled_tokens=frozenset(t for t in (s.strip() for s in disabled.split(",")) if t),
        )


# Default configuration instance
DEFAULT_ROUTER_CONFIG = RouterConfig()
