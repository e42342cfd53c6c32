"""Tests for RouterConfig."""

from decimal import Decimal

import pytest

from sor.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from sor.constants import DEFAULT_EPSILON, DEFAULT_MAX_ITERATIONS, DEFAULT_MAX_POOLS
from tests.helpers import USDC, WETH


class TestRouterConfig:
    """Tests for validation and defaults."""

    def test_defaults(self):
        assert DEFAULT_ROUTER_CONFIG.max_pools == DEFAULT_MAX_POOLS
        assert DEFAULT_ROUTER_CONFIG.epsilon == DEFAULT_EPSILON
        assert DEFAULT_ROUTER_CONFIG.max_iterations == DEFAULT_MAX_ITERATIONS
        assert DEFAULT_ROUTER_CONFIG.disabled_tokens == frozenset()

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_pools": 0}, {"epsilon": Decimal(0)}, {"max_iterations": 0}],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RouterConfig(**kwargs)

    def test_disabled_tokens_are_normalized(self):
        config = RouterConfig(disabled_tokens=frozenset({WETH.upper()}))
        assert config.disabled_tokens == frozenset({WETH})


class TestFromEnv:
    """Tests for environment-driven configuration."""

    def test_empty_environment_gives_defaults(self):
        assert RouterConfig.from_env({}) == RouterConfig()

    def test_reads_sor_variables(self):
        config = RouterConfig.from_env(
            {
                "SOR_MAX_POOLS": "2",
                "SOR_EPSILON": "1e-6",
                "SOR_MAX_ITERATIONS": "50",
                "SOR_DISABLED_TOKENS": f" {WETH} ,{USDC},",
            }
        )

        assert config.max_pools == 2
        assert config.epsilon == Decimal("1e-6")
        assert config.max_iterations == 50
        assert config.disabled_tokens == frozenset({WETH, USDC})

    def test_invalid_value_raises(self):
        with pytest.raises(ValueError):
            RouterConfig.from_env({"SOR_MAX_POOLS": "-1"})
