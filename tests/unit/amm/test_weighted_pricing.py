"""Tests for weighted pool pricing.

This module tests:
- Token swaps against the closed-form formulas
- Spot price and derivative consistency (finite differences)
- Joins and exits against the share token
- Limits and normalized liquidity
"""

from decimal import Decimal

import pytest

from sor.amm import PricingError, WeightedPricing
from sor.models.types import SwapType
from tests.helpers import DAI, POOL_1, WETH, make_pair, make_weighted_pool, relative_diff

H = Decimal("1e-8")


@pytest.fixture
def pricing() -> WeightedPricing:
    return WeightedPricing()


@pytest.fixture
def pair():
    """80/20 WETH/DAI pool, 0.3% fee, WETH -> DAI."""
    pool = make_weighted_pool(
        POOL_1, {WETH: "100", DAI: "50000"}, weights={WETH: "80", DAI: "20"}, fee="0.003"
    )
    return make_pair(pool, WETH, DAI)


def _finite_difference(func, amount: Decimal) -> Decimal:
    return (func(amount + H).unwrap() - func(amount - H).unwrap()) / (2 * H)


class TestTokenSwaps:
    """Tests for token-to-token formulas."""

    def test_out_given_in_matches_formula(self, pricing, pair):
        amount = Decimal(1)
        expected = Decimal(50000) * (
            1 - (Decimal(100) / (Decimal(100) + amount * Decimal("0.997"))) ** Decimal(4)
        )

        result = pricing.out_given_in(pair, amount)

        assert result.is_valid
        assert relative_diff(result.unwrap(), expected) < Decimal("1e-20")

    def test_zero_amount_is_exactly_zero(self, pricing, pair):
        assert pricing.out_given_in(pair, Decimal(0)).unwrap() == 0
        assert pricing.in_given_out(pair, Decimal(0)).unwrap() == 0

    def test_round_trip(self, pricing, pair):
        amount = Decimal("3.5")
        out = pricing.out_given_in(pair, amount).unwrap()
        back = pricing.in_given_out(pair, out).unwrap()
        assert relative_diff(back, amount) < Decimal("1e-30")

    def test_output_is_monotone(self, pricing, pair):
        outs = [pricing.out_given_in(pair, Decimal(a)).unwrap() for a in (1, 2, 5, 10)]
        assert outs == sorted(outs)

    def test_draining_output_is_outside_domain(self, pricing, pair):
        result = pricing.in_given_out(pair, Decimal(50000))
        assert result.error == PricingError.OUTSIDE_DOMAIN

    def test_negative_amount_is_outside_domain(self, pricing, pair):
        result = pricing.out_given_in(pair, Decimal(-1))
        assert result.error == PricingError.OUTSIDE_DOMAIN


class TestSpotPrice:
    """Spot price is token_in per token_out; derivative matches finite differences."""

    def test_zero_amount_spot_price(self, pricing, pair):
        # (Bi / wi) / (Bo / wo) / (1 - f)
        expected = (Decimal(100) / Decimal("0.8")) / (Decimal(50000) / Decimal("0.2"))
        expected /= Decimal("0.997")

        sp = pricing.spot_price_after_swap(pair, Decimal(0), SwapType.EXACT_IN).unwrap()

        assert relative_diff(sp, expected) < Decimal("1e-25")

    def test_exact_in_and_exact_out_agree_at_zero(self, pricing, pair):
        sp_in = pricing.spot_price_after_swap(pair, Decimal(0), SwapType.EXACT_IN).unwrap()
        sp_out = pricing.spot_price_after_swap(pair, Decimal(0), SwapType.EXACT_OUT).unwrap()
        assert relative_diff(sp_in, sp_out) < Decimal("1e-30")

    def test_spot_price_is_inverse_marginal_output(self, pricing, pair):
        amount = Decimal(2)
        marginal = _finite_difference(lambda a: pricing.out_given_in(pair, a), amount)
        sp = pricing.spot_price_after_swap(pair, amount, SwapType.EXACT_IN).unwrap()
        assert relative_diff(sp, 1 / marginal) < Decimal("1e-10")

    @pytest.mark.parametrize("swap_type", [SwapType.EXACT_IN, SwapType.EXACT_OUT])
    @pytest.mark.parametrize("amount", ["0.5", "5"])
    def test_derivative_matches_finite_difference(self, pricing, pair, swap_type, amount):
        amount = Decimal(amount)
        numeric = _finite_difference(
            lambda a: pricing.spot_price_after_swap(pair, a, swap_type), amount
        )
        analytic = pricing.derivative_spot_price_after_swap(pair, amount, swap_type).unwrap()
        assert analytic > 0
        assert relative_diff(analytic, numeric) < Decimal("1e-8")


class TestShareTokenPairs:
    """Single-asset joins and exits."""

    @pytest.fixture
    def pool(self):
        return make_weighted_pool(
            POOL_1, {WETH: "100", DAI: "50000"}, fee="0.003", total_shares="1000"
        )

    def test_join_round_trip(self, pricing, pool):
        pair = make_pair(pool, DAI, POOL_1)
        shares = pricing.out_given_in(pair, Decimal(500)).unwrap()
        assert 0 < shares < Decimal(10)
        back = pricing.in_given_out(pair, shares).unwrap()
        assert relative_diff(back, Decimal(500)) < Decimal("1e-30")

    def test_exit_round_trip(self, pricing, pool):
        pair = make_pair(pool, POOL_1, WETH)
        out = pricing.out_given_in(pair, Decimal(10)).unwrap()
        assert 0 < out < Decimal(2)
        back = pricing.in_given_out(pair, out).unwrap()
        assert relative_diff(back, Decimal(10)) < Decimal("1e-30")

    @pytest.mark.parametrize("swap_type", [SwapType.EXACT_IN, SwapType.EXACT_OUT])
    def test_join_derivative(self, pricing, pool, swap_type):
        pair = make_pair(pool, DAI, POOL_1)
        amount = Decimal(100) if swap_type == SwapType.EXACT_IN else Decimal(1)
        numeric = _finite_difference(
            lambda a: pricing.spot_price_after_swap(pair, a, swap_type), amount
        )
        analytic = pricing.derivative_spot_price_after_swap(pair, amount, swap_type).unwrap()
        assert relative_diff(analytic, numeric) < Decimal("1e-8")

    @pytest.mark.parametrize("swap_type", [SwapType.EXACT_IN, SwapType.EXACT_OUT])
    def test_exit_derivative(self, pricing, pool, swap_type):
        pair = make_pair(pool, POOL_1, DAI)
        amount = Decimal(5) if swap_type == SwapType.EXACT_IN else Decimal(100)
        numeric = _finite_difference(
            lambda a: pricing.spot_price_after_swap(pair, a, swap_type), amount
        )
        analytic = pricing.derivative_spot_price_after_swap(pair, amount, swap_type).unwrap()
        assert relative_diff(analytic, numeric) < Decimal("1e-8")

    def test_join_with_no_shares_is_outside_domain(self, pricing):
        pool = make_weighted_pool(POOL_1, {WETH: "1", DAI: "1"}, total_shares="0")
        pair = make_pair(pool, DAI, POOL_1)
        assert pricing.out_given_in(pair, Decimal(1)).error == PricingError.OUTSIDE_DOMAIN


class TestLimitsAndLiquidity:
    """Tests for trade-size limits and ranking liquidity."""

    def test_limits_are_thirty_percent(self, pricing, pair):
        assert pricing.limit_amount(pair, SwapType.EXACT_IN).unwrap() == Decimal(30)
        assert pricing.limit_amount(pair, SwapType.EXACT_OUT).unwrap() == Decimal(15000)

    def test_normalized_liquidity(self, pricing, pair):
        # Bo * wi / (wi + wo)
        assert pricing.normalized_liquidity(pair).unwrap() == Decimal(40000)
