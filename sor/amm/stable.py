"""Stable pool pricing.

Token swaps only; joins and exits against the share token are reported as
UNSUPPORTED_PAIR so the path builder drops just that hop.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from sor.math import DECIMAL_CONTEXT
from sor.pools.projection import PoolPairData
from sor.pools.types import PoolType

from . import stable_math as sm
from .base import PoolPricing, PriceResult


class StablePricing(PoolPricing):
    """Pricing for StableSwap pools with Balancer amplification."""

    pool_type = PoolType.STABLE

    def normalized_liquidity(self, pair: PoolPairData) -> PriceResult:
        """Bo * amp: amplification scales the depth of the flat region."""
        if not self.supports(pair):
            return PriceResult.unsupported(f"{self.pool_type.value} {pair.pair_type.value}")
        with decimal.localcontext(DECIMAL_CONTEXT):
            return PriceResult.ok(pair.balance_out * pair.amp)

    def _out_given_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return sm.calc_out_given_in(
            pair.amp, pair.balances, pair.index_in, pair.index_out, pair.swap_fee, amount
        )

    def _in_given_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return sm.calc_in_given_out(
            pair.amp, pair.balances, pair.index_in, pair.index_out, pair.swap_fee, amount
        )

    def _spot_price_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return sm.spot_price_after_swap_exact_in(
            pair.amp, pair.balances, pair.index_in, pair.index_out, pair.swap_fee, amount
        )

    def _spot_price_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return sm.spot_price_after_swap_exact_out(
            pair.amp, pair.balances, pair.index_in, pair.index_out, pair.swap_fee, amount
        )

    def _derivative_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return sm.derivative_spot_price_after_swap_exact_in(
            pair.amp, pair.balances, pair.index_in, pair.index_out, pair.swap_fee, amount
        )

    def _derivative_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return sm.derivative_spot_price_after_swap_exact_out(
            pair.amp, pair.balances, pair.index_in, pair.index_out, pair.swap_fee, amount
        )
