"""Element pool pricing."""

from __future__ import annotations

import decimal
from decimal import Decimal

from sor.math import DECIMAL_CONTEXT, ZERO, min_unit, quantize_down
from sor.models.types import SwapType
from sor.pools.projection import PoolPairData
from sor.pools.types import PoolType

from . import element_math as em
from .base import PoolPricing, PriceResult


class ElementPricing(PoolPricing):
    """Pricing for Element principal/base pools.

    Token swaps only. The principal-side balance in the pair data already
    carries the pool's virtual lp_shares.
    """

    pool_type = PoolType.ELEMENT

    def limit_amount(self, pair: PoolPairData, swap_type: SwapType) -> PriceResult:
        """Like the default, but only the principal actually held can be bought.

        The virtual lp_shares shape the curve; they are not drainable.
        """
        if not self.supports(pair):
            return super().limit_amount(pair, swap_type)
        with decimal.localcontext(DECIMAL_CONTEXT):
            held_out = pair.balance_out
            if pair.token_out == pair.principal_token:
                held_out -= pair.lp_shares
            max_out = held_out - min_unit(pair.decimals_out)
        if max_out <= 0:
            return PriceResult.ok(ZERO)
        if swap_type == SwapType.EXACT_OUT:
            return PriceResult.ok(quantize_down(max_out, pair.decimals_out))
        max_in = self.in_given_out(pair, max_out)
        if max_in.is_error:
            return max_in
        return PriceResult.ok(quantize_down(max_in.unwrap(), pair.decimals_in))

    def _out_given_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return em.calc_out_given_in(
            pair.balance_in, pair.balance_out, pair.swap_fee, pair.time, amount
        )

    def _in_given_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return em.calc_in_given_out(
            pair.balance_in, pair.balance_out, pair.swap_fee, pair.time, amount
        )

    def _spot_price_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return em.spot_price_after_swap_exact_in(
            pair.balance_in, pair.balance_out, pair.swap_fee, pair.time, amount
        )

    def _spot_price_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return em.spot_price_after_swap_exact_out(
            pair.balance_in, pair.balance_out, pair.swap_fee, pair.time, amount
        )

    def _derivative_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return em.derivative_spot_price_after_swap_exact_in(
            pair.balance_in, pair.balance_out, pair.swap_fee, pair.time, amount
        )

    def _derivative_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        return em.derivative_spot_price_after_swap_exact_out(
            pair.balance_in, pair.balance_out, pair.swap_fee, pair.time, amount
        )
