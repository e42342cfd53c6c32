"""Weighted pool pricing.

Supports all three pair kinds: token swaps plus single-asset joins and
exits against the pool's share token.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from sor.constants import MAX_IN_RATIO, MAX_OUT_RATIO
from sor.math import DECIMAL_CONTEXT, quantize_down
from sor.models.types import SwapType
from sor.pools.projection import PoolPairData
from sor.pools.types import PairType, PoolType

from . import weighted_math as wm
from .base import PoolPricing, PriceResult


def _share_weight(pair: PoolPairData) -> Decimal:
    """Weight of the non-share token in a join or exit."""
    if pair.pair_type == PairType.TOKEN_TO_BPT:
        return pair.weight_in
    return pair.weight_out


class WeightedPricing(PoolPricing):
    """Pricing for Balancer weighted product pools."""

    pool_type = PoolType.WEIGHTED
    supported_pairs = frozenset(PairType)

    def normalized_liquidity(self, pair: PoolPairData) -> PriceResult:
        """Bo * wi / (wi + wo) for token swaps; inverse spot-price slope otherwise."""
        if pair.pair_type != PairType.TOKEN_TO_TOKEN:
            return super().normalized_liquidity(pair)
        with decimal.localcontext(DECIMAL_CONTEXT):
            total_weight = pair.weight_in + pair.weight_out
            if total_weight <= 0:
                return PriceResult.outside_domain("weights must be positive")
            return PriceResult.ok(pair.balance_out * pair.weight_in / total_weight)

    def limit_amount(self, pair: PoolPairData, swap_type: SwapType) -> PriceResult:
        """Trade size capped at 30% of the input (ExactIn) or output (ExactOut) balance."""
        with decimal.localcontext(DECIMAL_CONTEXT):
            if swap_type == SwapType.EXACT_IN:
                return PriceResult.ok(
                    quantize_down(pair.balance_in * MAX_IN_RATIO, pair.decimals_in)
                )
            return PriceResult.ok(
                quantize_down(pair.balance_out * MAX_OUT_RATIO, pair.decimals_out)
            )

    def _out_given_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        if pair.pair_type == PairType.TOKEN_TO_BPT:
            return wm.calc_bpt_out_given_exact_token_in(
                pair.balance_in, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        if pair.pair_type == PairType.BPT_TO_TOKEN:
            return wm.calc_token_out_given_exact_bpt_in(
                pair.balance_out, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        return wm.calc_out_given_in(
            pair.balance_in,
            pair.weight_in,
            pair.balance_out,
            pair.weight_out,
            pair.swap_fee,
            amount,
        )

    def _in_given_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        if pair.pair_type == PairType.TOKEN_TO_BPT:
            return wm.calc_token_in_given_exact_bpt_out(
                pair.balance_in, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        if pair.pair_type == PairType.BPT_TO_TOKEN:
            return wm.calc_bpt_in_given_exact_token_out(
                pair.balance_out, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        return wm.calc_in_given_out(
            pair.balance_in,
            pair.weight_in,
            pair.balance_out,
            pair.weight_out,
            pair.swap_fee,
            amount,
        )

    def _spot_price_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        if pair.pair_type == PairType.TOKEN_TO_BPT:
            return wm.spot_price_token_to_bpt_exact_in(
                pair.balance_in, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        if pair.pair_type == PairType.BPT_TO_TOKEN:
            return wm.spot_price_bpt_to_token_exact_in(
                pair.balance_out, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        return wm.spot_price_after_swap_exact_in(
            pair.balance_in,
            pair.weight_in,
            pair.balance_out,
            pair.weight_out,
            pair.swap_fee,
            amount,
        )

    def _spot_price_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        if pair.pair_type == PairType.TOKEN_TO_BPT:
            return wm.spot_price_token_to_bpt_exact_out(
                pair.balance_in, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        if pair.pair_type == PairType.BPT_TO_TOKEN:
            return wm.spot_price_bpt_to_token_exact_out(
                pair.balance_out, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        return wm.spot_price_after_swap_exact_out(
            pair.balance_in,
            pair.weight_in,
            pair.balance_out,
            pair.weight_out,
            pair.swap_fee,
            amount,
        )

    def _derivative_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        if pair.pair_type == PairType.TOKEN_TO_BPT:
            return wm.derivative_token_to_bpt_exact_in(
                pair.balance_in, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        if pair.pair_type == PairType.BPT_TO_TOKEN:
            return wm.derivative_bpt_to_token_exact_in(
                pair.balance_out, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        return wm.derivative_spot_price_after_swap_exact_in(
            pair.balance_in,
            pair.weight_in,
            pair.balance_out,
            pair.weight_out,
            pair.swap_fee,
            amount,
        )

    def _derivative_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal:
        if pair.pair_type == PairType.TOKEN_TO_BPT:
            return wm.derivative_token_to_bpt_exact_out(
                pair.balance_in, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        if pair.pair_type == PairType.BPT_TO_TOKEN:
            return wm.derivative_bpt_to_token_exact_out(
                pair.balance_out, _share_weight(pair), pair.total_shares, pair.swap_fee, amount
            )
        return wm.derivative_spot_price_after_swap_exact_out(
            pair.balance_in,
            pair.weight_in,
            pair.balance_out,
            pair.weight_out,
            pair.swap_fee,
            amount,
        )
