"""Path-level pricing.

A PricedPath composes its hops' pricing functions:

    ExactIn:  out(a) = h2.out(h1.out(a))
    ExactOut: in(a)  = h1.in(h2.in(a))

The path spot price is the product of the hop spot prices, each evaluated
at that hop's local amount, and its derivative follows the chain rule.
"""

from __future__ import annotations

import decimal
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

import structlog

from sor.amm.base import PoolPricing, PriceResult
from sor.amm.registry import get_pricing
from sor.math import DECIMAL_CONTEXT, ONE, ZERO
from sor.models.types import SwapType
from sor.routing.types import Hop, Path

logger = structlog.get_logger()


def _pricing(hop: Hop) -> PoolPricing:
    return get_pricing(hop.pool.pool_type)


@dataclass(frozen=True)
class PricedPath:
    """A path bound to a swap type, with cached zero-amount metrics.

    Attributes:
        path: The underlying path
        swap_type: Which side of the trade is fixed
        limit_amount: Largest fixed-side amount the path can serve
        spot_price: Path spot price at zero amount (ranking only)
        normalized_liquidity: Inverse slope of the path spot price at zero
    """

    path: Path
    swap_type: SwapType
    limit_amount: Decimal
    spot_price: Decimal
    normalized_liquidity: Decimal

    @property
    def id(self) -> str:
        return self.path.id

    @property
    def hops(self) -> tuple[Hop, ...]:
        return self.path.hops

    @property
    def n_pools(self) -> int:
        return len(self.path.hops)

    def local_amounts(self, amount: Decimal) -> list[Decimal] | None:
        """Fixed-side amount seen by each hop, in hop order.

        For ExactIn this is the input of each hop; for ExactOut the output
        of each hop. None if a hop cannot serve its amount.
        """
        if self.swap_type == SwapType.EXACT_IN:
            amounts = [amount]
            for hop in self.hops[:-1]:
                result = _pricing(hop).out_given_in(hop.pair, amounts[-1])
                if result.is_error:
                    return None
                amounts.append(result.unwrap())
            return amounts

        amounts = [amount]
        for hop in reversed(self.hops[1:]):
            result = _pricing(hop).in_given_out(hop.pair, amounts[0])
            if result.is_error:
                return None
            amounts.insert(0, result.unwrap())
        return amounts

    def result(self, amount: Decimal) -> PriceResult:
        """Output received (ExactIn) or input required (ExactOut) for ``amount``."""
        return _compose_result(self.hops, self.swap_type, amount)

    def spot_price_after(self, amount: Decimal) -> PriceResult:
        return _compose_spot_price(self.hops, self.swap_type, amount)

    def derivative_after(self, amount: Decimal) -> PriceResult:
        return _compose_derivative(self.hops, self.swap_type, amount)


def _compose_result(hops: tuple[Hop, ...], swap_type: SwapType, amount: Decimal) -> PriceResult:
    current = amount
    if swap_type == SwapType.EXACT_IN:
        for hop in hops:
            result = _pricing(hop).out_given_in(hop.pair, current)
            if result.is_error:
                return result
            current = result.unwrap()
    else:
        for hop in reversed(hops):
            result = _pricing(hop).in_given_out(hop.pair, current)
            if result.is_error:
                return result
            current = result.unwrap()
    return PriceResult.ok(current)


def _compose_spot_price(
    hops: tuple[Hop, ...], swap_type: SwapType, amount: Decimal
) -> PriceResult:
    first = hops[0]
    if len(hops) == 1:
        return _pricing(first).spot_price_after_swap(first.pair, amount, swap_type)

    second = hops[1]
    if swap_type == SwapType.EXACT_IN:
        sp1 = _pricing(first).spot_price_after_swap(first.pair, amount, swap_type)
        mid = _pricing(first).out_given_in(first.pair, amount)
        if sp1.is_error or mid.is_error:
            return sp1 if sp1.is_error else mid
        sp2 = _pricing(second).spot_price_after_swap(second.pair, mid.unwrap(), swap_type)
    else:
        sp2 = _pricing(second).spot_price_after_swap(second.pair, amount, swap_type)
        mid = _pricing(second).in_given_out(second.pair, amount)
        if sp2.is_error or mid.is_error:
            return sp2 if sp2.is_error else mid
        sp1 = _pricing(first).spot_price_after_swap(first.pair, mid.unwrap(), swap_type)
    if sp1.is_error:
        return sp1
    if sp2.is_error:
        return sp2
    with decimal.localcontext(DECIMAL_CONTEXT):
        return PriceResult.ok(sp1.unwrap() * sp2.unwrap())


def _compose_derivative(
    hops: tuple[Hop, ...], swap_type: SwapType, amount: Decimal
) -> PriceResult:
    first = hops[0]
    if len(hops) == 1:
        return _pricing(first).derivative_spot_price_after_swap(first.pair, amount, swap_type)

    second = hops[1]
    pricing1, pricing2 = _pricing(first), _pricing(second)
    if swap_type == SwapType.EXACT_IN:
        mid = pricing1.out_given_in(first.pair, amount)
        if mid.is_error:
            return mid
        local1, local2 = amount, mid.unwrap()
    else:
        mid = pricing2.in_given_out(second.pair, amount)
        if mid.is_error:
            return mid
        local1, local2 = mid.unwrap(), amount

    results = (
        pricing1.spot_price_after_swap(first.pair, local1, swap_type),
        pricing1.derivative_spot_price_after_swap(first.pair, local1, swap_type),
        pricing2.spot_price_after_swap(second.pair, local2, swap_type),
        pricing2.derivative_spot_price_after_swap(second.pair, local2, swap_type),
    )
    for result in results:
        if result.is_error:
            return result
    sp1, dsp1, sp2, dsp2 = (r.unwrap() for r in results)

    with decimal.localcontext(DECIMAL_CONTEXT):
        if swap_type == SwapType.EXACT_IN:
            # d/da [SP1(a) * SP2(o1(a))] with o1'(a) = 1 / SP1(a)
            return PriceResult.ok(dsp1 * sp2 + dsp2)
        # d/da [SP2(a) * SP1(i2(a))] with i2'(a) = SP2(a)
        return PriceResult.ok(dsp2 * sp1 + sp2 * sp2 * dsp1)


def _path_limit(path: Path, swap_type: SwapType) -> PriceResult:
    """Largest fixed-side amount every hop of the path can serve."""
    hops = path.hops
    limits = []
    for hop in hops:
        limit = _pricing(hop).limit_amount(hop.pair, swap_type)
        if limit.is_error:
            return limit
        limits.append(limit.unwrap())
    if len(hops) == 1:
        return PriceResult.ok(limits[0])

    first, second = hops
    if swap_type == SwapType.EXACT_IN:
        # Input to hop 1 that saturates hop 2
        bound = _pricing(first).in_given_out(first.pair, limits[1])
        if bound.is_error:
            return PriceResult.ok(limits[0])
        return PriceResult.ok(min(limits[0], bound.unwrap()))
    # Output of hop 2 when hop 1 is saturated
    bound = _pricing(second).out_given_in(second.pair, limits[0])
    if bound.is_error:
        return PriceResult.ok(limits[1])
    return PriceResult.ok(min(limits[1], bound.unwrap()))


def _path_liquidity(path: Path, swap_type: SwapType) -> PriceResult:
    derivative = _compose_derivative(path.hops, swap_type, ZERO)
    if derivative.is_error:
        return derivative
    with decimal.localcontext(DECIMAL_CONTEXT):
        slope = derivative.unwrap()
        if slope > 0:
            return PriceResult.ok(ONE / slope)
    # Flat price curve: fall back to the shallowest hop
    hop_liquidity = []
    for hop in path.hops:
        result = _pricing(hop).normalized_liquidity(hop.pair)
        if result.is_error:
            return result
        hop_liquidity.append(result.unwrap())
    return PriceResult.ok(min(hop_liquidity))


def price_path(path: Path, swap_type: SwapType) -> PricedPath | None:
    """Bind a path to a swap type, or None if it cannot be priced at all."""
    limit = _path_limit(path, swap_type)
    spot_price = _compose_spot_price(path.hops, swap_type, ZERO)
    liquidity = _path_liquidity(path, swap_type)
    for name, result in (("limit", limit), ("spot_price", spot_price), ("liquidity", liquidity)):
        if result.is_error:
            logger.debug(
                "path_unpriceable",
                path_id=path.id,
                field=name,
                error=result.error.value if result.error else None,
                detail=result.error_detail,
            )
            return None
    return PricedPath(
        path=path,
        swap_type=swap_type,
        limit_amount=limit.unwrap(),
        spot_price=spot_price.unwrap(),
        normalized_liquidity=liquidity.unwrap(),
    )


def process_paths(paths: Iterable[Path], swap_type: SwapType) -> list[PricedPath]:
    """Price paths, drop those with a zero bound, and rank them.

    Ranking: best (lowest) zero-amount spot price first, then deeper
    normalized liquidity, then path id.
    """
    priced: list[PricedPath] = []
    for path in paths:
        priced_path = price_path(path, swap_type)
        if priced_path is None:
            continue
        if priced_path.limit_amount <= 0:
            logger.debug("path_exhausted", path_id=path.id)
            continue
        priced.append(priced_path)
    priced.sort(key=lambda p: (p.spot_price, -p.normalized_liquidity, p.id))
    return priced


def get_market_spot_price(paths: Iterable[PricedPath]) -> Decimal:
    """Best zero-amount spot price among the paths, ZERO if there are none."""
    prices = [p.spot_price for p in paths]
    if not prices:
        return ZERO
    return min(prices)


__all__ = ["PricedPath", "get_market_spot_price", "price_path", "process_paths"]
