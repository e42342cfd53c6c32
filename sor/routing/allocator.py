"""Multi-path trade allocation.

For convex pool curves the optimal split equalizes the marginal price of
every used path. The allocator:

1. Seeds the k best-ranked paths with amounts proportional to their
   normalized liquidity, capped at each path's limit.
2. Repeatedly moves amount from the path with the worst marginal price to
   the one with the best, using a Newton step on the price spread, until
   the relative spread is within epsilon or max_iterations is reached.
3. Repeats for k = 1..max_pools as a forward scan over the ranking, stopping
   at the first k whose net objective (result net of per-pool cost) does not
   improve.

Reported amounts are quantized and the totals recomputed from the pool
formulas at the final split.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

import structlog

from sor.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from sor.math import ZERO, decimal_context, quantize_down, quantize_up
from sor.models.types import SwapType
from sor.routing.pricer import PricedPath
from sor.routing.types import Allocation

logger = structlog.get_logger()


@dataclass
class _Marginal:
    spot_price: Decimal
    derivative: Decimal


def _fixed_side_decimals(path: PricedPath) -> int:
    if path.swap_type == SwapType.EXACT_IN:
        return path.hops[0].pair.decimals_in
    return path.hops[-1].pair.decimals_out


def _result_decimals(path: PricedPath) -> int:
    if path.swap_type == SwapType.EXACT_IN:
        return path.hops[-1].pair.decimals_out
    return path.hops[0].pair.decimals_in


def _is_better(candidate: Allocation, incumbent: Allocation | None, swap_type: SwapType) -> bool:
    """ExactIn maximizes net output; ExactOut minimizes gross input."""
    if incumbent is None:
        return True
    if swap_type == SwapType.EXACT_IN:
        return candidate.objective > incumbent.objective
    return candidate.objective < incumbent.objective


def initial_split(paths: Sequence[PricedPath], total_amount: Decimal) -> list[Decimal]:
    """Split proportionally to normalized liquidity, capped at each path's limit.

    Amount above a cap is redistributed over the remaining paths. The caller
    guarantees the limits add up to at least total_amount.
    """
    amounts = [ZERO] * len(paths)
    active = list(range(len(paths)))
    remaining = total_amount
    while remaining > 0 and active:
        weight_sum = sum((paths[i].normalized_liquidity for i in active), ZERO)
        if weight_sum > 0:
            shares = {i: remaining * paths[i].normalized_liquidity / weight_sum for i in active}
        else:
            shares = {i: remaining / len(active) for i in active}
        capped = [i for i in active if amounts[i] + shares[i] >= paths[i].limit_amount]
        if not capped:
            for i in active:
                amounts[i] += shares[i]
            break
        for i in capped:
            remaining -= paths[i].limit_amount - amounts[i]
            amounts[i] = paths[i].limit_amount
            active.remove(i)
    return amounts


def _marginal(path: PricedPath, amount: Decimal) -> _Marginal | None:
    spot_price = path.spot_price_after(amount)
    derivative = path.derivative_after(amount)
    if spot_price.is_error or derivative.is_error:
        return None
    return _Marginal(spot_price=spot_price.unwrap(), derivative=derivative.unwrap())


def equalize_marginal_prices(
    paths: Sequence[PricedPath],
    amounts: list[Decimal],
    epsilon: Decimal,
    max_iterations: int,
) -> tuple[list[Decimal], bool]:
    """Shift amount from the worst-priced to the best-priced path until prices meet.

    Returns:
        (amounts, converged). Amounts always sum to the input total.
    """
    amounts = list(amounts)
    if len(paths) < 2:
        return amounts, True

    marginals = [_marginal(p, a) for p, a in zip(paths, amounts, strict=True)]
    for _ in range(max_iterations):
        # Worst among paths that can give, best among paths that can take
        givers = [i for i, a in enumerate(amounts) if a > 0 and marginals[i] is not None]
        takers = [
            i
            for i, a in enumerate(amounts)
            if a < paths[i].limit_amount and marginals[i] is not None
        ]
        if not givers or not takers:
            return amounts, True

        worst = max(givers, key=lambda i: marginals[i].spot_price)  # type: ignore[union-attr]
        best = min(takers, key=lambda i: marginals[i].spot_price)  # type: ignore[union-attr]
        worst_m, best_m = marginals[worst], marginals[best]
        if worst_m is None or best_m is None:
            return amounts, True

        spread = worst_m.spot_price - best_m.spot_price
        if worst == best or spread <= epsilon * best_m.spot_price:
            return amounts, True

        capacity = min(amounts[worst], paths[best].limit_amount - amounts[best])
        slope = worst_m.derivative + best_m.derivative
        step = capacity if slope <= 0 else min(spread / slope, capacity)
        if step <= 0:
            return amounts, True

        amounts[worst] -= step
        amounts[best] += step
        marginals[worst] = _marginal(paths[worst], amounts[worst])
        marginals[best] = _marginal(paths[best], amounts[best])

    logger.warning(
        "allocator_not_converged",
        paths=len(paths),
        iterations=max_iterations,
    )
    return amounts, False


def _settle(
    paths: Sequence[PricedPath],
    amounts: Sequence[Decimal],
    total_amount: Decimal,
    swap_type: SwapType,
    cost_per_pool: Decimal,
) -> Allocation | None:
    """Quantize amounts, recompute results and build the Allocation.

    Returns None if a path cannot serve its final amount.
    """
    quantized = [
        quantize_down(a, _fixed_side_decimals(p)) for p, a in zip(paths, amounts, strict=True)
    ]
    # Rounding dust goes to the largest path that still has room
    dust = total_amount - sum(quantized, ZERO)
    if dust > 0:
        for i in sorted(range(len(paths)), key=lambda i: quantized[i], reverse=True):
            room = paths[i].limit_amount - quantized[i]
            if room >= dust:
                quantized[i] += dust
                break
        else:
            logger.debug("rounding_dust_dropped", dust=str(dust), paths=len(paths))

    entries: list[tuple[PricedPath, Decimal]] = []
    total = ZERO
    for path, amount in zip(paths, quantized, strict=True):
        if amount <= 0:
            continue
        result = path.result(amount)
        if result.is_error:
            logger.debug("path_result_unavailable", path_id=path.id, amount=str(amount))
            return None
        if swap_type == SwapType.EXACT_IN:
            total += quantize_down(result.unwrap(), _result_decimals(path))
        else:
            total += quantize_up(result.unwrap(), _result_decimals(path))
        entries.append((path, amount))

    n_pools = sum(path.n_pools for path, _ in entries)
    cost = cost_per_pool * n_pools
    objective = total - cost if swap_type == SwapType.EXACT_IN else total + cost
    return Allocation(swap_type=swap_type, entries=tuple(entries), total=total, objective=objective)


def _allocate_k(
    paths: Sequence[PricedPath],
    swap_type: SwapType,
    total_amount: Decimal,
    cost_per_pool: Decimal,
    config: RouterConfig,
) -> Allocation | None:
    capacity = sum((p.limit_amount for p in paths), ZERO)
    if capacity < total_amount:
        return None
    amounts = initial_split(paths, total_amount)
    amounts, _ = equalize_marginal_prices(paths, amounts, config.epsilon, config.max_iterations)
    return _settle(paths, amounts, total_amount, swap_type, cost_per_pool)


@decimal_context
def smart_order_router(
    paths: Sequence[PricedPath],
    swap_type: SwapType,
    total_amount: Decimal,
    max_pools: int,
    cost_per_pool: Decimal = ZERO,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> Allocation:
    """Split ``total_amount`` across at most ``max_pools`` of the ranked paths.

    Args:
        paths: Priced paths in ranking order (see process_paths)
        swap_type: Which side of the trade is fixed
        total_amount: Amount of token_in (ExactIn) or token_out (ExactOut)
        max_pools: Maximum number of paths used
        cost_per_pool: Fixed cost per pool touched, in the result token
        config: Convergence settings

    Returns:
        The best-objective Allocation, or an empty one when the amount is
        zero or no combination of paths can carry it.
    """
    if max_pools < 1:
        raise ValueError(f"max_pools must be at least 1, got {max_pools}")
    if total_amount <= 0 or not paths:
        return Allocation.empty(swap_type)
    # Amounts finer than the fixed-side token cannot be sent
    total_amount = quantize_down(total_amount, _fixed_side_decimals(paths[0]))
    if total_amount <= 0:
        return Allocation.empty(swap_type)

    # k = 1: every candidate alone; the best one leads the forward scan
    best: Allocation | None = None
    best_index: int | None = None
    for index, path in enumerate(paths):
        allocation = _allocate_k([path], swap_type, total_amount, cost_per_pool, config)
        if allocation is not None and _is_better(allocation, best, swap_type):
            best, best_index = allocation, index

    ranking = list(paths)
    if best_index is not None:
        ranking.insert(0, ranking.pop(best_index))

    for k in range(2, min(max_pools, len(ranking)) + 1):
        allocation = _allocate_k(ranking[:k], swap_type, total_amount, cost_per_pool, config)
        if allocation is None:
            # Not enough capacity yet; more paths may carry the amount
            continue
        if not _is_better(allocation, best, swap_type):
            break
        best = allocation

    if best is None:
        logger.debug("allocation_infeasible", paths=len(paths), amount=str(total_amount))
        return Allocation.empty(swap_type)

    logger.debug(
        "allocation_found",
        paths_used=len(best.entries),
        pools_used=best.n_pools,
        total=str(best.total),
        objective=str(best.objective),
    )
    return best


__all__ = ["equalize_marginal_prices", "initial_split", "smart_order_router"]
