"""Turn an Allocation into the SwapInfo handed to the execution layer."""

from __future__ import annotations

from decimal import Decimal

from sor.math import ZERO, decimal_context, quantize_down, quantize_up
from sor.models.swap import SwapInfo, SwapLeg
from sor.models.types import SwapType, normalize_address
from sor.routing.types import Allocation


@decimal_context
def format_swaps(
    allocation: Allocation,
    swap_type: SwapType,
    amount: Decimal,
    token_in: str,
    token_out: str,
    market_sp: Decimal = ZERO,
) -> SwapInfo:
    """Build ordered swap legs from an allocation.

    Each path contributes one leg per hop, in hop order. Leg amounts are
    local: the input of that hop for ExactIn, its output for ExactOut.
    Intermediate amounts round in the trader's disfavor (outputs down,
    required outputs up) so legs can always be executed back to back.

    Args:
        allocation: Result of smart_order_router
        swap_type: Which side of the trade is fixed
        amount: Requested trade size; reported rounded down to the fixed-side token
        token_in: Token being sold
        token_out: Token being bought
        market_sp: Best zero-amount spot price among candidate paths

    Returns:
        SwapInfo, or the empty SwapInfo if the allocation is empty
    """
    if allocation.is_empty:
        return SwapInfo.empty()

    first_path = allocation.entries[0][0]
    if swap_type == SwapType.EXACT_IN:
        amount = quantize_down(amount, first_path.hops[0].pair.decimals_in)
    else:
        amount = quantize_down(amount, first_path.hops[-1].pair.decimals_out)
    token_in = normalize_address(token_in)
    token_out = normalize_address(token_out)
    token_addresses: list[str] = [token_in, token_out]

    def index_of(token: str) -> int:
        if token not in token_addresses:
            token_addresses.append(token)
        return token_addresses.index(token)

    legs: list[SwapLeg] = []
    for path, path_amount in allocation.entries:
        local_amounts = path.local_amounts(path_amount)
        if local_amounts is None:
            raise ValueError(f"Path {path.id} cannot serve its allocated amount {path_amount}")
        for position, (hop, local) in enumerate(zip(path.hops, local_amounts, strict=True)):
            if swap_type == SwapType.EXACT_IN:
                leg_amount = local if position == 0 else quantize_down(local, hop.pair.decimals_in)
            else:
                is_last = position == len(path.hops) - 1
                leg_amount = local if is_last else quantize_up(local, hop.pair.decimals_out)
            legs.append(
                SwapLeg(
                    pool_id=hop.pool_id,
                    token_in=hop.token_in,
                    token_out=hop.token_out,
                    amount=leg_amount,
                    asset_in_index=index_of(hop.token_in),
                    asset_out_index=index_of(hop.token_out),
                )
            )

    return SwapInfo(
        token_addresses=token_addresses,
        swaps=legs,
        swap_amount=amount,
        return_amount=allocation.total,
        token_in=token_in,
        token_out=token_out,
        market_sp=market_sp,
    )


__all__ = ["format_swaps"]
