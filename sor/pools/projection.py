"""Pair projection: a direction-specific view of a pool.

parse_pool_pair_data is a pure function of (pool, token_in, token_out). Its
result is never cached by identity; the path builder recomputes it whenever
it needs a view of a pool in a given direction.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sor.errors import TokenNotInPoolError
from sor.math import ZERO, decimal_context
from sor.models.types import normalize_address
from sor.pools.pool import Pool
from sor.pools.types import PairType, PoolType

# Share tokens are always 18-decimal
BPT_DECIMALS = 18


@dataclass(frozen=True)
class PoolPairData:
    """Normalized state of a pool for one swap direction.

    Balances already include any virtual liquidity (element principal side).
    Weights are normalized pool weights and are ZERO for share-token sides
    and non-weighted pools. balances holds every member balance (stable
    invariant), with index_in/index_out pointing into it, or -1 for a
    share-token side.
    """

    pool_id: str
    pool_type: PoolType
    pair_type: PairType
    token_in: str
    token_out: str
    balance_in: Decimal
    balance_out: Decimal
    decimals_in: int
    decimals_out: int
    swap_fee: Decimal
    total_shares: Decimal
    weight_in: Decimal = ZERO
    weight_out: Decimal = ZERO
    amp: Decimal = ZERO
    lp_shares: Decimal = ZERO
    time: Decimal = ZERO
    principal_token: str | None = None
    base_token: str | None = None
    balances: tuple[Decimal, ...] = ()
    index_in: int = -1
    index_out: int = -1


@decimal_context
def parse_pool_pair_data(pool: Pool, token_in: str, token_out: str) -> PoolPairData:
    """Project a pool onto the (token_in, token_out) direction.

    If token_in is the pool's own share token the pair is BptToToken (an
    exit); if token_out is, it is TokenToBpt (a join).

    Args:
        pool: The pool
        token_in: Token sent to the pool
        token_out: Token taken from the pool

    Returns:
        PoolPairData for the direction

    Raises:
        TokenNotInPoolError: If either token is neither a member nor the share token
        ValueError: If token_in equals token_out
    """
    token_in = normalize_address(token_in)
    token_out = normalize_address(token_out)
    if token_in == token_out:
        raise ValueError(f"Cannot project pool {pool.id} onto a self-swap of {token_in}")

    if token_in == pool.address:
        pair_type = PairType.BPT_TO_TOKEN
    elif token_out == pool.address:
        pair_type = PairType.TOKEN_TO_BPT
    else:
        pair_type = PairType.TOKEN_TO_TOKEN

    if pair_type == PairType.BPT_TO_TOKEN:
        balance_in, decimals_in, weight_in = pool.total_shares, BPT_DECIMALS, ZERO
    else:
        member_in = pool.get_token(token_in)
        if member_in is None:
            raise TokenNotInPoolError(pool.id, token_in, "in")
        balance_in, decimals_in, weight_in = member_in.balance, member_in.decimals, member_in.weight

    if pair_type == PairType.TOKEN_TO_BPT:
        balance_out, decimals_out, weight_out = pool.total_shares, BPT_DECIMALS, ZERO
    else:
        member_out = pool.get_token(token_out)
        if member_out is None:
            raise TokenNotInPoolError(pool.id, token_out, "out")
        balance_out, decimals_out, weight_out = (
            member_out.balance,
            member_out.decimals,
            member_out.weight,
        )

    # Element pools trade against virtual liquidity on the principal side
    if pool.pool_type == PoolType.ELEMENT and pool.principal_token is not None:
        if token_in == pool.principal_token:
            balance_in = balance_in + pool.lp_shares
        elif token_out == pool.principal_token:
            balance_out = balance_out + pool.lp_shares

    return PoolPairData(
        pool_id=pool.id,
        pool_type=pool.pool_type,
        pair_type=pair_type,
        token_in=token_in,
        token_out=token_out,
        balance_in=balance_in,
        balance_out=balance_out,
        decimals_in=decimals_in,
        decimals_out=decimals_out,
        swap_fee=pool.swap_fee,
        total_shares=pool.total_shares,
        weight_in=weight_in,
        weight_out=weight_out,
        amp=pool.amp,
        lp_shares=pool.lp_shares,
        time=pool.time,
        principal_token=pool.principal_token,
        base_token=pool.base_token,
        balances=tuple(t.balance for t in pool.tokens),
        index_in=_token_index(pool, token_in),
        index_out=_token_index(pool, token_out),
    )


def _token_index(pool: Pool, token: str) -> int:
    for index, address in enumerate(pool.token_addresses):
        if address == token:
            return index
    return -1
