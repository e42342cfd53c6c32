"""Factory functions for creating test pools.

Usage:
    from tests.helpers import make_weighted_pool, make_pair

    pool = make_weighted_pool(POOL_1, {DAI: "1000", USDC: "1000"})
    pair = make_pair(pool, DAI, USDC)

Balances may be given as str, int or Decimal; they are human units.
"""

from decimal import Decimal

from sor.models.pools import PoolSnapshot, PoolTokenSnapshot, PoolUniverse
from sor.pools import Pool, PoolPairData, parse_pool, parse_pool_pair_data
from tests.helpers.constants import EPUSDC, TOKEN_DECIMALS, USDC

Number = str | int | Decimal


def _token(address: str, balance: Number, weight: Number | None = None) -> PoolTokenSnapshot:
    return PoolTokenSnapshot(
        address=address,
        balance=Decimal(str(balance)),
        decimals=TOKEN_DECIMALS.get(address, 18),
        weight=Decimal(str(weight)) if weight is not None else None,
    )


def weighted_snapshot(
    pool_id: str,
    balances: dict[str, Number],
    weights: dict[str, Number] | None = None,
    fee: Number = "0.003",
    total_shares: Number = "1000",
) -> PoolSnapshot:
    """Weighted pool record; equal weights unless given."""
    weights = weights or {address: 1 for address in balances}
    return PoolSnapshot(
        id=pool_id,
        pool_type="Weighted",
        swap_fee=Decimal(str(fee)),
        total_shares=Decimal(str(total_shares)),
        tokens=tuple(_token(a, b, weights[a]) for a, b in balances.items()),
    )


def stable_snapshot(
    pool_id: str,
    balances: dict[str, Number],
    amp: Number = "100",
    fee: Number = "0.0004",
    total_shares: Number = "3000",
) -> PoolSnapshot:
    """Stable pool record."""
    return PoolSnapshot(
        id=pool_id,
        pool_type="Stable",
        swap_fee=Decimal(str(fee)),
        total_shares=Decimal(str(total_shares)),
        amp=Decimal(str(amp)),
        tokens=tuple(_token(a, b) for a, b in balances.items()),
    )


def element_snapshot(
    pool_id: str,
    base_balance: Number = "1000",
    principal_balance: Number = "1000",
    time: Number = "0.2",
    fee: Number = "0.01",
    lp_shares: Number = "0",
    base_token: str = USDC,
    principal_token: str = EPUSDC,
) -> PoolSnapshot:
    """Element pool record for a principal/base pair."""
    return PoolSnapshot(
        id=pool_id,
        pool_type="Element",
        swap_fee=Decimal(str(fee)),
        total_shares=Decimal("1000"),
        lp_shares=Decimal(str(lp_shares)),
        time=Decimal(str(time)),
        principal_token=principal_token,
        base_token=base_token,
        tokens=(_token(base_token, base_balance), _token(principal_token, principal_balance)),
    )


def _parsed(snapshot: PoolSnapshot) -> Pool:
    pool = parse_pool(snapshot)
    assert pool is not None, f"fixture pool {snapshot.id} failed to parse"
    return pool


def make_weighted_pool(pool_id: str, balances: dict[str, Number], **kwargs) -> Pool:
    return _parsed(weighted_snapshot(pool_id, balances, **kwargs))


def make_stable_pool(pool_id: str, balances: dict[str, Number], **kwargs) -> Pool:
    return _parsed(stable_snapshot(pool_id, balances, **kwargs))


def make_element_pool(pool_id: str, **kwargs) -> Pool:
    return _parsed(element_snapshot(pool_id, **kwargs))


def make_pair(pool: Pool, token_in: str, token_out: str) -> PoolPairData:
    """Project a pool onto a swap direction."""
    return parse_pool_pair_data(pool, token_in, token_out)


def make_universe(*snapshots: PoolSnapshot) -> PoolUniverse:
    return PoolUniverse(pools=tuple(snapshots))


def relative_diff(a: Decimal, b: Decimal) -> Decimal:
    """|a - b| relative to the larger magnitude."""
    scale = max(abs(a), abs(b))
    if scale == 0:
        return Decimal(0)
    return abs(a - b) / scale


__all__ = [
    "element_snapshot",
    "make_element_pool",
    "make_pair",
    "make_stable_pool",
    "make_universe",
    "make_weighted_pool",
    "relative_diff",
    "stable_snapshot",
    "weighted_snapshot",
]
