"""Pool parsing.

Functions to turn raw PoolSnapshot records into validated Pool objects.
Invalid pools are logged and skipped so that one bad record never fails a
whole universe.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from sor.errors import InvalidPoolError
from sor.math import ZERO, decimal_context
from sor.models.pools import PoolSnapshot, PoolUniverse
from sor.models.types import normalize_address
from sor.pools.pool import Pool, PoolToken
from sor.pools.types import PoolType

logger = structlog.get_logger()


@decimal_context
def _normalized_weights(snapshot: PoolSnapshot) -> list[Decimal]:
    weights: list[Decimal] = []
    for token in snapshot.tokens:
        if token.weight is None or token.weight <= 0:
            raise InvalidPoolError(f"Weighted pool {snapshot.id} has missing or zero weight")
        weights.append(token.weight)
    total = sum(weights, ZERO)
    return [w / total for w in weights]


def _build_tokens(snapshot: PoolSnapshot, pool_type: PoolType) -> tuple[PoolToken, ...]:
    if len(snapshot.tokens) < 2:
        raise InvalidPoolError(f"Pool {snapshot.id} has fewer than two tokens")

    addresses = [normalize_address(t.address) for t in snapshot.tokens]
    if len(set(addresses)) != len(addresses):
        raise InvalidPoolError(f"Pool {snapshot.id} lists a token twice")

    if pool_type == PoolType.WEIGHTED:
        weights = _normalized_weights(snapshot)
    else:
        weights = [ZERO] * len(snapshot.tokens)

    return tuple(
        PoolToken(address=addr, balance=t.balance, decimals=t.decimals, weight=w)
        for addr, t, w in zip(addresses, snapshot.tokens, weights, strict=True)
    )


def _validate_element(snapshot: PoolSnapshot, tokens: tuple[PoolToken, ...]) -> None:
    if len(tokens) != 2:
        raise InvalidPoolError(f"Element pool {snapshot.id} must have exactly two tokens")
    if snapshot.time is None:
        raise InvalidPoolError(f"Element pool {snapshot.id} is missing time")
    if snapshot.principal_token is None or snapshot.base_token is None:
        raise InvalidPoolError(f"Element pool {snapshot.id} is missing principal/base token")
    members = {t.address for t in tokens}
    for token in (snapshot.principal_token, snapshot.base_token):
        if normalize_address(token) not in members:
            raise InvalidPoolError(f"Element pool {snapshot.id} does not hold {token}")


def parse_pool(snapshot: PoolSnapshot) -> Pool | None:
    """Parse a PoolSnapshot into a Pool.

    Args:
        snapshot: Raw pool record

    Returns:
        Pool, or None if the pool type is unknown or the record is invalid
    """
    pool_type = PoolType.parse(snapshot.pool_type)
    if pool_type is None:
        logger.warning("unknown_pool_type", pool_id=snapshot.id, pool_type=snapshot.pool_type)
        return None

    try:
        tokens = _build_tokens(snapshot, pool_type)
        if pool_type == PoolType.STABLE and snapshot.amp is None:
            raise InvalidPoolError(f"Stable pool {snapshot.id} is missing amp")
        if pool_type == PoolType.ELEMENT:
            _validate_element(snapshot, tokens)
    except InvalidPoolError as err:
        logger.warning(
            "invalid_pool", pool_id=snapshot.id, pool_type=pool_type.value, error=str(err)
        )
        return None

    pool_id = snapshot.id.lower()
    return Pool(
        id=pool_id,
        address=normalize_address(snapshot.address or snapshot.id),
        pool_type=pool_type,
        swap_fee=snapshot.swap_fee,
        total_shares=snapshot.total_shares,
        tokens=tokens,
        amp=snapshot.amp if snapshot.amp is not None else ZERO,
        lp_shares=snapshot.lp_shares if snapshot.lp_shares is not None else ZERO,
        time=snapshot.time if snapshot.time is not None else ZERO,
        principal_token=(
            normalize_address(snapshot.principal_token) if snapshot.principal_token else None
        ),
        base_token=normalize_address(snapshot.base_token) if snapshot.base_token else None,
    )


def parse_pools(universe: PoolUniverse) -> dict[str, Pool]:
    """Parse every pool in a universe, keyed by pool id.

    Later duplicates of an id are ignored.
    """
    pools: dict[str, Pool] = {}
    for snapshot in universe.pools:
        pool = parse_pool(snapshot)
        if pool is None:
            continue
        if pool.id in pools:
            logger.debug("duplicate_pool_id", pool_id=pool.id)
            continue
        pools[pool.id] = pool
    return pools
