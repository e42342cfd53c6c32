"""Path building across the pool universe.

Routes are limited to direct pools and two-hop paths through a single hop
token. For each hop token only the deepest pool on each side is kept, which
caps the number of paths at (#direct pools + #hop tokens).

A pool's own share token counts as one of its tradable tokens, so a path
may join or exit a pool. Pool types that cannot price such a leg drop that
single hop; the rest of the path set is unaffected.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

import structlog

from sor.amm.registry import get_pricing
from sor.errors import TokenNotInPoolError
from sor.models.types import normalize_address
from sor.pools.pool import Pool
from sor.pools.projection import parse_pool_pair_data
from sor.routing.types import Hop, Path

logger = structlog.get_logger()


def filter_pools(
    pools: Mapping[str, Pool],
    token_in: str,
    token_out: str,
    disabled_tokens: Iterable[str] = (),
) -> tuple[dict[str, Pool], list[str], dict[str, Pool], dict[str, Pool]]:
    """Split pools into direct pools and candidate first/second hop pools.

    Args:
        pools: Parsed pools keyed by id
        token_in: Token being sold
        token_out: Token being bought
        disabled_tokens: Tokens never used as a hop token

    Returns:
        (direct_pools, hop_tokens, pools_token_in, pools_token_out). hop_tokens
        are tokens reachable from both a token_in pool and a token_out pool,
        sorted for deterministic output.
    """
    token_in = normalize_address(token_in)
    token_out = normalize_address(token_out)
    disabled = {normalize_address(t) for t in disabled_tokens}

    direct_pools: dict[str, Pool] = {}
    pools_token_in: dict[str, Pool] = {}
    pools_token_out: dict[str, Pool] = {}
    tokens_in: set[str] = set()
    tokens_out: set[str] = set()

    for pool_id, pool in pools.items():
        tradable = pool.tradable_tokens()
        has_in = token_in in tradable
        has_out = token_out in tradable
        if has_in and has_out:
            direct_pools[pool_id] = pool
        elif has_in:
            pools_token_in[pool_id] = pool
            tokens_in.update(tradable)
        elif has_out:
            pools_token_out[pool_id] = pool
            tokens_out.update(tradable)

    hop_tokens = sorted((tokens_in & tokens_out) - disabled - {token_in, token_out})
    return direct_pools, hop_tokens, pools_token_in, pools_token_out


def _liquidity(pool: Pool, token_in: str, token_out: str) -> Decimal | None:
    """Normalized liquidity of a pool in one direction, None if it cannot be priced."""
    try:
        pair = parse_pool_pair_data(pool, token_in, token_out)
    except TokenNotInPoolError:
        return None
    result = get_pricing(pool.pool_type).normalized_liquidity(pair)
    if result.is_error:
        logger.debug(
            "hop_unsupported",
            pool_id=pool.id,
            pair_type=pair.pair_type.value,
            error=result.error.value if result.error else None,
        )
        return None
    return result.value


def _most_liquid(pools: Mapping[str, Pool], token_in: str, token_out: str) -> Pool | None:
    best: Pool | None = None
    best_liquidity: Decimal | None = None
    for pool in pools.values():
        if token_in not in pool.tradable_tokens() or token_out not in pool.tradable_tokens():
            continue
        liquidity = _liquidity(pool, token_in, token_out)
        if liquidity is None:
            continue
        # Highest liquidity wins; ties go to the lowest pool id
        if (
            best is None
            or best_liquidity is None
            or liquidity > best_liquidity
            or (liquidity == best_liquidity and pool.id < best.id)
        ):
            best, best_liquidity = pool, liquidity
    return best


def sort_pools_most_liquid(
    token_in: str,
    token_out: str,
    hop_tokens: Iterable[str],
    pools_token_in: Mapping[str, Pool],
    pools_token_out: Mapping[str, Pool],
) -> tuple[dict[str, Pool], dict[str, Pool]]:
    """Pick the deepest first-hop and second-hop pool for every hop token.

    Returns:
        (first_hop, second_hop) keyed by hop token. A hop token missing from
        either mapping has no priceable pool on that side.
    """
    token_in = normalize_address(token_in)
    token_out = normalize_address(token_out)
    first_hop: dict[str, Pool] = {}
    second_hop: dict[str, Pool] = {}

    for hop_token in hop_tokens:
        first = _most_liquid(pools_token_in, token_in, hop_token)
        if first is not None:
            first_hop[hop_token] = first
        second = _most_liquid(pools_token_out, hop_token, token_out)
        if second is not None:
            second_hop[hop_token] = second

    return first_hop, second_hop


def _make_hop(pool: Pool, token_in: str, token_out: str) -> Hop | None:
    try:
        pair = parse_pool_pair_data(pool, token_in, token_out)
    except TokenNotInPoolError as err:
        logger.debug("hop_token_missing", pool_id=pool.id, token=err.token, role=err.role)
        return None
    if not get_pricing(pool.pool_type).supports(pair):
        logger.debug("hop_unsupported", pool_id=pool.id, pair_type=pair.pair_type.value)
        return None
    return Hop(pool=pool, pair=pair)


def parse_pool_data(
    direct_pools: Mapping[str, Pool],
    token_in: str,
    token_out: str,
    first_hop: Mapping[str, Pool],
    second_hop: Mapping[str, Pool],
    hop_tokens: Iterable[str],
) -> tuple[dict[str, Pool], list[Path]]:
    """Materialize direct and two-hop paths.

    Returns:
        (pools, paths): only the pools actually referenced by a path, and
        the paths deduplicated by id in construction order.
    """
    token_in = normalize_address(token_in)
    token_out = normalize_address(token_out)
    used_pools: dict[str, Pool] = {}
    paths: dict[str, Path] = {}

    for pool in direct_pools.values():
        hop = _make_hop(pool, token_in, token_out)
        if hop is None:
            continue
        path = Path.from_hops(hop)
        if path.id not in paths:
            paths[path.id] = path
            used_pools[pool.id] = pool

    for hop_token in hop_tokens:
        pool_a = first_hop.get(hop_token)
        pool_b = second_hop.get(hop_token)
        if pool_a is None or pool_b is None:
            continue
        hop_a = _make_hop(pool_a, token_in, hop_token)
        hop_b = _make_hop(pool_b, hop_token, token_out)
        if hop_a is None or hop_b is None:
            continue
        path = Path.from_hops(hop_a, hop_b)
        if path.id not in paths:
            paths[path.id] = path
            used_pools[pool_a.id] = pool_a
            used_pools[pool_b.id] = pool_b

    return used_pools, list(paths.values())


def build_paths(
    pools: Mapping[str, Pool],
    token_in: str,
    token_out: str,
    disabled_tokens: Iterable[str] = (),
) -> tuple[dict[str, Pool], list[Path]]:
    """Run filter, ranking and materialization for one token pair."""
    direct_pools, hop_tokens, pools_token_in, pools_token_out = filter_pools(
        pools, token_in, token_out, disabled_tokens
    )
    first_hop, second_hop = sort_pools_most_liquid(
        token_in, token_out, hop_tokens, pools_token_in, pools_token_out
    )
    used_pools, paths = parse_pool_data(
        direct_pools, token_in, token_out, first_hop, second_hop, hop_tokens
    )
    logger.debug(
        "paths_built",
        token_in=normalize_address(token_in),
        token_out=normalize_address(token_out),
        direct_pools=len(direct_pools),
        hop_tokens=len(hop_tokens),
        paths=len(paths),
    )
    return used_pools, paths


__all__ = ["build_paths", "filter_pools", "parse_pool_data", "sort_pools_most_liquid"]
