"""Pool domain dataclasses.

A Pool is the parsed, canonical form of a PoolSnapshot: addresses are
lowercase, amounts are Decimal, weights are normalized to sum to 1.
Pools are frozen; routing never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sor.math import ZERO
from sor.models.types import normalize_address
from sor.pools.types import PoolType


@dataclass(frozen=True)
class PoolToken:
    """Member token of a pool.

    Attributes:
        address: Lowercase token address
        balance: Balance in human units
        decimals: Token decimals (used for rounding and minimum units)
        weight: Normalized weight (weighted pools), ZERO otherwise
    """

    address: str
    balance: Decimal
    decimals: int
    weight: Decimal = ZERO


@dataclass(frozen=True)
class Pool:
    """A liquidity pool of any supported type.

    Attributes:
        id: Pool id as reported by discovery (lowercase)
        address: Share-token identity; equals id unless discovery says otherwise
        pool_type: Invariant family
        swap_fee: Fee as decimal (e.g. 0.003 for 0.3%)
        total_shares: Outstanding share-token supply
        tokens: Member tokens, in discovery order
        amp: Amplification parameter (stable pools)
        lp_shares: Virtual liquidity added to the principal side (element pools)
        time: Time to maturity in [0, 1) (element pools)
        principal_token: Yield-bearing principal token (element pools)
        base_token: Underlying base token (element pools)
    """

    id: str
    address: str
    pool_type: PoolType
    swap_fee: Decimal
    total_shares: Decimal
    tokens: tuple[PoolToken, ...]
    amp: Decimal = ZERO
    lp_shares: Decimal = ZERO
    time: Decimal = ZERO
    principal_token: str | None = None
    base_token: str | None = None

    def get_token(self, token: str) -> PoolToken | None:
        """Get member token info (case-insensitive)."""
        token_norm = normalize_address(token)
        for pool_token in self.tokens:
            if pool_token.address == token_norm:
                return pool_token
        return None

    @property
    def token_addresses(self) -> tuple[str, ...]:
        return tuple(t.address for t in self.tokens)

    def tradable_tokens(self) -> frozenset[str]:
        """Member tokens plus the pool's own share token."""
        return frozenset(self.token_addresses) | {self.address}
