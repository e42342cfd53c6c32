"""Pydantic models for the raw pool snapshot.

This is the wire format produced by pool discovery and chain data providers:
balances are decimal strings in human units (already normalized by token
decimals). Models are frozen, so a snapshot is an immutable value and two
snapshots compare equal exactly when their contents are equal.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class PoolTokenSnapshot(BaseModel):
    """A member token of a pool."""

    address: str
    balance: Decimal = Field(ge=0)
    decimals: int = Field(default=18, ge=0, le=77)
    # Only meaningful for weighted pools; any positive scale, normalized later
    weight: Decimal | None = Field(default=None, ge=0)

    model_config = {"frozen": True}


class PoolSnapshot(BaseModel):
    """One pool as reported by pool discovery.

    ``pool_type`` is kept as a free string so that a universe containing pool
    types this router does not know still validates; unknown types are skipped
    (with a warning) when the snapshot is parsed into domain pools.
    """

    id: str
    # Share-token identity; pools whose id is not their token address set this
    address: str | None = None
    pool_type: str = Field(alias="poolType")
    swap_fee: Decimal = Field(alias="swapFee", ge=0, lt=1)
    total_shares: Decimal = Field(default=Decimal(0), alias="totalShares", ge=0)
    tokens: tuple[PoolTokenSnapshot, ...] = ()
    # Stable pools
    amp: Decimal | None = Field(default=None, gt=0)
    # Element pools
    lp_shares: Decimal | None = Field(default=None, alias="lpShares", ge=0)
    time: Decimal | None = Field(default=None, ge=0, lt=1)
    principal_token: str | None = Field(default=None, alias="principalToken")
    base_token: str | None = Field(default=None, alias="baseToken")

    model_config = {"frozen": True, "populate_by_name": True}


class PoolUniverse(BaseModel):
    """The full set of pools known at one instant."""

    pools: tuple[PoolSnapshot, ...] = ()

    model_config = {"frozen": True}

    @classmethod
    def empty(cls) -> "PoolUniverse":
        """Create the explicit empty universe."""
        return cls(pools=())

    @property
    def is_empty(self) -> bool:
        return len(self.pools) == 0

    def filter_ids(self, pool_ids: set[str]) -> "PoolUniverse":
        """Return a universe with only the given pool ids, preserving order."""
        wanted = {pid.lower() for pid in pool_ids}
        return PoolUniverse(pools=tuple(p for p in self.pools if p.id.lower() in wanted))
