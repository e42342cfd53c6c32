"""Routing data structures shared by the path builder, pricer and allocator."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from sor.math import ZERO
from sor.models.types import SwapType
from sor.pools.pool import Pool
from sor.pools.projection import PoolPairData

if TYPE_CHECKING:
    from sor.routing.pricer import PricedPath


@dataclass(frozen=True)
class Hop:
    """One pool traversal: the pool plus its projection for this direction."""

    pool: Pool
    pair: PoolPairData

    @property
    def pool_id(self) -> str:
        return self.pool.id

    @property
    def token_in(self) -> str:
        return self.pair.token_in

    @property
    def token_out(self) -> str:
        return self.pair.token_out


@dataclass(frozen=True)
class Path:
    """A direct (one hop) or two-hop route from token_in to token_out.

    The id is the concatenation of the pool ids, so the same pools in the
    same order always yield the same path.
    """

    id: str
    hops: tuple[Hop, ...]

    def __post_init__(self) -> None:
        if not 1 <= len(self.hops) <= 2:
            raise ValueError(f"Path {self.id} must have one or two hops, got {len(self.hops)}")
        if len(self.hops) == 2 and self.hops[0].token_out != self.hops[1].token_in:
            raise ValueError(f"Path {self.id} hops do not share a hop token")

    @classmethod
    def from_hops(cls, *hops: Hop) -> Path:
        return cls(id="".join(h.pool_id for h in hops), hops=tuple(hops))

    @property
    def token_in(self) -> str:
        return self.hops[0].token_in

    @property
    def token_out(self) -> str:
        return self.hops[-1].token_out


@dataclass(frozen=True)
class Allocation:
    """Split of a trade across priced paths.

    Attributes:
        swap_type: Which side of the trade is fixed
        entries: (path, amount) pairs in allocator order; amounts are the
            fixed side (input for ExactIn, output for ExactOut)
        total: Recomputed result (output for ExactIn, required input for ExactOut)
        objective: total net of pool costs (output minus costs for ExactIn,
            input plus costs for ExactOut)
    """

    swap_type: SwapType
    entries: tuple[tuple[PricedPath, Decimal], ...] = field(default_factory=tuple)
    total: Decimal = ZERO
    objective: Decimal = ZERO

    @classmethod
    def empty(cls, swap_type: SwapType) -> Allocation:
        return cls(swap_type=swap_type)

    @property
    def is_empty(self) -> bool:
        return len(self.entries) == 0

    @property
    def n_pools(self) -> int:
        """Number of pool interactions used across all paths."""
        return sum(len(path.path.hops) for path, _ in self.entries)

    @property
    def amounts(self) -> list[Decimal]:
        return [amount for _, amount in self.entries]

    @property
    def allocated(self) -> Decimal:
        """Sum of the fixed-side amounts."""
        return sum((amount for _, amount in self.entries), ZERO)
