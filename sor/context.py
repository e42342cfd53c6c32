"""Router context: one immutable pool snapshot plus caches derived from it.

A context is never updated in place when the snapshot changes. The router
builds a new context and publishes it with a single attribute assignment,
so a query that already holds the old context keeps reading a consistent
snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sor.models.pools import PoolUniverse
from sor.models.types import SwapType
from sor.pools.parsing import parse_pools
from sor.pools.pool import Pool
from sor.routing.pricer import PricedPath

# (token_in, token_out, swap_type)
ProcessedKey = tuple[str, str, SwapType]


@dataclass(frozen=True)
class ProcessedPairData:
    """Paths and prices for one query direction, reusable across amounts."""

    pools: dict[str, Pool]
    paths: tuple[PricedPath, ...]
    market_sp: Decimal


@dataclass(frozen=True)
class RouterContext:
    """Snapshot-scoped routing state.

    Attributes:
        universe: Raw pool snapshot
        pools: Parsed pools keyed by id
        finished_fetching: True once a full fetch completed for this snapshot
        processed: Per-direction cache of paths and prices; entries are only
            ever added, and the whole cache is dropped with the context
    """

    universe: PoolUniverse
    pools: dict[str, Pool]
    finished_fetching: bool = False
    processed: dict[ProcessedKey, ProcessedPairData] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> RouterContext:
        """The explicit no-data state."""
        return cls(universe=PoolUniverse.empty(), pools={})

    @classmethod
    def from_universe(cls, universe: PoolUniverse, finished_fetching: bool = True) -> RouterContext:
        return cls(
            universe=universe,
            pools=parse_pools(universe),
            finished_fetching=finished_fetching,
        )

    def successor(self, universe: PoolUniverse) -> RouterContext:
        """Context for a newly fetched snapshot.

        An equal snapshot keeps this context's parsed pools and processed
        cache; a different one starts from scratch.
        """
        if universe == self.universe:
            return RouterContext(
                universe=self.universe,
                pools=self.pools,
                finished_fetching=True,
                processed=self.processed,
            )
        return RouterContext.from_universe(universe)

    def get_processed(self, key: ProcessedKey) -> ProcessedPairData | None:
        return self.processed.get(key)

    def store_processed(self, key: ProcessedKey, data: ProcessedPairData) -> None:
        self.processed[key] = data

    @property
    def is_empty(self) -> bool:
        return self.universe.is_empty
