"""Collaborator interfaces for pool data and cost estimation.

The router only depends on these protocols; the reference implementations
in this package can be swapped for indexer, multicall or oracle backed
ones without touching the routing code.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from sor.models.pools import PoolUniverse


@runtime_checkable
class PoolDiscovery(Protocol):
    """Source of the raw pool universe."""

    async def get_pools(self) -> PoolUniverse:
        """Return every known pool.

        Raises:
            DataUnavailableError: If the source cannot be reached or parsed
        """
        ...


@runtime_checkable
class ChainDataProvider(Protocol):
    """Refreshes pool balances from the chain."""

    async def get_balances(self, universe: PoolUniverse) -> PoolUniverse:
        """Return the same pools with current balances and parameters.

        Raises:
            DataUnavailableError: If balances cannot be retrieved
        """
        ...


@runtime_checkable
class CostEstimator(Protocol):
    """Prices the fixed cost of touching one pool."""

    async def get_cost_per_pool(self, token: str, gas_price: Decimal, swap_gas: int) -> Decimal:
        """Cost of one pool interaction expressed in ``token`` (human units).

        Args:
            token: Token the cost is charged in
            gas_price: Gas price in wei
            swap_gas: Gas used per pool interaction
        """
        ...
