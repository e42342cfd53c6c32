"""In-memory collaborators, used for tests and for pre-fetched pool data."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from sor.errors import DataUnavailableError
from sor.models.pools import PoolUniverse

logger = structlog.get_logger()


class StaticPoolDiscovery:
    """Serves a fixed pool universe.

    Accepts either a PoolUniverse or the raw ``{"pools": [...]}`` mapping;
    raw data is validated on every call so a bad payload surfaces as
    DataUnavailableError, the same way a bad HTTP response would.
    """

    def __init__(self, pools: PoolUniverse | Mapping[str, Any]) -> None:
        self._pools = pools

    async def get_pools(self) -> PoolUniverse:
        if isinstance(self._pools, PoolUniverse):
            return self._pools
        try:
            return PoolUniverse.model_validate(self._pools)
        except ValidationError as err:
            raise DataUnavailableError(f"Invalid pool data: {err}") from err


class PassthroughChainData:
    """Returns pools unchanged: balances are taken as given by discovery."""

    async def get_balances(self, universe: PoolUniverse) -> PoolUniverse:
        if universe.is_empty:
            logger.warning("no_pools_to_fetch")
        return universe
