"""Pool discovery over HTTP."""

from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from sor.errors import DataUnavailableError
from sor.models.pools import PoolUniverse

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0


class HttpPoolDiscovery:
    """Fetches ``{"pools": [...]}`` JSON from a URL.

    A client may be injected (e.g. with an httpx.MockTransport in tests);
    otherwise a short-lived AsyncClient is opened per call.
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    async def get_pools(self) -> PoolUniverse:
        try:
            if self._client is not None:
                payload = await self._fetch(self._client)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    payload = await self._fetch(client)
        except httpx.HTTPError as err:
            logger.error("pool_fetch_failed", url=self.url, error=str(err))
            raise DataUnavailableError(f"Could not fetch pools from {self.url}: {err}") from err

        try:
            universe = PoolUniverse.model_validate(payload)
        except ValidationError as err:
            raise DataUnavailableError(f"Invalid pool data from {self.url}: {err}") from err
        logger.info("pools_fetched", url=self.url, pools=len(universe.pools))
        return universe

    async def _fetch(self, client: httpx.AsyncClient) -> object:
        response = await client.get(self.url)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as err:
            raise DataUnavailableError(f"Response from {self.url} is not JSON") from err
