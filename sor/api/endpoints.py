"""API endpoints for the smart order router."""

import functools
import os

import structlog
from fastapi import APIRouter, Depends, HTTPException

from sor.config import RouterConfig
from sor.models.pools import PoolUniverse
from sor.models.swap import SwapInfo, SwapRequest
from sor.providers.base import PoolDiscovery
from sor.providers.http import HttpPoolDiscovery
from sor.providers.static import StaticPoolDiscovery
from sor.router import SmartOrderRouter

logger = structlog.get_logger()

router = APIRouter()


@functools.cache
def get_default_router() -> SmartOrderRouter:
    """Process-wide router built from SOR_* environment variables.

    SOR_POOLS_URL selects HTTP pool discovery; without it the router starts
    with no pools.
    """
    pools_url = os.environ.get("SOR_POOLS_URL")
    discovery: PoolDiscovery
    if pools_url:
        discovery = HttpPoolDiscovery(pools_url)
    else:
        discovery = StaticPoolDiscovery(PoolUniverse.empty())
    return SmartOrderRouter(discovery, config=RouterConfig.from_env())


def get_router() -> SmartOrderRouter:
    """Dependency provider for the router instance.

    Override this in tests to inject a prepared router:
        app.dependency_overrides[get_router] = lambda: router

    Returns:
        The router instance to use for queries.
    """
    return get_default_router()


@router.post("/pools/refresh")
async def refresh_pools(
    router_instance: SmartOrderRouter = Depends(get_router),
) -> dict[str, object]:
    """Fetch the pool universe again.

    Returns:
        ``success`` is False when the data source was unavailable; the
        router then serves no routes until a later refresh succeeds.
    """
    success = await router_instance.fetch_pools()
    return {"success": success, "pools": len(router_instance.context.pools)}


@router.post("/swaps", response_model_by_alias=True)
async def get_swaps(
    request: SwapRequest,
    router_instance: SmartOrderRouter = Depends(get_router),
) -> SwapInfo:
    """Route a swap.

    Error Handling:
        - Invalid request schema: Returns 422 Validation Error (Pydantic)
        - No route: 200 with the empty SwapInfo
        - Router exception: Logs error, returns 500 so callers can tell a
          failure apart from a pair with no route
    """
    logger.info(
        "received_swap_request",
        token_in=request.token_in,
        token_out=request.token_out,
        swap_type=request.swap_type.value,
        amount=str(request.amount),
    )
    try:
        return router_instance.get_swaps(
            request.token_in, request.token_out, request.swap_type, request.amount
        )
    except Exception:
        logger.exception(
            "router_error",
            token_in=request.token_in,
            token_out=request.token_out,
        )
        raise HTTPException(status_code=500, detail="Router failed to route the swap") from None
