"""SmartOrderRouter facade.

Ties pool discovery, chain data and cost estimation to the routing
pipeline:

    parse pools -> build paths -> price paths -> allocate -> format swaps

Two data modes are supported. fetch_pools() loads the full universe; until
it has succeeded, fetch_filtered_pair_pools() can load just the pools a
token pair actually uses, which is much cheaper to keep fresh.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from sor.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from sor.context import ProcessedPairData, RouterContext
from sor.errors import DataUnavailableError
from sor.math import ZERO, decimal_context, to_decimal
from sor.models.swap import SwapInfo
from sor.models.types import SwapType, normalize_address
from sor.pools.parsing import parse_pools
from sor.pools.pool import Pool
from sor.providers.base import ChainDataProvider, CostEstimator, PoolDiscovery
from sor.providers.static import PassthroughChainData
from sor.routing.allocator import smart_order_router
from sor.routing.formatter import format_swaps
from sor.routing.pathfinding import build_paths
from sor.routing.pricer import PricedPath, get_market_spot_price, process_paths
from sor.routing.types import Path

logger = structlog.get_logger()


class SmartOrderRouter:
    """Routes swaps over a snapshot of pools.

    Usage:
        router = SmartOrderRouter(StaticPoolDiscovery(data))
        await router.fetch_pools()
        info = router.get_swaps(dai, usdc, SwapType.EXACT_IN, Decimal("100"))
    """

    def __init__(
        self,
        pool_discovery: PoolDiscovery,
        chain_data: ChainDataProvider | None = None,
        cost_estimator: CostEstimator | None = None,
        gas_price: Decimal = ZERO,
        config: RouterConfig = DEFAULT_ROUTER_CONFIG,
    ) -> None:
        """Initialize the router.

        Args:
            pool_discovery: Source of the pool universe
            chain_data: Balance refresher (default: use discovery balances as-is)
            cost_estimator: Per-pool cost source for set_cost_output_token
            gas_price: Gas price in wei passed to the cost estimator
            config: Routing configuration
        """
        self.pool_discovery = pool_discovery
        self.chain_data = chain_data if chain_data is not None else PassthroughChainData()
        self.cost_estimator = cost_estimator
        self.gas_price = gas_price
        self.config = config
        self._context = RouterContext.empty()
        self._pools_for_pairs: dict[str, RouterContext] = {}
        self._token_cost: dict[str, Decimal] = {}

    @property
    def context(self) -> RouterContext:
        return self._context

    @property
    def finished_fetching(self) -> bool:
        return self._context.finished_fetching

    def get_token_cost(self, token: str) -> Decimal:
        """Cached per-pool cost for a token, ZERO if never set."""
        return self._token_cost.get(normalize_address(token), ZERO)

    async def set_cost_output_token(self, token: str, cost: Decimal | None = None) -> Decimal:
        """Cache the per-pool cost of ``token``.

        Args:
            token: Token the cost is expressed in
            cost: Manual cost; if None it is estimated via the cost estimator

        Returns:
            The cached cost
        """
        token = normalize_address(token)
        if cost is None:
            if self.cost_estimator is None:
                cost = ZERO
            else:
                cost = await self.cost_estimator.get_cost_per_pool(
                    token, self.gas_price, self.config.swap_gas_cost
                )
        cost = to_decimal(cost)
        self._token_cost[token] = cost
        logger.debug("token_cost_set", token=token, cost=str(cost))
        return cost

    async def fetch_pools(self) -> bool:
        """Fetch the full pool universe and its balances.

        Returns:
            True on success. On failure the router is reset to the empty
            context and False is returned so the caller can retry.
        """
        try:
            universe = await self.pool_discovery.get_pools()
            universe = await self.chain_data.get_balances(universe)
        except DataUnavailableError as err:
            self._context = RouterContext.empty()
            logger.error("fetch_pools_failed", error=str(err))
            return False

        previous = self._context
        self._context = previous.successor(universe)
        logger.info(
            "pools_fetched",
            pools=len(universe.pools),
            parsed=len(self._context.pools),
            cache_kept=self._context.processed is previous.processed,
        )
        return True

    def get_swaps(
        self,
        token_in: str,
        token_out: str,
        swap_type: SwapType,
        amount: Decimal,
    ) -> SwapInfo:
        """Best split of ``amount`` between token_in and token_out.

        Uses the full snapshot once fetch_pools() has succeeded, otherwise
        the pools cached for the pair by fetch_filtered_pair_pools(). With
        neither, the empty SwapInfo is returned.
        """
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        context = self._context

        if context.finished_fetching:
            return self.process_swaps(token_in, token_out, swap_type, amount, context)

        pair_context = self._pools_for_pairs.get(self.create_key(token_in, token_out))
        if pair_context is None:
            logger.debug("no_data_for_pair", token_in=token_in, token_out=token_out)
            return SwapInfo.empty()
        return self.process_swaps(
            token_in, token_out, swap_type, amount, pair_context, use_process_cache=False
        )

    @decimal_context
    def process_swaps(
        self,
        token_in: str,
        token_out: str,
        swap_type: SwapType,
        amount: Decimal,
        context: RouterContext,
        use_process_cache: bool = True,
    ) -> SwapInfo:
        """Run the routing pipeline against a context.

        Args:
            use_process_cache: Reuse (and fill) the context's per-direction
                paths cache; False forces fresh path processing
        """
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        if context.is_empty or token_in == token_out:
            return SwapInfo.empty()

        key = (token_in, token_out, swap_type)
        cached = context.get_processed(key) if use_process_cache else None
        if cached is None:
            pools, path_data = self.process_pair_pools(token_in, token_out, context.pools)
            paths, market_sp = self.process_paths_and_prices(path_data, swap_type)
            cached = ProcessedPairData(pools=pools, paths=tuple(paths), market_sp=market_sp)
            if use_process_cache:
                context.store_processed(key, cached)

        # Pool cost is charged in the token whose amount is being optimized
        cost_token = token_out if swap_type == SwapType.EXACT_IN else token_in
        allocation = smart_order_router(
            list(cached.paths),
            swap_type,
            amount,
            self.config.max_pools,
            self.get_token_cost(cost_token),
            self.config,
        )
        swap_info = format_swaps(
            allocation, swap_type, amount, token_in, token_out, cached.market_sp
        )
        logger.info(
            "route_found" if not swap_info.is_empty else "route_not_found",
            token_in=token_in,
            token_out=token_out,
            swap_type=swap_type.value,
            amount=str(amount),
            legs=len(swap_info.swaps),
            return_amount=str(swap_info.return_amount),
        )
        return swap_info

    async def fetch_filtered_pair_pools(self, token_in: str, token_out: str) -> bool:
        """Fetch balances for only the pools a token pair uses.

        Runs the allocator for both swap types over the configured probe
        amounts, keeps the pools that any probe routes through, and caches
        their refreshed balances under the pair key.

        Returns:
            True on success; on failure the pair cache is set to empty and
            False is returned.
        """
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        key = self.create_key(token_in, token_out)

        try:
            universe = await self.pool_discovery.get_pools()
            used_ids = self._probe_pools(token_in, token_out, parse_pools(universe))
            filtered = universe.filter_ids(used_ids)
            if not filtered.is_empty:
                filtered = await self.chain_data.get_balances(filtered)
        except DataUnavailableError as err:
            self._pools_for_pairs[key] = RouterContext.empty()
            logger.error(
                "fetch_pair_pools_failed", token_in=token_in, token_out=token_out, error=str(err)
            )
            return False

        self._pools_for_pairs[key] = RouterContext.from_universe(filtered, finished_fetching=False)
        logger.info(
            "pair_pools_fetched", token_in=token_in, token_out=token_out, pools=len(filtered.pools)
        )
        return True

    @decimal_context
    def _probe_pools(self, token_in: str, token_out: str, pools: dict[str, Pool]) -> set[str]:
        _, path_data = self.process_pair_pools(token_in, token_out, pools)
        paths_exact_in, _ = self.process_paths_and_prices(path_data, SwapType.EXACT_IN)
        paths_exact_out, _ = self.process_paths_and_prices(path_data, SwapType.EXACT_OUT)
        used: set[str] = set()
        for amount in self.config.filter_amounts:
            for swap_type, paths in (
                (SwapType.EXACT_IN, paths_exact_in),
                (SwapType.EXACT_OUT, paths_exact_out),
            ):
                cost_token = token_out if swap_type == SwapType.EXACT_IN else token_in
                allocation = smart_order_router(
                    paths,
                    swap_type,
                    amount,
                    self.config.max_pools,
                    self.get_token_cost(cost_token),
                    self.config,
                )
                for priced_path, _ in allocation.entries:
                    used.update(hop.pool_id for hop in priced_path.hops)
        return used

    def has_data_for_pair(self, token_in: str, token_out: str) -> bool:
        """True if swaps for the pair can be served without fetching."""
        key = self.create_key(normalize_address(token_in), normalize_address(token_out))
        return self.finished_fetching or key in self._pools_for_pairs

    @staticmethod
    def create_key(token_a: str, token_b: str) -> str:
        """Order-independent cache key for a token pair."""
        return token_a + token_b if token_a < token_b else token_b + token_a

    def process_pair_pools(
        self, token_in: str, token_out: str, pools: dict[str, Pool]
    ) -> tuple[dict[str, Pool], list[Path]]:
        """Pools and paths for a pair; independent of swap type."""
        return build_paths(pools, token_in, token_out, self.config.disabled_tokens)

    def process_paths_and_prices(
        self, paths: list[Path], swap_type: SwapType
    ) -> tuple[list[PricedPath], Decimal]:
        """Ranked priced paths for a swap type and the best market spot price."""
        priced = process_paths(paths, swap_type)
        return priced, get_market_spot_price(priced)


__all__ = ["SmartOrderRouter"]
