"""Per-pool cost estimation from gas price and native-token prices."""

from __future__ import annotations

import decimal
from collections.abc import Mapping
from decimal import Decimal

import structlog

from sor.math import DECIMAL_CONTEXT, ZERO, to_decimal
from sor.models.types import normalize_address

logger = structlog.get_logger()

# Wei per native token
NATIVE_SCALE = Decimal(10) ** 18


class NativePriceCostEstimator:
    """Converts gas cost into a token using a table of native-token prices.

    cost = gas_price * swap_gas / 1e18 * price[token]

    where price[token] is how many units of the token one native token buys.
    Tokens without a price cost nothing, which keeps routing possible (it
    just ignores per-pool cost for that token).
    """

    def __init__(self, prices: Mapping[str, Decimal | str | int]) -> None:
        self._prices = {normalize_address(t): to_decimal(p) for t, p in prices.items()}

    async def get_cost_per_pool(self, token: str, gas_price: Decimal, swap_gas: int) -> Decimal:
        price = self._prices.get(normalize_address(token))
        if price is None:
            logger.debug("token_price_missing", token=normalize_address(token))
            return ZERO
        with decimal.localcontext(DECIMAL_CONTEXT):
            return gas_price * swap_gas / NATIVE_SCALE * price
