"""Base classes for pool pricing strategies.

Each pool type implements PoolPricing. Public methods never raise for an
unsupported pair kind or an amount the invariant cannot serve; they return a
PriceResult carrying a PricingError instead, so the path builder and the
allocator can drop a hop or cap a path without exception handling.
"""

from __future__ import annotations

import decimal
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from sor.amm.errors import PoolMathError
from sor.math import DECIMAL_CONTEXT, ONE, ZERO, min_unit, quantize_down
from sor.models.types import SwapType
from sor.pools.projection import PoolPairData
from sor.pools.types import PairType, PoolType


class PricingError(Enum):
    """Why a pricing call produced no value."""

    UNSUPPORTED_PAIR = "unsupported_pair"
    OUTSIDE_DOMAIN = "outside_domain"


@dataclass(frozen=True)
class PriceResult:
    """Result of a pricing call.

    Attributes:
        value: The computed amount, price or derivative, or None on error
        error: If the call failed, the kind of failure
        error_detail: Optional human-readable detail about the error

    Examples:
        result = PriceResult.ok(Decimal("99.7"))
        assert result.is_valid

        result = PriceResult.outside_domain("amount exceeds balance")
        assert result.is_error
    """

    value: Decimal | None
    error: PricingError | None = None
    error_detail: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self) -> Decimal:
        """Return the value, raising ValueError if the call failed."""
        if self.value is None:
            raise ValueError(f"Pricing failed: {self.error} ({self.error_detail})")
        return self.value

    @classmethod
    def ok(cls, value: Decimal) -> PriceResult:
        return cls(value=value)

    @classmethod
    def unsupported(cls, detail: str | None = None) -> PriceResult:
        return cls(value=None, error=PricingError.UNSUPPORTED_PAIR, error_detail=detail)

    @classmethod
    def outside_domain(cls, detail: str | None = None) -> PriceResult:
        return cls(value=None, error=PricingError.OUTSIDE_DOMAIN, error_detail=detail)


# (pair, amount) -> Decimal, evaluated inside DECIMAL_CONTEXT
Formula = Callable[[PoolPairData, Decimal], Decimal]


class PoolPricing(ABC):
    """Capability set every pool type provides.

    Subclasses implement the raw formulas (the underscore methods) for the
    pair kinds they support; this class handles the zero-amount contract,
    pair-kind support checks, the Decimal context and the conversion of
    arithmetic failures into OUTSIDE_DOMAIN results.

    Spot prices are quoted as units of token_in per unit of token_out for the
    next infinitesimal trade, so a lower price is better for either swap type.
    """

    pool_type: ClassVar[PoolType]
    supported_pairs: ClassVar[frozenset[PairType]] = frozenset({PairType.TOKEN_TO_TOKEN})

    def supports(self, pair: PoolPairData) -> bool:
        """True if this pool type can price the pair kind."""
        return pair.pair_type in self.supported_pairs

    # ------------------------------------------------------------------
    # Public capability set
    # ------------------------------------------------------------------

    def out_given_in(self, pair: PoolPairData, amount: Decimal) -> PriceResult:
        """Amount of token_out received for ``amount`` of token_in."""
        if amount == 0 and self.supports(pair):
            return PriceResult.ok(ZERO)
        return self._evaluate(pair, amount, self._out_given_in)

    def in_given_out(self, pair: PoolPairData, amount: Decimal) -> PriceResult:
        """Amount of token_in required to receive ``amount`` of token_out."""
        if amount == 0 and self.supports(pair):
            return PriceResult.ok(ZERO)
        return self._evaluate(pair, amount, self._in_given_out)

    def spot_price_after_swap(
        self, pair: PoolPairData, amount: Decimal, swap_type: SwapType
    ) -> PriceResult:
        """Marginal price after swapping ``amount`` (input for ExactIn, output for ExactOut)."""
        if swap_type == SwapType.EXACT_IN:
            return self._evaluate(pair, amount, self._spot_price_exact_in)
        return self._evaluate(pair, amount, self._spot_price_exact_out)

    def derivative_spot_price_after_swap(
        self, pair: PoolPairData, amount: Decimal, swap_type: SwapType
    ) -> PriceResult:
        """Derivative of spot_price_after_swap with respect to ``amount``."""
        if swap_type == SwapType.EXACT_IN:
            return self._evaluate(pair, amount, self._derivative_exact_in)
        return self._evaluate(pair, amount, self._derivative_exact_out)

    def normalized_liquidity(self, pair: PoolPairData) -> PriceResult:
        """Ranking scalar: the inverse slope of the ExactIn spot price at zero.

        Falls back to balance_out when the price curve is flat at zero.
        """
        derivative = self.derivative_spot_price_after_swap(pair, ZERO, SwapType.EXACT_IN)
        if derivative.is_error:
            return derivative
        with decimal.localcontext(DECIMAL_CONTEXT):
            slope = derivative.unwrap()
            if slope <= 0:
                return PriceResult.ok(pair.balance_out)
            return PriceResult.ok(ONE / slope)

    def limit_amount(self, pair: PoolPairData, swap_type: SwapType) -> PriceResult:
        """Largest amount (input for ExactIn, output for ExactOut) the pool can serve.

        By default the output side may be drained down to one minimum unit,
        and the ExactIn bound is the input that buys exactly that much.
        """
        if not self.supports(pair):
            return PriceResult.unsupported(f"{self.pool_type.value} {pair.pair_type.value}")
        with decimal.localcontext(DECIMAL_CONTEXT):
            max_out = pair.balance_out - min_unit(pair.decimals_out)
        if max_out <= 0:
            return PriceResult.ok(ZERO)
        if swap_type == SwapType.EXACT_OUT:
            return PriceResult.ok(quantize_down(max_out, pair.decimals_out))
        max_in = self.in_given_out(pair, max_out)
        if max_in.is_error:
            return max_in
        return PriceResult.ok(quantize_down(max_in.unwrap(), pair.decimals_in))

    # ------------------------------------------------------------------
    # Formulas implemented per pool type
    # ------------------------------------------------------------------

    @abstractmethod
    def _out_given_in(self, pair: PoolPairData, amount: Decimal) -> Decimal: ...

    @abstractmethod
    def _in_given_out(self, pair: PoolPairData, amount: Decimal) -> Decimal: ...

    @abstractmethod
    def _spot_price_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal: ...

    @abstractmethod
    def _spot_price_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal: ...

    @abstractmethod
    def _derivative_exact_in(self, pair: PoolPairData, amount: Decimal) -> Decimal: ...

    @abstractmethod
    def _derivative_exact_out(self, pair: PoolPairData, amount: Decimal) -> Decimal: ...

    # ------------------------------------------------------------------

    def _evaluate(self, pair: PoolPairData, amount: Decimal, formula: Formula) -> PriceResult:
        if not self.supports(pair):
            return PriceResult.unsupported(f"{self.pool_type.value} {pair.pair_type.value}")
        if amount < 0:
            return PriceResult.outside_domain(f"negative amount {amount}")
        try:
            with decimal.localcontext(DECIMAL_CONTEXT):
                value = formula(pair, amount)
        except (ArithmeticError, PoolMathError) as err:
            return PriceResult.outside_domain(str(err) or type(err).__name__)
        if not value.is_finite():
            return PriceResult.outside_domain(f"non-finite result {value}")
        return PriceResult.ok(value)
