"""Pydantic models for swap requests and routing results."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from sor.models.types import Amount, SwapType, is_valid_address, normalize_address


class SwapRequest(BaseModel):
    """A routing query."""

    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    swap_type: SwapType = Field(default=SwapType.EXACT_IN, alias="swapType")
    amount: Amount

    model_config = {"populate_by_name": True}

    @field_validator("token_in", "token_out")
    @classmethod
    def check_address(cls, value: str) -> str:
        address = normalize_address(value)
        if not is_valid_address(address):
            raise ValueError(f"Invalid token address: {value}")
        return address


class SwapLeg(BaseModel):
    """A single pool interaction of the final route.

    For exact-in legs ``amount`` is the amount of ``token_in`` sent to the
    pool; for exact-out legs it is the amount of ``token_out`` taken from it.
    The asset indexes point into ``SwapInfo.token_addresses``.
    """

    pool_id: str = Field(alias="poolId")
    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    amount: Decimal
    asset_in_index: int = Field(alias="assetInIndex")
    asset_out_index: int = Field(alias="assetOutIndex")

    model_config = {"populate_by_name": True}


class SwapInfo(BaseModel):
    """Routing result handed to the execution layer.

    An empty result (no legs, zero amounts) is the explicit "no route" state.
    """

    token_addresses: list[str] = Field(default_factory=list, alias="tokenAddresses")
    swaps: list[SwapLeg] = Field(default_factory=list)
    swap_amount: Decimal = Field(default=Decimal(0), alias="swapAmount")
    return_amount: Decimal = Field(default=Decimal(0), alias="returnAmount")
    token_in: str = Field(default="", alias="tokenIn")
    token_out: str = Field(default="", alias="tokenOut")
    market_sp: Decimal = Field(default=Decimal(0), alias="marketSp")

    model_config = {"populate_by_name": True}

    @classmethod
    def empty(cls) -> "SwapInfo":
        """Create the explicit no-route result."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return len(self.swaps) == 0
