"""Shared type definitions for router models."""

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import Field

# Non-negative decimal amount in human units (e.g. "1.5" WETH)
Amount = Annotated[Decimal, Field(ge=0, description="Decimal amount in human units")]


class SwapType(str, Enum):
    """Which side of the trade is fixed."""

    EXACT_IN = "swapExactIn"
    EXACT_OUT = "swapExactOut"


def normalize_address(address: str) -> str:
    """Canonicalize a token or pool address for lookups.

    Args:
        address: Address in any case, with or without 0x prefix

    Returns:
        Lowercase address with 0x prefix
    """
    addr = address.strip().lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False
