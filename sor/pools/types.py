"""Pool and pair type tags."""

from enum import Enum


class PoolType(str, Enum):
    """Pool invariant family. Open for extension: add a tag and a pricing class."""

    WEIGHTED = "Weighted"
    STABLE = "Stable"
    ELEMENT = "Element"

    @classmethod
    def parse(cls, value: str) -> "PoolType | None":
        """Case-insensitive lookup, None for unknown tags."""
        lowered = value.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


class PairType(str, Enum):
    """Direction-specific view of a pool.

    Bpt stands for the pool's own share token (balancer pool token).
    """

    TOKEN_TO_TOKEN = "TokenToToken"
    TOKEN_TO_BPT = "TokenToBpt"
    BPT_TO_TOKEN = "BptToToken"
