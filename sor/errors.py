"""Router error classes.

Pair-local errors (TokenNotInPoolError) are absorbed by the path builder;
DataUnavailableError is absorbed by SmartOrderRouter.fetch_pools, which
reports the failure to its caller as a False return.
"""


class RouterError(Exception):
    """Base error for smart order router operations."""

    pass


class TokenNotInPoolError(RouterError):
    """A token requested for a pair projection is not a member of the pool."""

    def __init__(self, pool_id: str, token: str, role: str) -> None:
        super().__init__(f"Pool {pool_id} does not contain token{role.capitalize()} {token}")
        self.pool_id = pool_id
        self.token = token
        self.role = role


class InvalidPoolError(RouterError):
    """Pool snapshot data cannot be turned into a usable pool."""

    pass


class DataUnavailableError(RouterError):
    """Pool discovery or chain data could not be retrieved."""

    pass
