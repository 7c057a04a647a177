"""
Error taxonomy for the data access layer.

Adapters translate driver exceptions into these types; nothing from psycopg
or pymysql escapes past the facade.
"""


class DataAccessError(Exception):
    """Base class for every failure surfaced by the data access layer."""

    transient = False


class ConfigurationError(DataAccessError):
    """Connection parameters are missing or invalid."""


class QueryParameterError(DataAccessError, ValueError):
    """Placeholder count does not match the supplied bind values (caller error)."""


class QueryError(DataAccessError):
    """The engine rejected or failed a statement.

    ``code`` is the native error code (SQLSTATE for PostgreSQL, errno for MySQL)
    when the driver reports one.
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class DatabaseConnectionError(QueryError):
    """The database could not be reached, or refused the credentials."""

    transient = True


class QueryTimeoutError(DataAccessError, TimeoutError):
    """A statement or connection attempt exceeded its deadline."""

    transient = True


class PoolExhaustedError(DataAccessError):
    """No pooled connection became available before the pool-wait timeout."""

    transient = True


class PoolClosedError(DataAccessError):
    """The handle was used after close(); retrying will not help."""
