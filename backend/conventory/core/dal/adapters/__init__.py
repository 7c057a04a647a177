"""Database adapters, one per supported engine."""

from ..errors import ConfigurationError
from ..models import AdapterType, ConnectionDescriptor
from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter

ADAPTERS: dict[AdapterType, type[DatabaseAdapter]] = {
    AdapterType.POSTGRESQL: PostgresAdapter,
    AdapterType.MYSQL: MySQLAdapter,
}


def get_adapter(descriptor: ConnectionDescriptor) -> DatabaseAdapter:
    """Build (without connecting) the adapter for the descriptor's engine."""
    try:
        adapter_cls = ADAPTERS[descriptor.engine]
    except KeyError:
        raise ConfigurationError(f"Unsupported database engine: {descriptor.engine}") from None
    return adapter_cls(descriptor)


__all__ = [
    "ADAPTERS",
    "DatabaseAdapter",
    "MySQLAdapter",
    "PostgresAdapter",
    "get_adapter",
]
