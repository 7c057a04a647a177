"""
Data access layer: a backend-agnostic contract over a pooled relational store.

Route handlers take a handle from get_data_access() (shared) or
create_data_access_layer() / disposable_data_access() (one-off validation)
and never touch a driver directly.
"""

from .errors import (
    ConfigurationError,
    DataAccessError,
    DatabaseConnectionError,
    PoolClosedError,
    PoolExhaustedError,
    QueryError,
    QueryParameterError,
    QueryTimeoutError,
)
from .facade import DataAccessLayer, DisposableDataAccessLayer
from .health import report_health
from .lifecycle import (
    create_data_access_layer,
    disposable_data_access,
    get_data_access,
    shutdown_data_access,
)
from .models import (
    AdapterType,
    ConnectionDescriptor,
    HealthState,
    HealthStatus,
    QuerySpec,
    ResultRow,
)

__all__ = [
    "AdapterType",
    "ConfigurationError",
    "ConnectionDescriptor",
    "DataAccessError",
    "DataAccessLayer",
    "DatabaseConnectionError",
    "DisposableDataAccessLayer",
    "HealthState",
    "HealthStatus",
    "PoolClosedError",
    "PoolExhaustedError",
    "QueryError",
    "QueryParameterError",
    "QuerySpec",
    "QueryTimeoutError",
    "ResultRow",
    "create_data_access_layer",
    "disposable_data_access",
    "get_data_access",
    "report_health",
    "shutdown_data_access",
]
