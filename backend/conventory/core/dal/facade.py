"""
Data access facade: the one object route handlers hold.

It forwards to the active adapter and guarantees that only the data access
taxonomy crosses its boundary. Callers never see the adapter or its pool.
"""

import logging
import weakref
from collections.abc import Sequence
from types import TracebackType
from typing import Any

from .adapters import DatabaseAdapter
from .errors import DataAccessError, QueryError
from .models import AdapterType, HealthState, HealthStatus, QuerySpec, ResultRow

_log = logging.getLogger(__name__)


class DataAccessLayer:
    def __init__(self, adapter: DatabaseAdapter) -> None:
        self.__adapter = adapter

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.__adapter}>"

    def execute_query(
        self,
        query: QuerySpec | str,
        params: Sequence[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> list[ResultRow]:
        """
        Run a statement and return all rows (``[]`` for statements without a result set).

        ``query`` is a QuerySpec or SQL text with ``$1 .. $n`` placeholders
        bound from ``params``.
        """
        spec = QuerySpec.of(query, params)
        try:
            return self.__adapter.execute_query(spec, timeout=timeout)
        except DataAccessError:
            raise
        except Exception as e:
            raise QueryError(str(e) or type(e).__name__) from e

    def execute_query_single(
        self,
        query: QuerySpec | str,
        params: Sequence[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> ResultRow | None:
        """First row of the result or None; extra rows are discarded."""
        spec = QuerySpec.of(query, params)
        try:
            return self.__adapter.execute_query_single(spec, timeout=timeout)
        except DataAccessError:
            raise
        except Exception as e:
            raise QueryError(str(e) or type(e).__name__) from e

    def health_check(self) -> HealthStatus:
        try:
            return self.__adapter.health_check()
        except Exception as e:
            _log.warning("Health check raised instead of reporting: %s", e)
            return HealthStatus(status=HealthState.UNHEALTHY, error=str(e) or type(e).__name__)

    def get_adapter_type(self) -> AdapterType:
        return self.__adapter.get_adapter_type()

    def connection_info(self) -> dict[str, Any]:
        """Redacted ``{type, host, database}`` of the backing connection."""
        return self.__adapter.descriptor.redacted_info()

    def stats(self) -> dict[str, int]:
        return self.__adapter.stats()

    def _release(self) -> None:
        self.__adapter.close()


class DisposableDataAccessLayer(DataAccessLayer):
    """
    A facade with its own pool, for one-off validation flows.

    The creating call site must close it; use it as a context manager so every
    exit path releases the connection.
    """

    def __init__(self, adapter: DatabaseAdapter) -> None:
        super().__init__(adapter)
        # a handle dropped without close() still releases its pool when collected
        self._finalizer = weakref.finalize(self, adapter.close)

    def close(self) -> None:
        self._finalizer()

    def __enter__(self) -> "DisposableDataAccessLayer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
