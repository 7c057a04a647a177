"""
Engine-agnostic adapter core.

Subclasses supply the driver connection, the per-statement execution and
the translation of driver exceptions; pooling, timing, transactions and
health probing are shared here.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from ..errors import DataAccessError, QueryError
from ..models import (
    AdapterType,
    ConnectionDescriptor,
    HealthState,
    HealthStatus,
    QuerySpec,
    ResultRow,
)
from ..pool import ConnectionPool

_log = logging.getLogger(__name__)


class DatabaseAdapter(ABC):
    adapter_type: AdapterType
    probe_sql = "SELECT 1 AS test"

    def __init__(self, descriptor: ConnectionDescriptor) -> None:
        self.descriptor = descriptor
        self._pool = ConnectionPool(
            self._connect_translated,
            ping=self._is_alive,
            min_size=descriptor.min_size,
            max_size=descriptor.max_size,
            timeout=descriptor.pool_timeout,
            idle_timeout=descriptor.idle_timeout,
            max_age=descriptor.max_age,
        )

    def __str__(self) -> str:
        return f"{self.adapter_type.value} adapter for {self.descriptor}"

    # ------------------------------------------------------------------
    # Engine hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def connect(self) -> Any:
        """Open one driver connection from the descriptor."""

    @abstractmethod
    def run_statement(
        self, conn: Any, spec: QuerySpec, timeout: float, *, single: bool
    ) -> list[ResultRow]:
        """Execute ``spec`` on ``conn`` within ``timeout`` seconds and return its rows."""

    @abstractmethod
    def translate_error(self, exc: Exception) -> DataAccessError:
        """Map a driver exception onto the data access taxonomy."""

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Connect eagerly (pre-fills the pool up to ``min_size``)."""
        self._pool.open()
        _log.info("Connected %s", self)

    def execute_query(
        self, spec: QuerySpec, *, timeout: float | None = None
    ) -> list[ResultRow]:
        return self._run(spec, timeout, single=False)

    def execute_query_single(
        self, spec: QuerySpec, *, timeout: float | None = None
    ) -> ResultRow | None:
        """
        First row of the result, or None when there are no rows.

        Extra rows are discarded; callers must write statements that are
        single-row by construction.
        """
        rows = self._run(spec, timeout, single=True)
        return rows[0] if rows else None

    def health_check(self) -> HealthStatus:
        """Round-trip ``probe_sql`` and classify the outcome. Never raises."""
        limit = self.descriptor.health_check_timeout
        started = time.perf_counter()
        try:
            self._run(QuerySpec(self.probe_sql), limit, single=True)
        except Exception as e:
            latency = (time.perf_counter() - started) * 1000
            _log.warning("Database health check failed for %s: %s", self, e)
            return HealthStatus(
                status=HealthState.UNHEALTHY,
                latency=latency,
                error=str(e) or type(e).__name__,
            )
        latency = (time.perf_counter() - started) * 1000
        if latency > limit * 1000:
            return HealthStatus(
                status=HealthState.UNHEALTHY,
                latency=latency,
                error=f"Probe took {latency:.0f}ms (limit {limit * 1000:.0f}ms)",
            )
        return HealthStatus(status=HealthState.HEALTHY, latency=latency)

    def get_adapter_type(self) -> AdapterType:
        return self.adapter_type

    def stats(self) -> dict[str, int]:
        return self._pool.stats()

    def close(self) -> None:
        """Release the pool. Idempotent."""
        if not self._pool.closed:
            self._pool.close()
            _log.info("Closed %s", self)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self, spec: QuerySpec, timeout: float | None, *, single: bool
    ) -> list[ResultRow]:
        deadline = timeout if timeout is not None else self.descriptor.statement_timeout
        conn = self._pool.getconn(deadline)
        try:
            rows = self.run_statement(conn, spec, deadline, single=single)
            conn.commit()
            return rows
        except DataAccessError:
            raise
        except Exception as e:
            try:
                conn.rollback()
            except Exception:
                pass
            raise self.translate_error(e) from e
        finally:
            self._pool.putconn(conn)

    def _connect_translated(self) -> Any:
        try:
            return self.connect()
        except DataAccessError:
            raise
        except Exception as e:
            raise self.translate_error(e) from e

    @staticmethod
    def _is_alive(conn: Any) -> bool:
        """Lightweight ping: attempt a no-op query to detect broken connections."""
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.close()
            conn.rollback()
            return True
        except Exception:
            return False


def fallback_error(exc: Exception) -> QueryError:
    return QueryError(str(exc).strip() or type(exc).__name__)
