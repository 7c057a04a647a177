"""
PostgreSQL adapter (psycopg 3).

Statements are rewritten from ``$n`` to psycopg's ``%s`` style; the
statement deadline is applied per transaction with
``set_config('statement_timeout', ..., true)`` so it never leaks into the
next use of a pooled connection.
"""

from typing import Any

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row

from ..errors import (
    DataAccessError,
    DatabaseConnectionError,
    QueryError,
    QueryTimeoutError,
)
from ..models import AdapterType, QuerySpec, ResultRow
from ..placeholders import to_format_paramstyle
from .base import DatabaseAdapter, fallback_error


class PostgresAdapter(DatabaseAdapter):
    adapter_type = AdapterType.POSTGRESQL

    def connect(self) -> Any:
        d = self.descriptor
        return psycopg.connect(
            host=d.host,
            port=d.port,
            dbname=d.database,
            user=d.user,
            password=d.password.get_secret_value(),
            sslmode=d.sslmode,
            connect_timeout=d.connect_timeout,
            application_name="conventory",
            row_factory=dict_row,
        )

    def run_statement(
        self, conn: Any, spec: QuerySpec, timeout: float, *, single: bool
    ) -> list[ResultRow]:
        sql, params = to_format_paramstyle(spec.sql, spec.params)
        with conn.cursor() as cur:
            cur.execute(
                "SELECT set_config('statement_timeout', %s, true)",
                (str(max(1, int(timeout * 1000))),),
            )
            cur.execute(sql, params or None)
            if cur.description is None:
                return []
            if single:
                row = cur.fetchone()
                return [row] if row is not None else []
            return cur.fetchall()

    def translate_error(self, exc: Exception) -> DataAccessError:
        if isinstance(exc, DataAccessError):
            return exc
        if isinstance(exc, pg_errors.QueryCanceled):
            return QueryTimeoutError(
                f"Statement exceeded its deadline: {_message(exc)}"
            )
        if isinstance(exc, (psycopg.OperationalError, psycopg.InterfaceError)):
            return DatabaseConnectionError(_message(exc), getattr(exc, "sqlstate", None))
        if isinstance(exc, psycopg.Error):
            return QueryError(_message(exc), exc.sqlstate)
        return fallback_error(exc)


def _message(exc: Exception) -> str:
    diag = getattr(exc, "diag", None)
    primary = getattr(diag, "message_primary", None) if diag is not None else None
    return primary or str(exc).strip() or type(exc).__name__
