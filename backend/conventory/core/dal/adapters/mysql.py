"""
MySQL adapter (PyMySQL).

Deadlines come from three places. ``max_execution_time`` bounds read-only
SELECTs, ``innodb_lock_wait_timeout`` bounds writes waiting on row locks,
and the socket ``read_timeout``/``write_timeout`` bound everything else,
including a stalled server.
"""

import math
from typing import Any

import pymysql
import pymysql.cursors

from ..errors import (
    DataAccessError,
    DatabaseConnectionError,
    QueryError,
    QueryTimeoutError,
)
from ..models import AdapterType, QuerySpec, ResultRow
from ..placeholders import to_format_paramstyle
from .base import DatabaseAdapter, fallback_error

# ER_QUERY_TIMEOUT, ER_QUERY_INTERRUPTED, ER_LOCK_WAIT_TIMEOUT
_TIMEOUT_CODES = {3024, 1317, 1205}
# ER_ACCESS_DENIED_ERROR, ER_BAD_DB_ERROR, CR_CONNECTION_ERROR, CR_CONN_HOST_ERROR,
# CR_UNKNOWN_HOST, CR_SERVER_GONE_ERROR, CR_SERVER_LOST
_CONNECTION_CODES = {1045, 1049, 2002, 2003, 2005, 2006, 2013}
# CR_SERVER_LOST raised by a socket read/write timeout
_CR_SERVER_LOST = 2013

# server-side limits fire before the socket bound
_SOCKET_GRACE = 1.0


class MySQLAdapter(DatabaseAdapter):
    adapter_type = AdapterType.MYSQL

    def connect(self) -> Any:
        d = self.descriptor
        kwargs: dict[str, Any] = {}
        if d.sslmode in ("require", "verify-ca", "verify-full"):
            kwargs["ssl"] = {"check_hostname": d.sslmode == "verify-full"}
        # the socket bound is fixed per connection, so caller deadlines can
        # shorten but not extend DB_STATEMENT_TIMEOUT on this engine
        io_timeout = d.statement_timeout + _SOCKET_GRACE
        return pymysql.connect(
            host=d.host,
            port=d.port,
            database=d.database,
            user=d.user,
            password=d.password.get_secret_value(),
            connect_timeout=d.connect_timeout,
            read_timeout=io_timeout,
            write_timeout=io_timeout,
            cursorclass=pymysql.cursors.DictCursor,
            autocommit=False,
            **kwargs,
        )

    def run_statement(
        self, conn: Any, spec: QuerySpec, timeout: float, *, single: bool
    ) -> list[ResultRow]:
        sql, params = to_format_paramstyle(spec.sql, spec.params, backslash_escapes=True)
        with conn.cursor() as cur:
            cur.execute(
                "SET SESSION max_execution_time = %s, innodb_lock_wait_timeout = %s",
                (max(1, int(timeout * 1000)), max(1, math.ceil(timeout))),
            )
            cur.execute(sql, params or None)
            if cur.description is None:
                return []
            if single:
                row = cur.fetchone()
                return [dict(row)] if row is not None else []
            return [dict(row) for row in cur.fetchall()]

    def translate_error(self, exc: Exception) -> DataAccessError:
        if isinstance(exc, DataAccessError):
            return exc
        if not isinstance(exc, pymysql.MySQLError):
            return fallback_error(exc)
        code = exc.args[0] if exc.args and isinstance(exc.args[0], int) else None
        message = str(exc.args[1]) if len(exc.args) > 1 else str(exc)
        if code in _TIMEOUT_CODES:
            return QueryTimeoutError(f"Statement exceeded its deadline: {message}")
        if code == _CR_SERVER_LOST and "timed out" in message:
            return QueryTimeoutError(f"Statement exceeded its deadline: {message}")
        if code in _CONNECTION_CODES or isinstance(exc, pymysql.err.InterfaceError):
            return DatabaseConnectionError(message, str(code) if code else None)
        return QueryError(message, str(code) if code else None)
