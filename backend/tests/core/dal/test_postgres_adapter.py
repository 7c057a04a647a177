"""PostgresAdapter against a mocked psycopg connection."""

from unittest.mock import MagicMock, patch

import psycopg
import pytest
from psycopg import errors as pg_errors

from conventory.core.dal.adapters import PostgresAdapter, get_adapter
from conventory.core.dal.errors import (
    DatabaseConnectionError,
    QueryError,
    QueryTimeoutError,
)
from conventory.core.dal.models import AdapterType, QuerySpec
from tests.utils.dal import TEST_PASSWORD, make_descriptor


def _mock_conn(rows=None, description=(("test",),)) -> tuple[MagicMock, MagicMock]:
    conn = MagicMock()
    cur = conn.cursor.return_value.__enter__.return_value
    cur.description = description
    cur.fetchall.return_value = rows if rows is not None else [{"test": 1}]
    cur.fetchone.return_value = (rows or [{"test": 1}])[0] if rows != [] else None
    return conn, cur


def test_get_adapter_picks_postgres() -> None:
    adapter = get_adapter(make_descriptor())
    assert isinstance(adapter, PostgresAdapter)
    assert adapter.get_adapter_type() == AdapterType.POSTGRESQL


def test_connect_passes_descriptor() -> None:
    adapter = PostgresAdapter(make_descriptor(sslmode="require", connect_timeout=3))
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect") as connect:
        adapter.connect()
    kwargs = connect.call_args.kwargs
    assert kwargs["host"] == "db.internal"
    assert kwargs["dbname"] == "conventory"
    assert kwargs["user"] == "app"
    assert kwargs["password"] == TEST_PASSWORD
    assert kwargs["sslmode"] == "require"
    assert kwargs["connect_timeout"] == 3


def test_execute_rewrites_placeholders_and_sets_deadline() -> None:
    conn, cur = _mock_conn(rows=[{"id": 1, "name": "Badge"}])
    adapter = PostgresAdapter(make_descriptor(statement_timeout=2.5))
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect", return_value=conn):
        rows = adapter.execute_query(
            QuerySpec("SELECT id, name FROM items WHERE id = $2 AND kind = $1", ("merch", 1))
        )
    assert rows == [{"id": 1, "name": "Badge"}]
    first, second = cur.execute.call_args_list
    assert first.args == ("SELECT set_config('statement_timeout', %s, true)", ("2500",))
    assert second.args == (
        "SELECT id, name FROM items WHERE id = %s AND kind = %s",
        (1, "merch"),
    )
    conn.commit.assert_called_once()


def test_statement_without_result_set_returns_empty_list() -> None:
    conn, cur = _mock_conn(description=None)
    adapter = PostgresAdapter(make_descriptor())
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect", return_value=conn):
        assert adapter.execute_query(QuerySpec("CREATE TEMPORARY TABLE t (id int)")) == []
    cur.fetchall.assert_not_called()


def test_execute_single_uses_fetchone() -> None:
    conn, cur = _mock_conn(rows=[{"test": 1}])
    adapter = PostgresAdapter(make_descriptor())
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect", return_value=conn):
        assert adapter.execute_query_single(QuerySpec("SELECT 1 as test")) == {"test": 1}
    cur.fetchone.assert_called_once()
    cur.fetchall.assert_not_called()


def test_caller_timeout_overrides_default() -> None:
    conn, cur = _mock_conn()
    adapter = PostgresAdapter(make_descriptor())
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect", return_value=conn):
        adapter.execute_query(QuerySpec("SELECT 1"), timeout=0.25)
    assert cur.execute.call_args_list[0].args[1] == ("250",)


def test_unreachable_host_is_connection_error() -> None:
    adapter = PostgresAdapter(make_descriptor())
    with patch(
        "conventory.core.dal.adapters.postgres.psycopg.connect",
        side_effect=psycopg.OperationalError("connection to server failed: Connection refused"),
    ):
        with pytest.raises(DatabaseConnectionError) as exc_info:
            adapter.execute_query(QuerySpec("SELECT 1"))
    assert "Connection refused" in str(exc_info.value)
    assert TEST_PASSWORD not in str(exc_info.value)


def test_translate_query_canceled_is_timeout() -> None:
    adapter = PostgresAdapter(make_descriptor())
    err = adapter.translate_error(
        pg_errors.QueryCanceled("canceling statement due to statement timeout")
    )
    assert isinstance(err, QueryTimeoutError)
    assert isinstance(err, TimeoutError)


def test_translate_engine_error_keeps_sqlstate() -> None:
    adapter = PostgresAdapter(make_descriptor())
    err = adapter.translate_error(pg_errors.UndefinedTable('relation "nope" does not exist'))
    assert type(err) is QueryError
    assert err.code == "42P01"
    assert 'relation "nope" does not exist' in str(err)


def test_translate_permission_error() -> None:
    adapter = PostgresAdapter(make_descriptor())
    err = adapter.translate_error(pg_errors.InsufficientPrivilege("permission denied for schema public"))
    assert type(err) is QueryError
    assert err.code == "42501"


def test_translate_foreign_exception() -> None:
    adapter = PostgresAdapter(make_descriptor())
    err = adapter.translate_error(ValueError("bad value"))
    assert type(err) is QueryError
    assert str(err) == "bad value"


def test_driver_error_during_execute_rolls_back() -> None:
    conn, cur = _mock_conn()
    cur.execute.side_effect = [None, pg_errors.UndefinedTable('relation "nope" does not exist')]
    adapter = PostgresAdapter(make_descriptor())
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect", return_value=conn):
        with pytest.raises(QueryError):
            adapter.execute_query(QuerySpec("SELECT * FROM nope"))
    conn.commit.assert_not_called()
    assert conn.rollback.call_count >= 1
