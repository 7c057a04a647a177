"""Singleton and disposable lifecycle of data access handles."""

import threading
from unittest.mock import patch

import psycopg
import pytest

from conventory.core.dal import (
    AdapterType,
    ConfigurationError,
    DatabaseConnectionError,
    DisposableDataAccessLayer,
    create_data_access_layer,
    disposable_data_access,
    get_data_access,
    shutdown_data_access,
)
from tests.utils.dal import FakeAdapter, make_descriptor

pytestmark = pytest.mark.usefixtures("reset_data_access")


def _patch_build(adapters: list[FakeAdapter], **adapter_kwargs):
    def build(descriptor):
        adapter = FakeAdapter(descriptor, **adapter_kwargs)
        adapters.append(adapter)
        return adapter

    return (
        patch("conventory.core.dal.lifecycle.resolve", return_value=make_descriptor()),
        patch("conventory.core.dal.lifecycle.get_adapter", side_effect=build),
    )


def test_singleton_identity() -> None:
    adapters: list[FakeAdapter] = []
    resolve_patch, adapter_patch = _patch_build(adapters)
    with resolve_patch, adapter_patch:
        assert get_data_access() is get_data_access()
    assert len(adapters) == 1


def test_singleton_built_once_across_threads() -> None:
    adapters: list[FakeAdapter] = []
    resolve_patch, adapter_patch = _patch_build(adapters)
    seen = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        seen.append(get_data_access())

    with resolve_patch, adapter_patch:
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert len(adapters) == 1
    assert len(seen) == 8
    assert all(dal is seen[0] for dal in seen)


def test_singleton_failure_is_not_cached() -> None:
    adapters: list[FakeAdapter] = []
    resolve_patch, adapter_patch = _patch_build(
        adapters, connect_error=ConnectionRefusedError("refused")
    )
    with patch("conventory.core.dal.lifecycle.resolve", return_value=make_descriptor(min_size=1)):
        with adapter_patch:
            with pytest.raises(DatabaseConnectionError):
                get_data_access()
    assert adapters[0]._pool.closed

    adapters.clear()
    resolve_patch, adapter_patch = _patch_build(adapters)
    with resolve_patch, adapter_patch:
        assert get_data_access().health_check().healthy


def test_missing_configuration_raises() -> None:
    with patch(
        "conventory.core.dal.lifecycle.resolve",
        side_effect=ConfigurationError("DATABASE_URL or POSTGRES_SERVER must be set"),
    ):
        with pytest.raises(ConfigurationError):
            get_data_access()


def test_shutdown_then_rebuild() -> None:
    adapters: list[FakeAdapter] = []
    resolve_patch, adapter_patch = _patch_build(adapters)
    with resolve_patch, adapter_patch:
        first = get_data_access()
        first.execute_query("SELECT 1")
        shutdown_data_access()
        shutdown_data_access()
        assert adapters[0]._pool.closed
        second = get_data_access()
    assert second is not first
    assert len(adapters) == 2


def test_disposable_instances_are_distinct() -> None:
    a = create_data_access_layer(make_descriptor())
    b = create_data_access_layer(make_descriptor())
    assert isinstance(a, DisposableDataAccessLayer)
    assert a is not b
    a.close()
    b.close()


def test_create_does_not_connect() -> None:
    with patch("conventory.core.dal.adapters.postgres.psycopg.connect") as connect:
        dal = create_data_access_layer(make_descriptor(min_size=1))
        dal.close()
    connect.assert_not_called()


def test_create_from_url_picks_adapter() -> None:
    dal = create_data_access_layer("mysql://app:pw@db.example.com/conv")
    try:
        assert dal.get_adapter_type() == AdapterType.MYSQL
        assert dal.connection_info()["host"] == "db.example.com"
    finally:
        dal.close()


def test_overrides_apply_to_descriptor() -> None:
    dal = create_data_access_layer(make_descriptor(), max_size=1)
    try:
        assert dal.stats()["max_size"] == 1
    finally:
        dal.close()


def test_invalid_url_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        create_data_access_layer("not a url")


def test_context_manager_closes_on_exception() -> None:
    adapters: list[FakeAdapter] = []
    with patch(
        "conventory.core.dal.lifecycle.get_adapter",
        side_effect=lambda d: adapters.append(FakeAdapter(d)) or adapters[-1],
    ):
        with pytest.raises(RuntimeError):
            with disposable_data_access(make_descriptor()) as dal:
                dal.execute_query("SELECT 1")
                raise RuntimeError("abort")
    assert adapters[0]._pool.closed


def test_unreachable_host_fails_within_bounds() -> None:
    with patch(
        "conventory.core.dal.adapters.postgres.psycopg.connect",
        side_effect=psycopg.OperationalError("could not translate host name"),
    ):
        with disposable_data_access(make_descriptor(host="nowhere.invalid")) as dal:
            with pytest.raises(DatabaseConnectionError):
                dal.execute_query("SELECT 1")
            assert not dal.health_check().healthy
