"""Unit tests for QuerySpec validation and ConnectionDescriptor redaction."""

import pytest
from pydantic import ValidationError

from conventory.core.dal.errors import QueryParameterError
from conventory.core.dal.models import HealthState, HealthStatus, QuerySpec
from tests.utils.dal import TEST_PASSWORD, make_descriptor


def test_query_spec_accepts_matching_params() -> None:
    spec = QuerySpec("SELECT * FROM users WHERE id = $1", ["u1"])
    assert spec.params == ("u1",)


def test_query_spec_without_placeholders_or_params() -> None:
    spec = QuerySpec("SELECT 1 as test")
    assert spec.params == ()


@pytest.mark.parametrize(
    "sql,params",
    [
        ("SELECT * FROM users WHERE id = $1", ()),
        ("SELECT 1", ("extra",)),
        ("SELECT $1, $3", ("a", "b")),
        ("SELECT $1", ("a", "b")),
    ],
)
def test_query_spec_rejects_mismatched_params(sql: str, params: tuple) -> None:
    with pytest.raises(QueryParameterError):
        QuerySpec(sql, params)


def test_parameter_error_is_a_caller_error() -> None:
    with pytest.raises(ValueError):
        QuerySpec("SELECT $1")


def test_query_spec_of_builds_from_text_and_passes_specs_through() -> None:
    spec = QuerySpec.of("SELECT $1", [1])
    assert spec == QuerySpec("SELECT $1", (1,))
    assert QuerySpec.of(spec) is spec
    with pytest.raises(QueryParameterError):
        QuerySpec.of(spec, [1])


def test_descriptor_is_immutable() -> None:
    d = make_descriptor()
    with pytest.raises(ValidationError):
        d.host = "elsewhere"  # type: ignore[misc]


def test_descriptor_never_shows_credentials() -> None:
    d = make_descriptor()
    assert d.redacted_info() == {
        "type": "postgresql",
        "host": "db.internal",
        "database": "conventory",
    }
    assert TEST_PASSWORD not in repr(d)
    assert TEST_PASSWORD not in str(d)
    assert TEST_PASSWORD not in d.model_dump_json()
    assert d.password.get_secret_value() == TEST_PASSWORD


def test_health_status_healthy_flag() -> None:
    assert HealthStatus(status=HealthState.HEALTHY, latency=1.5).healthy is True
    assert HealthStatus(status=HealthState.UNHEALTHY, error="x").healthy is False
