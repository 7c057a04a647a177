"""
Value types shared by the resolver, the adapters and the facade.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .errors import QueryParameterError
from .placeholders import scan_placeholders

ResultRow = dict[str, Any]


class AdapterType(str, Enum):
    """Engine identifiers exposed to observability endpoints."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class HealthState(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ConnectionDescriptor(BaseModel):
    """Normalized, immutable connection parameters for one adapter."""

    model_config = ConfigDict(frozen=True)

    engine: AdapterType = AdapterType.POSTGRESQL
    host: str
    port: int = Field(ge=1, le=65535)
    database: str
    user: str
    password: SecretStr = SecretStr("")
    sslmode: str = "prefer"
    min_size: int = Field(default=1, ge=0)
    max_size: int = Field(default=20, ge=1)
    pool_timeout: float = Field(default=2.0, gt=0)
    idle_timeout: float = Field(default=30.0, gt=0)
    max_age: float = Field(default=600.0, gt=0)
    connect_timeout: int = Field(default=5, ge=1)
    statement_timeout: float = Field(default=30.0, gt=0)
    health_check_timeout: float = Field(default=5.0, gt=0)

    def redacted_info(self) -> dict[str, Any]:
        """Diagnostic view; never carries credentials."""
        return {
            "type": self.engine.value,
            "host": self.host,
            "database": self.database,
        }

    def __repr__(self) -> str:
        return (
            f"ConnectionDescriptor(engine={self.engine.value!r}, host={self.host!r}, "
            f"port={self.port}, database={self.database!r})"
        )

    __str__ = __repr__


@dataclass(frozen=True)
class QuerySpec:
    """
    A statement with ``$1 .. $n`` placeholders and its ordered bind values.

    Construction fails with QueryParameterError when the placeholders do not
    reference exactly positions ``1 .. len(params)``.
    """

    sql: str
    params: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.params, tuple):
            object.__setattr__(self, "params", tuple(self.params))
        indexes = {p.index for p in scan_placeholders(self.sql)}
        expected = set(range(1, len(self.params) + 1))
        if indexes != expected:
            raise QueryParameterError(
                f"Statement references {len(indexes)} placeholder(s) "
                f"{sorted(indexes)} but {len(self.params)} bind value(s) were supplied"
            )

    @classmethod
    def of(cls, query: "QuerySpec | str", params: Sequence[Any] | None = None) -> "QuerySpec":
        if isinstance(query, QuerySpec):
            if params is not None:
                raise QueryParameterError("Pass bind values inside the QuerySpec, not both")
            return query
        return cls(query, tuple(params or ()))


class HealthStatus(BaseModel):
    """Result of one probe round trip; built fresh on every check."""

    status: HealthState
    latency: float | None = None  # milliseconds
    error: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == HealthState.HEALTHY
