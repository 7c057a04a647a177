"""
Application settings, read from the environment and an optional .env file.

Database connection parameters live here but are only turned into a
ConnectionDescriptor by ``conventory.core.dal.resolver``.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Conventory"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SENTRY_DSN: str | None = None

    # postgresql (default) or mysql
    DB_ENGINE: str = "postgresql"

    # Full connection URL; wins over the discrete POSTGRES_* values.
    DATABASE_URL: str | None = None
    POSTGRES_URL: str | None = None

    POSTGRES_SERVER: str | None = None
    POSTGRES_PORT: int | None = None
    POSTGRES_DB: str | None = None
    POSTGRES_USER: str | None = None
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SSLMODE: str | None = None

    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 20
    DB_POOL_TIMEOUT: float = 2.0  # seconds to wait for a free pooled connection
    DB_POOL_IDLE_TIMEOUT: float = 30.0
    DB_POOL_MAX_AGE: float = 600.0
    DB_CONNECT_TIMEOUT: int = 5
    DB_STATEMENT_TIMEOUT: float = 30.0
    DB_HEALTH_CHECK_TIMEOUT: float = 5.0

    @property
    def database_url(self) -> str | None:
        return self.DATABASE_URL or self.POSTGRES_URL

    @property
    def default_sslmode(self) -> str:
        if self.POSTGRES_SSLMODE:
            return self.POSTGRES_SSLMODE
        return "require" if self.ENVIRONMENT == "production" else "prefer"


settings = Settings()  # type: ignore
