"""
Setup-time database diagnostics.

check_database() probes the configured (shared) database. validate_candidate_database()
validates a candidate connection string on a disposable, single-connection
handle before the application commits to it. Both return structured results
and never raise for database failures.
"""

import logging
from collections.abc import Callable
from typing import Any

from conventory.core.dal import (
    ConfigurationError,
    DataAccessError,
    DataAccessLayer,
    DatabaseConnectionError,
    PoolExhaustedError,
    QueryTimeoutError,
    disposable_data_access,
    get_data_access,
)
from conventory.core.dal.resolver import from_url, redacted_info

logger = logging.getLogger(__name__)

PROBE_TABLE = "conventory_setup_probe"

MSG_CONNECTED = "Database connection successful"
MSG_CANNOT_CONNECT = "Failed to connect to database. Please check your connection string."
MSG_NO_PERMISSION = (
    "Database connection successful but insufficient permissions to create tables"
)
MSG_INVALID = "Invalid connection string"


def _result(
    *,
    success: bool,
    info: dict[str, Any],
    message: str,
    latency: float | None = None,
    connected: bool,
    error: str | None = None,
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "success": success,
        "connection": {
            "type": info.get("type"),
            "info": info,
            "latency": f"{latency:.0f}ms" if latency is not None else None,
            "status": "connected" if connected else "disconnected",
        },
        "message": message,
    }
    if error is not None:
        result["error"] = error
    return result


def check_database(
    get_dal: Callable[[], DataAccessLayer] | None = None,
) -> dict[str, Any]:
    """Probe the configured database and report type, redacted info and latency."""
    try:
        dal = (get_dal or get_data_access)()
    except DataAccessError as e:
        logger.info("Database check failed before probing: %s", e)
        return _result(
            success=False,
            info=redacted_info(),
            message="Failed to connect to database",
            connected=False,
            error=str(e),
        )
    info = {**redacted_info(), **dal.connection_info()}
    status = dal.health_check()
    if not status.healthy:
        return _result(
            success=False,
            info=info,
            message="Failed to connect to database",
            latency=status.latency,
            connected=False,
            error=status.error or "Unknown error",
        )
    adapter_type = dal.get_adapter_type().value
    return _result(
        success=True,
        info=info,
        message=f"Database connected successfully via {adapter_type}",
        latency=status.latency,
        connected=True,
    )


def validate_candidate_database(connection_string: str) -> dict[str, Any]:
    """
    Validate a candidate connection string.

    Steps: parse, connect and ``SELECT 1 as test``, then create and drop a
    temporary probe table. The message tells "cannot connect" apart from
    "connected but insufficient permissions".
    """
    try:
        descriptor = from_url(connection_string)
    except ConfigurationError as e:
        return _result(
            success=False, info={}, message=MSG_INVALID, connected=False, error=str(e)
        )
    info = descriptor.redacted_info()

    # one connection so the probe table lives on the session that created it
    with disposable_data_access(descriptor, min_size=0, max_size=1) as dal:
        status = dal.health_check()
        if not status.healthy:
            logger.info("Candidate database %s unreachable: %s", descriptor, status.error)
            return _result(
                success=False,
                info=info,
                message=MSG_CANNOT_CONNECT,
                latency=status.latency,
                connected=False,
                error=status.error,
            )
        try:
            dal.execute_query(
                f"CREATE TEMPORARY TABLE {PROBE_TABLE} (id integer PRIMARY KEY, test_value text)"
            )
            dal.execute_query(f"DROP TABLE IF EXISTS {PROBE_TABLE}")
        except (DatabaseConnectionError, QueryTimeoutError, PoolExhaustedError) as e:
            logger.info("Candidate database %s dropped during probe: %s", descriptor, e)
            return _result(
                success=False,
                info=info,
                message=MSG_CANNOT_CONNECT,
                latency=status.latency,
                connected=False,
                error=str(e),
            )
        except DataAccessError as e:
            logger.info("Candidate database %s lacks privileges: %s", descriptor, e)
            return _result(
                success=False,
                info=info,
                message=MSG_NO_PERMISSION,
                latency=status.latency,
                connected=True,
                error=str(e),
            )
    return _result(
        success=True,
        info=info,
        message=MSG_CONNECTED,
        latency=status.latency,
        connected=True,
    )
