"""
Health-check helpers for liveness and readiness probes.

Liveness: is the process alive and not deadlocked? (cheap, no I/O)
Readiness: can it serve traffic? (one probe through the shared data access layer)
"""

import logging
from collections.abc import Callable
from typing import Any

from conventory.core.dal import DataAccessLayer, get_data_access, report_health
from conventory.core.dal.health import utc_timestamp
from conventory.core.dal.models import HealthState

logger = logging.getLogger(__name__)


def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe; just confirms the Python process is responsive.
    No I/O, no DB calls.  Return format matches readiness_check for consistency.
    """
    return (True, [])


def database_health(
    get_dal: Callable[[], DataAccessLayer] | None = None,
) -> tuple[bool, dict[str, Any]]:
    """
    Probe the database and build the health envelope.

    Returns (ok, body) where body is ``{status, timestamp, services, latency?, error?}``.
    Failing to obtain the handle (bad config, unreachable at first use) is
    reported the same way as a failed probe.
    """
    try:
        report = report_health((get_dal or get_data_access)())
    except Exception as e:
        logger.warning("Database unavailable for health check: %s", e)
        report = {
            "status": HealthState.UNHEALTHY.value,
            "timestamp": utc_timestamp(),
            "latency": None,
            "error": str(e) or type(e).__name__,
        }
    ok = report["status"] == HealthState.HEALTHY.value
    body: dict[str, Any] = {
        "status": report["status"],
        "timestamp": report["timestamp"],
        "services": {
            "database": "connected" if ok else "disconnected",
            "application": "running",
        },
    }
    if report.get("latency") is not None:
        body["latency"] = report["latency"]
    if not ok:
        body["error"] = report.get("error") or "Unknown error"
    return ok, body


def readiness_check(
    get_dal: Callable[[], DataAccessLayer] | None = None,
) -> tuple[bool, list[str]]:
    """
    Returns (ok, list of failure messages). ok is False if the database probe fails.
    """
    ok, _ = database_health(get_dal)
    return (ok, [] if ok else ["database"])
