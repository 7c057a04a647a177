"""
Health reporter: one probe through the facade wrapped in a fixed envelope.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from .facade import DataAccessLayer
from .models import HealthState

_log = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def report_health(dal: DataAccessLayer) -> dict[str, Any]:
    """
    ``{status, timestamp, latency}`` plus ``error`` on failure.

    Never raises; any failure becomes an ``unhealthy`` status.
    """
    timestamp = utc_timestamp()
    try:
        result = dal.health_check()
    except Exception as e:
        _log.warning("Health probe failed: %s", e)
        return {
            "status": HealthState.UNHEALTHY.value,
            "timestamp": timestamp,
            "latency": None,
            "error": str(e) or type(e).__name__,
        }
    report: dict[str, Any] = {
        "status": result.status.value,
        "timestamp": timestamp,
        "latency": result.latency,
    }
    if result.error:
        report["error"] = result.error
    return report
