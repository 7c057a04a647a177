from fastapi import APIRouter
from fastapi.responses import JSONResponse

from conventory.core.health import database_health, liveness_check
from conventory.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/liveness/", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness probe: is the process alive and responsive?

    Lightweight: no DB I/O.  If this fails the container should be
    restarted by the orchestrator.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Process unhealthy", "data": failures},
        )
    return True


@router.get("/health", response_model=HealthResponse)
def health() -> JSONResponse:
    """
    Database-backed health probe.

    200 with ``status: healthy`` when the probe round trip succeeds; 503 with
    the same envelope (``services.database: disconnected`` and ``error``) otherwise.
    """
    ok, body = database_health()
    return JSONResponse(status_code=200 if ok else 503, content=body)
