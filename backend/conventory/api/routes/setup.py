"""
Setup endpoints: check the configured database, test a candidate connection string.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from conventory.core.provisioning import check_database, validate_candidate_database
from conventory.schemas import DatabaseCheckResult, DatabaseTestIn

router = APIRouter(prefix="/setup", tags=["setup"])


@router.get("/check-database", response_model=DatabaseCheckResult)
def check_database_route() -> JSONResponse:
    """Probe the configured database; 503 when it is unreachable."""
    result = check_database()
    return JSONResponse(status_code=200 if result["success"] else 503, content=result)


@router.post("/test-database", response_model=DatabaseCheckResult)
def test_database_route(body: DatabaseTestIn) -> JSONResponse:
    """Validate a connection string before it is saved; failures are 400 with a diagnostic."""
    result = validate_candidate_database(body.connection_string)
    return JSONResponse(status_code=200 if result["success"] else 400, content=result)
