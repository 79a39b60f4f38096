"""
Health Check Endpoints.

- GET /healthz: Liveness probe (API running)
- GET /readyz: Readiness probe (database reachable)
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from slate_memory.database import check_db_connection
from slate_obs.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/healthz")
async def healthz():
    """
    Liveness probe - is the API process running?

    Returns 200 OK if server is alive.
    """
    return {"status": "healthy", "service": "slate-agent-api"}


@router.get("/readyz")
async def readyz():
    """
    Readiness probe - is the API ready to serve traffic?

    Returns:
        200 OK if the database answers
        503 Service Unavailable otherwise
    """
    try:
        ok = await check_db_connection()
    except Exception as e:
        logger.warning("readiness_check_failed", dependency="database", error=str(e))
        ok = False

    if not ok:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "checks": {"database": "failed"}},
        )
    return {"status": "ready", "checks": {"database": "ok"}}
