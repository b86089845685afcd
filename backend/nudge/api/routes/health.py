"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the agent is not initialized, or the
      audit database is enabled but unreachable
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from nudge.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "nudge",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — agent initialized, audit database reachable."""
    agent = getattr(request.app.state, "agent", None)
    if agent is None or not agent.initialized:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "agent_not_initialized"},
        )
    checks = {"agent": "healthy"}
    if database.db_manager is not None:
        if not await database.db_manager.health_check():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "reason": "database_unavailable"},
            )
        checks["database"] = "healthy"
    return {"status": "ready", "checks": checks}
