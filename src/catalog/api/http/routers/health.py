"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.core.storage.session_storage import RedisSessionStorage

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 OK as long as the process is running."""
    return {"status": "healthy", "service": "catalog"}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise.

    Session storage is reported but never fails the check; an unavailable
    Redis only degrades flash delivery.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    checks: dict[str, Any] = {}

    db_healthy = app_deps.database_service.health_check()
    checks["database"] = {"status": "healthy" if db_healthy else "unhealthy"}

    storage = app_deps.session_storage
    checks["session_storage"] = {
        "status": "healthy" if storage.is_available() else "degraded",
        "type": "redis" if isinstance(storage, RedisSessionStorage) else "in-memory",
    }

    body = {"status": "ready" if db_healthy else "not_ready", "checks": checks}
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
