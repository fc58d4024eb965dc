"""Health endpoint router reporting app liveness and job state store readiness."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from rollout_manager.db import DatabaseHealthPort
from rollout_manager.domain import HealthStatus


def api_create_health_router(db_health_service: DatabaseHealthPort) -> APIRouter:
    """Create the `/health` router.

    Args:
        db_health_service: DB-layer readiness check.

    Returns:
        APIRouter: Router exposing `/health`.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            db_health = HealthStatus(status="down", detail=str(error))

        healthy = db_health.status == "ok"
        payload = {
            "status": "ok" if healthy else "degraded",
            "app": "up",
            "database": db_health.status,
            "detail": db_health.detail,
            "target": db_health_service.db_connection_label(),
        }
        return JSONResponse(
            content=payload,
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return router
