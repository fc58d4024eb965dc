"""FastAPI application factory for the rollout service."""

from fastapi import FastAPI

from rollout_manager.config import AppSettings
from rollout_manager.db import DatabaseHealthPort, JobStateRepositoryPort
from rollout_manager.jobs import JobFactoryPort

from .routers import api_create_health_router, api_create_jobs_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    job_repository: JobStateRepositoryPort,
    job_factory: JobFactoryPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        job_repository: Job state repository for job APIs.
        job_factory: Factory building and resuming deploy jobs.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        RuntimeError: Raised if application initialization fails.
    """
    application = FastAPI(title="ECS Rollout Manager")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identity and environment."""

        return {
            "service": "rollout-manager",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(
        api_create_jobs_router(
            settings=settings,
            job_repository=job_repository,
            job_factory=job_factory,
        )
    )

    return application
