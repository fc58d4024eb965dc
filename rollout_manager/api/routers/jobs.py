"""Job API router for deploy job creation, inspection and advancement."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rollout_manager.config import AppSettings
from rollout_manager.db import JobStateRepositoryPort
from rollout_manager.domain import JobStage, JobState, domain_job_state_to_payload, job_stage_is_terminal
from rollout_manager.jobs import JobConstructionError, JobFactoryPort, JobStateInvariantError

logger = logging.getLogger(__name__)


class DeployJobRequest(BaseModel):
    """Request body for creating a deploy job."""

    component: str | None = None
    sha: str | None = None


def api_create_jobs_router(
    settings: AppSettings,
    job_repository: JobStateRepositoryPort,
    job_factory: JobFactoryPort,
) -> APIRouter:
    """Create jobs router with create, list, detail and advance endpoints.

    Args:
        settings: Runtime settings used for pagination defaults.
        job_repository: DB-layer job state repository.
        job_factory: Factory building queued deploy states and resuming persisted jobs.

    Returns:
        APIRouter: Router exposing job APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if job_repository is None:
        raise ValueError("job_repository must not be None")
    if job_factory is None:
        raise ValueError("job_factory must not be None")

    router = APIRouter(prefix="/jobs", tags=["jobs"])

    @router.post("/deploy")
    def api_job_deploy_create(request: DeployJobRequest) -> JSONResponse:
        """Create and persist one queued deploy job.

        Args:
            request: Component and commit hash to deploy.

        Returns:
            JSONResponse: Created job payload, or 400 when the request is invalid.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            job_state = job_factory.job_build_deploy_state(component=request.component, sha=request.sha)
        except JobConstructionError as error:
            payload = {
                "status": "error",
                "code": "INVALID_DEPLOY_JOB",
                "message": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        job_repository.db_job_state_save(job_state)
        logger.info("deploy job created: job_id=%s component=%s", job_state.job_id, job_state.params.component.value)
        return JSONResponse(content=api_serialize_job_state(job_state), status_code=status.HTTP_201_CREATED)

    @router.get("")
    def api_job_list(
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
        stage: str | None = Query(default=None),
    ) -> JSONResponse:
        """Return jobs ordered by creation time, latest first.

        Args:
            limit: Max rows to return.
            offset: Rows to skip.
            stage: Optional stage filter.

        Returns:
            JSONResponse: Jobs list payload.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        stage_filter: JobStage | None = None
        if stage is not None:
            normalized_stage = stage.strip().lower()
            try:
                stage_filter = JobStage(normalized_stage)
            except ValueError:
                payload = {
                    "status": "error",
                    "code": "INVALID_STAGE_FILTER",
                    "message": f"unsupported stage={normalized_stage}",
                }
                return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        applied_limit = min(limit, settings.api_max_limit)
        job_states = job_repository.db_job_state_list(limit=applied_limit, offset=offset, stage=stage_filter)
        payload = {
            "items": [api_serialize_job_state(job_state) for job_state in job_states],
            "page": {
                "limit": limit,
                "applied_limit": applied_limit,
                "offset": offset,
                "returned": len(job_states),
            },
            "filters": {"stage": stage_filter.value if stage_filter is not None else None},
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/{job_id}")
    def api_job_detail(job_id: str) -> JSONResponse:
        job_state = job_repository.db_job_state_get_by_id(job_id=job_id)
        if job_state is None:
            return _api_job_not_found()
        return JSONResponse(content=api_serialize_job_state(job_state), status_code=status.HTTP_200_OK)

    @router.post("/{job_id}/advance")
    def api_job_advance(job_id: str) -> JSONResponse:
        """Resume one persisted job and advance it by at most one stage.

        Args:
            job_id: Job identifier.

        Returns:
            JSONResponse: Resulting job payload; 404 when absent, 409 when already terminal,
                500 when the job cannot be resumed from its stage.

        Raises:
            RuntimeError: Raised when persisting the advanced state fails.
        """

        job_state = job_repository.db_job_state_get_by_id(job_id=job_id)
        if job_state is None:
            return _api_job_not_found()
        if job_stage_is_terminal(job_state.stage):
            payload = {
                "status": "error",
                "code": "JOB_ALREADY_TERMINAL",
                "message": f"job is already {job_state.stage.value}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_409_CONFLICT)

        try:
            advanced_state = job_factory.job_resume(job_state).job_advance()
        except (JobConstructionError, JobStateInvariantError) as error:
            logger.error("job advance rejected: job_id=%s error=%s", job_id, error)
            payload = {
                "status": "error",
                "code": "JOB_STATE_INVARIANT",
                "message": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return JSONResponse(content=api_serialize_job_state(advanced_state), status_code=status.HTTP_200_OK)

    return router


def _api_job_not_found() -> JSONResponse:
    payload = {
        "status": "error",
        "message": "job not found",
    }
    return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)


def api_serialize_job_state(job_state: JobState) -> dict[str, object]:
    """Serialize job state to JSON response payload.

    Args:
        job_state: Typed job state.

    Returns:
        dict[str, object]: JSON-serializable job payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payload: dict[str, object] = domain_job_state_to_payload(job_state)
    payload["terminal"] = job_stage_is_terminal(job_state.stage)
    return payload
