"""Typed job state contracts for resumable rollout jobs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .topology import Layout, domain_layout_from_payload, domain_layout_to_payload


class JobStage(str, Enum):
    """Lifecycle stage of a rollout job."""

    QUEUED = "queued"
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_JOB_STAGES: frozenset[JobStage] = frozenset({JobStage.COMPLETED, JobStage.FAILED})
NOTIFY_JOB_STAGES: frozenset[JobStage] = frozenset({JobStage.STARTED, JobStage.COMPLETED, JobStage.FAILED})


class JobType(str, Enum):
    """Kind of job; selects the parameter struct carried by the state."""

    DEPLOY = "deploy"


class DeployComponent(str, Enum):
    """Application components that can be rolled out."""

    CERAMIC = "ceramic"
    IPFS = "ipfs"
    CAS = "cas"


@dataclass(frozen=True)
class DeployJobParams:
    """Parameters of one deploy job.

    Attributes:
        component: Component being deployed.
        sha: Target commit hash, used as the image tag.
        layout: Topology being rolled out; task ids are written in place.
        error: Failure message once the job has failed.
    """

    component: DeployComponent
    sha: str
    layout: Layout
    error: str | None = None


@dataclass(frozen=True)
class JobState:
    """Persisted state of one rollout job.

    Attributes:
        job_id: Unique job identifier.
        job_type: Job kind.
        stage: Current lifecycle stage.
        timestamp: Job creation time in UTC; the timeout budget is measured from it.
        params: Typed job parameters.
    """

    job_id: str
    job_type: JobType
    stage: JobStage
    timestamp: datetime
    params: DeployJobParams


def job_stage_is_terminal(stage: JobStage) -> bool:
    """Return whether no further advance is expected for the stage."""

    return stage in TERMINAL_JOB_STAGES


def domain_job_state_describe(state: JobState) -> str:
    """Render a compact one-line job description for logs.

    Args:
        state: Job state to describe.

    Returns:
        str: Description with id, type, stage, component and sha.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    description = (
        f"job_id={state.job_id} type={state.job_type.value} stage={state.stage.value} "
        f"component={state.params.component.value} sha={state.params.sha} ts={state.timestamp.isoformat()}"
    )
    if state.params.error:
        description += f" error={state.params.error}"
    return description


def domain_job_state_to_payload(state: JobState) -> dict[str, Any]:
    """Serialize job state into a JSON-compatible mapping.

    Args:
        state: Job state to serialize.

    Returns:
        dict[str, Any]: JSON-compatible payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "job_id": state.job_id,
        "job_type": state.job_type.value,
        "stage": state.stage.value,
        "timestamp": state.timestamp.isoformat(),
        "params": domain_job_params_to_payload(state.params),
    }


def domain_job_params_to_payload(params: DeployJobParams) -> dict[str, Any]:
    """Serialize deploy job params into a JSON-compatible mapping."""

    return {
        "component": params.component.value,
        "sha": params.sha,
        "layout": domain_layout_to_payload(params.layout),
        "error": params.error,
    }


def domain_job_params_from_payload(payload: dict[str, Any]) -> DeployJobParams:
    """Rebuild deploy job params from a JSON-compatible mapping.

    Args:
        payload: Params payload.

    Returns:
        DeployJobParams: Typed params.

    Raises:
        ValueError: Raised when required params are missing or invalid.
    """

    if not isinstance(payload, dict):
        raise ValueError("job params payload must be a mapping")
    sha = str(payload.get("sha") or "").strip()
    if not sha:
        raise ValueError("job params payload missing sha")
    error_value = payload.get("error")
    return DeployJobParams(
        component=DeployComponent(payload.get("component")),
        sha=sha,
        layout=domain_layout_from_payload(payload.get("layout") or {}),
        error=None if error_value is None else str(error_value),
    )


def domain_job_state_from_payload(payload: dict[str, Any]) -> JobState:
    """Rebuild job state from a JSON-compatible mapping.

    Args:
        payload: Payload produced by `domain_job_state_to_payload`.

    Returns:
        JobState: Typed job state.

    Raises:
        ValueError: Raised when payload values are invalid.
    """

    timestamp_value = payload["timestamp"]
    if not isinstance(timestamp_value, datetime):
        timestamp_value = datetime.fromisoformat(str(timestamp_value))
    return JobState(
        job_id=str(payload["job_id"]),
        job_type=JobType(payload["job_type"]),
        stage=JobStage(payload["stage"]),
        timestamp=timestamp_value,
        params=domain_job_params_from_payload(payload["params"]),
    )
