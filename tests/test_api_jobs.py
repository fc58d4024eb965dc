"""Tests for deploy job API endpoints."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from rollout_manager.api.application import create_api_application
from rollout_manager.config import AppSettings
from rollout_manager.domain import DeployComponent, DeployJobParams, HealthStatus, JobStage, JobState, JobType, Layout
from rollout_manager.jobs import JobConstructionError, JobStateInvariantError


class _HealthyDatabaseService:
    """Test double that simulates a healthy database target."""

    def db_connection_label(self) -> str:
        return "postgresql://test"

    def db_check_health(self) -> HealthStatus:
        return HealthStatus(status="ok", detail="database connectivity verified")


class _JobRepositoryStub:
    """In-memory job repository capturing saves and list arguments."""

    def __init__(self, states: list[JobState] | None = None):
        """Initialize repository contents.

        Args:
            states: Initially persisted states.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self.states = {state.job_id: state for state in states or []}
        self.saved_states: list[JobState] = []
        self.list_calls: list[dict[str, object]] = []

    def db_job_state_save(self, state: JobState) -> None:
        self.saved_states.append(state)
        self.states[state.job_id] = state

    def db_job_state_get_by_id(self, job_id: str) -> JobState | None:
        return self.states.get(job_id)

    def db_job_state_list(self, limit: int, offset: int, stage: JobStage | None = None) -> list[JobState]:
        self.list_calls.append({"limit": limit, "offset": offset, "stage": stage})
        return [state for state in self.states.values() if stage is None or state.stage is stage]


class _JobStub:
    """Job stub advancing to a scripted next stage."""

    def __init__(self, state: JobState, next_stage: JobStage | None, error: Exception | None = None):
        self._state = state
        self._next_stage = next_stage
        self._error = error

    def job_state(self) -> JobState:
        return self._state

    def job_advance(self) -> JobState:
        if self._error is not None:
            raise self._error
        self._state = replace(self._state, stage=self._next_stage)
        return self._state


class _JobFactoryStub:
    """Job factory stub returning fixed states and scripted jobs."""

    def __init__(self, next_stage: JobStage | None = JobStage.STARTED, advance_error: Exception | None = None):
        self.next_stage = next_stage
        self.advance_error = advance_error
        self.resumed_states: list[JobState] = []

    def job_build_deploy_state(self, component: str | None, sha: str | None) -> JobState:
        """Build a queued state or raise for unknown input.

        Args:
            component: Component identifier.
            sha: Commit hash.

        Returns:
            JobState: Queued job state.

        Raises:
            JobConstructionError: Raised when input is missing or unknown.
        """

        if not sha:
            raise JobConstructionError("deploy job: missing sha")
        if component not in {"ceramic", "ipfs", "cas"}:
            raise JobConstructionError(f"deploy job: unexpected component: {component}")
        return _build_state(job_id="job-new", component=DeployComponent(component), sha=sha)

    def job_resume(self, state: JobState) -> _JobStub:
        self.resumed_states.append(state)
        return _JobStub(state=state, next_stage=self.next_stage, error=self.advance_error)


def _build_state(
    job_id: str = "job-1",
    stage: JobStage = JobStage.QUEUED,
    component: DeployComponent = DeployComponent.CAS,
    sha: str = "abc123",
) -> JobState:
    return JobState(
        job_id=job_id,
        job_type=JobType.DEPLOY,
        stage=stage,
        timestamp=datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc),
        params=DeployJobParams(component=component, sha=sha, layout=Layout()),
    )


def _build_client(repository: _JobRepositoryStub, factory: _JobFactoryStub | None = None) -> TestClient:
    """Create API test client with job stubs.

    Args:
        repository: Job repository stub.
        factory: Optional job factory stub.

    Returns:
        TestClient: Client bound to the application.

    Raises:
        ValueError: Raised when settings are invalid.
    """

    settings = AppSettings(
        environment_name="dev",
        aws_account_id="123456789012",
        api_default_limit=20,
        api_max_limit=50,
        _env_file=None,
    )
    application = create_api_application(settings, _HealthyDatabaseService(), repository, factory or _JobFactoryStub())
    return TestClient(application)


def test_api_jobs_deploy_creates_and_persists_queued_job() -> None:
    """Create a queued job and persist it before responding.

    Returns:
        None: Assertions validate response and persistence.

    Raises:
        AssertionError: Raised when the created job is incorrect.
    """

    repository = _JobRepositoryStub()

    response = _build_client(repository).post("/jobs/deploy", json={"component": "ipfs", "sha": "def456"})

    assert response.status_code == 201
    assert response.json()["job_id"] == "job-new"
    assert response.json()["stage"] == "queued"
    assert response.json()["params"]["component"] == "ipfs"
    assert response.json()["terminal"] is False
    assert [state.job_id for state in repository.saved_states] == ["job-new"]


def test_api_jobs_deploy_rejects_invalid_parameters() -> None:
    """Return 400 without persisting when the job cannot be constructed."""

    repository = _JobRepositoryStub()
    client = _build_client(repository)

    missing_sha_response = client.post("/jobs/deploy", json={"component": "cas"})
    unknown_component_response = client.post("/jobs/deploy", json={"component": "frontend", "sha": "abc123"})

    assert missing_sha_response.status_code == 400
    assert missing_sha_response.json()["code"] == "INVALID_DEPLOY_JOB"
    assert unknown_component_response.status_code == 400
    assert "unexpected component" in unknown_component_response.json()["message"]
    assert repository.saved_states == []


def test_api_jobs_list_caps_limit_and_filters_stage() -> None:
    """Apply the max limit and pass the parsed stage filter."""

    repository = _JobRepositoryStub(
        states=[_build_state(job_id="job-1"), _build_state(job_id="job-2", stage=JobStage.STARTED)]
    )

    response = _build_client(repository).get("/jobs", params={"limit": 500, "stage": "Started"})

    assert response.status_code == 200
    assert response.json()["page"]["applied_limit"] == 50
    assert response.json()["filters"] == {"stage": "started"}
    assert [item["job_id"] for item in response.json()["items"]] == ["job-2"]
    assert repository.list_calls == [{"limit": 50, "offset": 0, "stage": JobStage.STARTED}]


def test_api_jobs_list_rejects_unknown_stage() -> None:
    """Return 400 for unsupported stage filters."""

    response = _build_client(_JobRepositoryStub()).get("/jobs", params={"stage": "paused"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STAGE_FILTER"


def test_api_jobs_detail_returns_job_or_404() -> None:
    """Return the job payload or 404 for unknown ids."""

    client = _build_client(_JobRepositoryStub(states=[_build_state()]))

    found_response = client.get("/jobs/job-1")
    missing_response = client.get("/jobs/job-404")

    assert found_response.status_code == 200
    assert found_response.json()["timestamp"] == "2026-10-18T10:00:00+00:00"
    assert missing_response.status_code == 404


def test_api_jobs_advance_returns_resulting_state() -> None:
    """Resume the persisted job and return the advanced state."""

    repository = _JobRepositoryStub(states=[_build_state()])
    factory = _JobFactoryStub(next_stage=JobStage.STARTED)

    response = _build_client(repository, factory).post("/jobs/job-1/advance")

    assert response.status_code == 200
    assert response.json()["stage"] == "started"
    assert [state.job_id for state in factory.resumed_states] == ["job-1"]


def test_api_jobs_advance_rejects_terminal_and_unknown_jobs() -> None:
    """Return 409 for terminal jobs and 404 for unknown ones without resuming."""

    repository = _JobRepositoryStub(states=[_build_state(stage=JobStage.COMPLETED)])
    factory = _JobFactoryStub()
    client = _build_client(repository, factory)

    terminal_response = client.post("/jobs/job-1/advance")
    missing_response = client.post("/jobs/job-404/advance")

    assert terminal_response.status_code == 409
    assert terminal_response.json()["code"] == "JOB_ALREADY_TERMINAL"
    assert missing_response.status_code == 404
    assert factory.resumed_states == []


def test_api_jobs_advance_reports_invariant_errors() -> None:
    """Return a server error payload when the job rejects its stage."""

    repository = _JobRepositoryStub(states=[_build_state(stage=JobStage.STARTED)])
    factory = _JobFactoryStub(advance_error=JobStateInvariantError("deploy job: unexpected state"))

    response = _build_client(repository, factory).post("/jobs/job-1/advance")

    assert response.status_code == 500
    assert response.json()["code"] == "JOB_STATE_INVARIANT"
