"""Regression tests for deploy job construction and resumption."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from rollout_manager.domain import DeployComponent, JobStage, JobType, domain_iter_layout_units
from rollout_manager.jobs import DeployJob, DeployJobFactory, JobConstructionError
from rollout_manager.topology import EnvironmentConfig, TopologyResolver


class _UnusedCollaborator:
    """Placeholder collaborator for construction-only tests."""


def _build_factory() -> DeployJobFactory:
    """Build a factory with a fixed clock and placeholder collaborators.

    Returns:
        DeployJobFactory: Factory under test.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    return DeployJobFactory(
        topology_resolver=TopologyResolver(EnvironmentConfig(environment_name="dev")),
        rollout_driver=_UnusedCollaborator(),
        job_repository=_UnusedCollaborator(),
        hash_repository=_UnusedCollaborator(),
        notifier=_UnusedCollaborator(),
        clock=lambda: datetime(2026, 10, 18, tzinfo=timezone.utc),
    )


def test_jobs_factory_builds_queued_state_with_fresh_layout() -> None:
    """Build a queued deploy state stamped with the clock and an empty-id layout."""

    factory = _build_factory()

    first_state = factory.job_build_deploy_state(component=" cas ", sha=" abc123 ")
    second_state = factory.job_build_deploy_state(component="cas", sha="abc123")

    assert first_state.stage is JobStage.QUEUED
    assert first_state.job_type is JobType.DEPLOY
    assert first_state.timestamp == datetime(2026, 10, 18, tzinfo=timezone.utc)
    assert first_state.params.component is DeployComponent.CAS
    assert first_state.params.sha == "abc123"
    assert first_state.params.error is None
    assert all(not unit.task.id for unit in domain_iter_layout_units(first_state.params.layout))
    assert first_state.job_id != second_state.job_id
    assert first_state.params.layout is not second_state.params.layout


@pytest.mark.parametrize(
    ("component", "sha", "message"),
    [
        (None, "abc123", "missing component"),
        ("  ", "abc123", "missing component"),
        ("cas", None, "missing sha"),
        ("cas", "", "missing sha"),
        ("frontend", "abc123", "unexpected component: frontend"),
    ],
)
def test_jobs_factory_rejects_invalid_parameters(component: str | None, sha: str | None, message: str) -> None:
    """Fail construction before a job exists when parameters are missing or unknown."""

    with pytest.raises(JobConstructionError, match=message):
        _build_factory().job_build_deploy_state(component=component, sha=sha)


def test_jobs_factory_resume_returns_deploy_job_owning_the_state() -> None:
    """Wrap a persisted state into a deploy job exposing the same state."""

    factory = _build_factory()
    state = replace(factory.job_build_deploy_state(component="ipfs", sha="def456"), stage=JobStage.STARTED)

    job = factory.job_resume(state)

    assert isinstance(job, DeployJob)
    assert job.job_state() is state
