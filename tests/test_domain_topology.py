"""Regression tests for layout repository resolution, traversal and serialization."""

from __future__ import annotations

import pytest

from rollout_manager.domain import (
    Cluster,
    DeployUnitKind,
    Layout,
    Task,
    TaskSet,
    domain_iter_layout_units,
    domain_layout_from_payload,
    domain_layout_to_payload,
    domain_resolve_task_repository,
)


def _build_layout() -> Layout:
    """Build a two-cluster layout with repository overrides on every level.

    Returns:
        Layout: Deterministic layout fixture.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return Layout(
        clusters={
            "alpha": Cluster(
                service_tasks=TaskSet(tasks={"alpha-api": Task(), "alpha-worker": Task(repo="worker-repo")}),
                tasks=TaskSet(tasks={"alpha-job": Task(temp=True)}, repo="job-repo"),
            ),
            "beta": Cluster(service_tasks=TaskSet(tasks={"beta-api": Task()}), repo="beta-repo"),
        },
        repo="default-repo",
    )


def test_domain_resolve_task_repository_prefers_most_specific_override() -> None:
    """Resolve task, task set, cluster and layout repositories in that order."""

    layout = Layout(repo="layout-repo")
    cluster = Cluster(repo="cluster-repo")
    task_set = TaskSet(repo="set-repo")

    assert domain_resolve_task_repository(layout, cluster, task_set, Task(repo="task-repo")) == "task-repo"
    assert domain_resolve_task_repository(layout, cluster, task_set, Task()) == "set-repo"
    assert domain_resolve_task_repository(layout, cluster, TaskSet(), Task()) == "cluster-repo"
    assert domain_resolve_task_repository(layout, Cluster(), TaskSet(), Task()) == "layout-repo"


def test_domain_resolve_task_repository_returns_empty_when_nothing_is_set() -> None:
    """Return an empty repository when no level defines one."""

    assert domain_resolve_task_repository(Layout(), Cluster(), TaskSet(), Task()) == ""


def test_domain_iter_layout_units_yields_services_before_tasks_with_effective_repository() -> None:
    """Walk every unit once, services first per cluster, with resolved repositories.

    Returns:
        None: Assertions validate traversal order and repository resolution.

    Raises:
        AssertionError: Raised when traversal output differs from expectation.
    """

    units = list(domain_iter_layout_units(_build_layout()))

    assert [(unit.cluster_name, unit.unit_name, unit.kind, unit.repository) for unit in units] == [
        ("alpha", "alpha-api", DeployUnitKind.SERVICE, "default-repo"),
        ("alpha", "alpha-worker", DeployUnitKind.SERVICE, "worker-repo"),
        ("alpha", "alpha-job", DeployUnitKind.TASK, "job-repo"),
        ("beta", "beta-api", DeployUnitKind.SERVICE, "beta-repo"),
    ]


def test_domain_iter_layout_units_exposes_mutable_task_entries() -> None:
    """Write through the unit view into the owning layout."""

    layout = _build_layout()

    for unit in domain_iter_layout_units(layout):
        unit.task.id = f"rev-{unit.unit_name}"

    assert layout.clusters["alpha"].service_tasks.tasks["alpha-api"].id == "rev-alpha-api"
    assert layout.clusters["alpha"].tasks.tasks["alpha-job"].id == "rev-alpha-job"
    assert layout.clusters["beta"].service_tasks.tasks["beta-api"].id == "rev-beta-api"


def test_domain_layout_payload_keeps_ids_flags_and_absent_task_sets() -> None:
    """Serialize absent task sets as null and rebuild ids and transient flags."""

    layout = _build_layout()
    layout.clusters["alpha"].service_tasks.tasks["alpha-api"].id = "arn:rev:7"

    payload = domain_layout_to_payload(layout)
    rebuilt_layout = domain_layout_from_payload(payload)

    assert payload["clusters"]["beta"]["tasks"] is None
    assert rebuilt_layout == layout
    assert rebuilt_layout.clusters["alpha"].tasks.tasks["alpha-job"].temp is True


def test_domain_layout_from_payload_rejects_non_mapping_payloads() -> None:
    """Raise ValueError for malformed layout payloads."""

    with pytest.raises(ValueError, match="layout payload"):
        domain_layout_from_payload(["not", "a", "mapping"])
    with pytest.raises(ValueError, match="task set payload"):
        domain_layout_from_payload({"clusters": {"alpha": {"service_tasks": "broken"}}})
