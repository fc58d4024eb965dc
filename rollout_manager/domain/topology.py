"""Deployment topology model shared by topology resolution, rollout and persistence.

A `Layout` is owned by exactly one job. The rollout driver writes revision
identifiers into `Task.id` while walking it, so a layout instance must never be
shared between concurrently advanced jobs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class DeployUnitKind(str, Enum):
    """Closed set of deployment unit kinds handled by the rollout driver."""

    SERVICE = "service"
    TASK = "task"


@dataclass
class Task:
    """One deployment unit inside a task set.

    Attributes:
        repo: Optional image repository override.
        temp: Whether the unit runs to completion and must never be force-stopped.
        id: Revision identifier written by the rollout driver after an update.
    """

    repo: str = ""
    temp: bool = False
    id: str = ""


@dataclass
class TaskSet:
    """Named deployment units of one kind within a cluster.

    Attributes:
        tasks: Deployment units keyed by unit name.
        repo: Optional image repository override for all units in the set.
    """

    tasks: dict[str, Task] = field(default_factory=dict)
    repo: str = ""


@dataclass
class Cluster:
    """Deployment units owned by one orchestration cluster.

    Attributes:
        service_tasks: Long-running service units.
        tasks: Plain task units (one-off or permanently running families).
        repo: Optional image repository override for the cluster.
    """

    service_tasks: TaskSet | None = None
    tasks: TaskSet | None = None
    repo: str = ""


@dataclass
class Layout:
    """Full rollout target for one job.

    Attributes:
        clusters: Clusters keyed by cluster name.
        repo: Default image repository name.
    """

    clusters: dict[str, Cluster] = field(default_factory=dict)
    repo: str = ""


@dataclass(frozen=True)
class DeployUnit:
    """Traversal view of one deployment unit.

    Attributes:
        cluster_name: Owning cluster name.
        unit_name: Service name or task family name.
        kind: Deployment unit kind.
        task: Mutable task entry inside the layout.
        repository: Effective image repository for the unit.
    """

    cluster_name: str
    unit_name: str
    kind: DeployUnitKind
    task: Task
    repository: str


def domain_resolve_task_repository(layout: Layout, cluster: Cluster, task_set: TaskSet, task: Task) -> str:
    """Resolve the effective image repository for one task.

    Args:
        layout: Owning layout.
        cluster: Owning cluster.
        task_set: Owning task set.
        task: Target task.

    Returns:
        str: First non-empty of task, task set, cluster and layout repository.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for candidate_repo in (task.repo, task_set.repo, cluster.repo, layout.repo):
        if candidate_repo:
            return candidate_repo
    return ""


def domain_iter_layout_units(layout: Layout) -> Iterator[DeployUnit]:
    """Yield every deployment unit of the layout.

    Service units of a cluster are yielded before its plain task units.

    Args:
        layout: Layout to walk.

    Returns:
        Iterator[DeployUnit]: Deployment unit views.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for cluster_name, cluster in layout.clusters.items():
        for kind, task_set in ((DeployUnitKind.SERVICE, cluster.service_tasks), (DeployUnitKind.TASK, cluster.tasks)):
            if task_set is None:
                continue
            for unit_name, task in task_set.tasks.items():
                yield DeployUnit(
                    cluster_name=cluster_name,
                    unit_name=unit_name,
                    kind=kind,
                    task=task,
                    repository=domain_resolve_task_repository(layout, cluster, task_set, task),
                )


def domain_layout_to_payload(layout: Layout) -> dict[str, Any]:
    """Serialize a layout into a JSON-compatible mapping.

    Args:
        layout: Layout to serialize.

    Returns:
        dict[str, Any]: JSON-compatible layout payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "repo": layout.repo,
        "clusters": {
            cluster_name: {
                "repo": cluster.repo,
                "service_tasks": _domain_task_set_to_payload(cluster.service_tasks),
                "tasks": _domain_task_set_to_payload(cluster.tasks),
            }
            for cluster_name, cluster in layout.clusters.items()
        },
    }


def domain_layout_from_payload(payload: dict[str, Any]) -> Layout:
    """Rebuild a layout from its JSON-compatible mapping.

    Args:
        payload: Layout payload produced by `domain_layout_to_payload`.

    Returns:
        Layout: Rebuilt layout.

    Raises:
        ValueError: Raised when payload structure is invalid.
    """

    if not isinstance(payload, dict):
        raise ValueError("layout payload must be a mapping")
    clusters_payload = payload.get("clusters") or {}
    if not isinstance(clusters_payload, dict):
        raise ValueError("layout clusters payload must be a mapping")

    clusters: dict[str, Cluster] = {}
    for cluster_name, cluster_payload in clusters_payload.items():
        if not isinstance(cluster_payload, dict):
            raise ValueError(f"cluster payload must be a mapping: cluster={cluster_name}")
        clusters[str(cluster_name)] = Cluster(
            service_tasks=_domain_task_set_from_payload(cluster_payload.get("service_tasks")),
            tasks=_domain_task_set_from_payload(cluster_payload.get("tasks")),
            repo=str(cluster_payload.get("repo") or ""),
        )
    return Layout(clusters=clusters, repo=str(payload.get("repo") or ""))


def _domain_task_set_to_payload(task_set: TaskSet | None) -> dict[str, Any] | None:
    if task_set is None:
        return None
    return {
        "repo": task_set.repo,
        "tasks": {
            unit_name: {"repo": task.repo, "temp": task.temp, "id": task.id}
            for unit_name, task in task_set.tasks.items()
        },
    }


def _domain_task_set_from_payload(payload: Any) -> TaskSet | None:
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise ValueError("task set payload must be a mapping or null")
    tasks_payload = payload.get("tasks") or {}
    if not isinstance(tasks_payload, dict):
        raise ValueError("task set tasks payload must be a mapping")
    return TaskSet(
        tasks={
            str(unit_name): Task(
                repo=str(task_payload.get("repo") or ""),
                temp=bool(task_payload.get("temp", False)),
                id=str(task_payload.get("id") or ""),
            )
            for unit_name, task_payload in tasks_payload.items()
        },
        repo=str(payload.get("repo") or ""),
    )
