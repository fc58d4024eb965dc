"""Construction of new deploy jobs and resumption of persisted ones."""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from uuid import uuid4

from rollout_manager.adapters import JobNotifierPort
from rollout_manager.db import ComponentHashRepositoryPort, JobStateRepositoryPort
from rollout_manager.domain import DeployComponent, DeployJobParams, JobStage, JobState, JobType
from rollout_manager.rollout import ClusterRolloutDriver
from rollout_manager.topology import TopologyResolver

from .deploy_job import DeployJob, DeployJobConfig, job_utc_now
from .interfaces import JobConstructionError, JobFactoryPort


class DeployJobFactory(JobFactoryPort):
    """Builds queued deploy job states and resumes persisted ones as `DeployJob`."""

    def __init__(
        self,
        topology_resolver: TopologyResolver,
        rollout_driver: ClusterRolloutDriver,
        job_repository: JobStateRepositoryPort,
        hash_repository: ComponentHashRepositoryPort,
        notifier: JobNotifierPort,
        config: DeployJobConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize deploy job factory dependencies.

        Args:
            topology_resolver: Resolver producing a fresh layout per job.
            rollout_driver: Driver shared by all jobs; it holds no per-job state.
            job_repository: Job state persistence.
            hash_repository: Component build/deploy hash persistence.
            notifier: Stage transition notification sink.
            config: Deploy job execution configuration.
            clock: Optional provider of the current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if topology_resolver is None:
            raise ValueError("topology_resolver must not be None")
        if rollout_driver is None:
            raise ValueError("rollout_driver must not be None")
        if job_repository is None:
            raise ValueError("job_repository must not be None")
        if hash_repository is None:
            raise ValueError("hash_repository must not be None")
        if notifier is None:
            raise ValueError("notifier must not be None")

        self._topology_resolver = topology_resolver
        self._rollout_driver = rollout_driver
        self._job_repository = job_repository
        self._hash_repository = hash_repository
        self._notifier = notifier
        self._config = config or DeployJobConfig()
        self._clock = clock or job_utc_now

    def job_build_deploy_state(self, component: str | None, sha: str | None) -> JobState:
        """Build a queued deploy job state with a freshly resolved layout.

        Args:
            component: Component identifier (`ceramic`, `ipfs`, `cas`).
            sha: Target commit hash.

        Returns:
            JobState: Queued state stamped with the current time.

        Raises:
            JobConstructionError: Raised when component or sha is missing, or the component is unknown.
        """

        normalized_component = (component or "").strip()
        normalized_sha = (sha or "").strip()
        if not normalized_component:
            raise JobConstructionError("deploy job: missing component (ceramic, ipfs, cas)")
        if not normalized_sha:
            raise JobConstructionError("deploy job: missing sha")

        try:
            deploy_component = DeployComponent(normalized_component)
            layout = self._topology_resolver.topology_resolve_layout(deploy_component)
        except ValueError as error:
            raise JobConstructionError(f"deploy job: unexpected component: {normalized_component}") from error

        return JobState(
            job_id=str(uuid4()),
            job_type=JobType.DEPLOY,
            stage=JobStage.QUEUED,
            timestamp=self._clock(),
            params=DeployJobParams(component=deploy_component, sha=normalized_sha, layout=layout),
        )

    def job_resume(self, state: JobState) -> DeployJob:
        """Wrap a persisted state into a deploy job.

        Args:
            state: Persisted job state.

        Returns:
            DeployJob: Job ready to be advanced.

        Raises:
            JobConstructionError: Raised when the state is not a deploy job.
        """

        if state.job_type is not JobType.DEPLOY:
            raise JobConstructionError(f"unsupported job_type={state.job_type.value}")
        return DeployJob(
            job_state=state,
            rollout_driver=self._rollout_driver,
            job_repository=self._job_repository,
            hash_repository=self._hash_repository,
            notifier=self._notifier,
            config=self._config,
            clock=self._clock,
        )
