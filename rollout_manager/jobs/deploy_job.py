"""Resumable deploy job advancing one rollout through its lifecycle stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Final

from rollout_manager.adapters import JobNotifierPort, OrchestrationClientError
from rollout_manager.db import ComponentHashRepositoryPort, JobStateRepositoryPort
from rollout_manager.domain import (
    NOTIFY_JOB_STAGES,
    JobStage,
    JobState,
    JobType,
    domain_job_state_describe,
    job_stage_is_terminal,
)
from rollout_manager.rollout import ClusterRolloutDriver

from .interfaces import JobPort, JobStateInvariantError

logger = logging.getLogger(__name__)

JOB_TIMEOUT_ERROR_MESSAGE: Final[str] = "Timeout"

_ROLLOUT_ERRORS: Final[tuple[type[Exception], ...]] = (
    OrchestrationClientError,
    TimeoutError,
    ConnectionError,
    ValueError,
    RuntimeError,
)
_AUXILIARY_ERRORS: Final[tuple[type[Exception], ...]] = (ConnectionError, TimeoutError, ValueError, RuntimeError)


@dataclass(frozen=True)
class DeployJobConfig:
    """Configuration values for deploy job execution.

    Attributes:
        max_job_duration: Wall-clock budget measured from job creation.
    """

    max_job_duration: timedelta = timedelta(minutes=30)


def job_utc_now() -> datetime:
    """Return the current UTC time."""

    return datetime.now(timezone.utc)


class DeployJob(JobPort):
    """Deploy job state machine: `queued -> started -> completed | failed`.

    Each `job_advance` call runs to completion. While the rollout has not
    converged the state is returned unchanged and the caller advances again
    later.
    """

    def __init__(
        self,
        job_state: JobState,
        rollout_driver: ClusterRolloutDriver,
        job_repository: JobStateRepositoryPort,
        hash_repository: ComponentHashRepositoryPort,
        notifier: JobNotifierPort,
        config: DeployJobConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize deploy job dependencies.

        Args:
            job_state: State to resume from; this job owns its layout exclusively.
            rollout_driver: Driver applying and checking the rollout.
            job_repository: Job state persistence.
            hash_repository: Component build/deploy hash persistence.
            notifier: Stage transition notification sink.
            config: Execution configuration.
            clock: Optional provider of the current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing or the state is not a deploy job.
        """

        if job_state is None:
            raise ValueError("job_state must not be None")
        if job_state.job_type is not JobType.DEPLOY:
            raise ValueError(f"unsupported job_type={job_state.job_type.value}")
        if rollout_driver is None:
            raise ValueError("rollout_driver must not be None")
        if job_repository is None:
            raise ValueError("job_repository must not be None")
        if hash_repository is None:
            raise ValueError("hash_repository must not be None")
        if notifier is None:
            raise ValueError("notifier must not be None")

        self._state = job_state
        self._rollout_driver = rollout_driver
        self._job_repository = job_repository
        self._hash_repository = hash_repository
        self._notifier = notifier
        self._config = config or DeployJobConfig()
        self._clock = clock or job_utc_now

    def job_state(self) -> JobState:
        return self._state

    def job_advance(self) -> JobState:
        """Advance the job by at most one stage.

        Returns:
            JobState: Resulting state; the same object while waiting for convergence.

        Raises:
            JobStateInvariantError: Raised when the job is already terminal or in an unknown stage.
            RuntimeError: Raised when persisting the new state fails.
        """

        state = self._state
        params = state.params

        if state.stage is JobStage.QUEUED:
            try:
                self._rollout_driver.rollout_update_layout(layout=params.layout, image_tag=params.sha)
            except _ROLLOUT_ERRORS as error:
                state = self._job_fail(state, str(error))
                logger.error("deploy job: error updating services: %s, %s", error, domain_job_state_describe(state))
            else:
                state = replace(state, stage=JobStage.STARTED)
                logger.info("deploy job: rollout started: %s", domain_job_state_describe(state))
                self._job_record_hash(state, self._hash_repository.db_component_record_build_hash, "build")
        elif not job_stage_is_terminal(state.stage) and self._job_is_timed_out(state):
            state = self._job_fail(state, JOB_TIMEOUT_ERROR_MESSAGE)
            logger.error("deploy job: job timed out: %s", domain_job_state_describe(state))
        elif state.stage is JobStage.STARTED:
            try:
                converged = self._rollout_driver.rollout_check_layout(layout=params.layout)
            except _ROLLOUT_ERRORS as error:
                state = self._job_fail(state, str(error))
                logger.error(
                    "deploy job: error checking services running status: %s, %s",
                    error,
                    domain_job_state_describe(state),
                )
            else:
                if not converged:
                    return state
                state = replace(state, stage=JobStage.COMPLETED)
                logger.info("deploy job: rollout completed: %s", domain_job_state_describe(state))
                self._job_record_hash(state, self._hash_repository.db_component_record_deploy_hash, "deploy")
        else:
            raise JobStateInvariantError(f"deploy job: unexpected state: {domain_job_state_describe(state)}")

        self._state = state
        if state.stage in NOTIFY_JOB_STAGES:
            self._job_notify(state)
        self._job_repository.db_job_state_save(state)
        return state

    def _job_is_timed_out(self, state: JobState) -> bool:
        return self._clock() - state.timestamp > self._config.max_job_duration

    def _job_fail(self, state: JobState, error_message: str) -> JobState:
        return replace(state, stage=JobStage.FAILED, params=replace(state.params, error=error_message))

    def _job_record_hash(self, state: JobState, record: Callable[..., None], hash_kind: str) -> None:
        """Record a component hash; failures are logged and never fail the job.

        Args:
            state: Job state after the transition.
            record: Repository method taking `component` and `sha`.
            hash_kind: Hash label for logs.

        Returns:
            None: Hash is recorded as a side effect.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            record(component=state.params.component, sha=state.params.sha)
        except _AUXILIARY_ERRORS as error:
            logger.warning(
                "deploy job: failed to update %s hash: %s, %s",
                hash_kind,
                error,
                domain_job_state_describe(state),
            )

    def _job_notify(self, state: JobState) -> None:
        # Notification sinks are best-effort; the state must still be saved.
        try:
            self._notifier.notify_job(state)
        except Exception as error:
            logger.warning(
                "deploy job: notification failed: %s: %s, %s",
                error.__class__.__name__,
                error,
                domain_job_state_describe(state),
            )
