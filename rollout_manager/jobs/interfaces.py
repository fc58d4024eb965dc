"""Typed interfaces for job-layer orchestration responsibilities."""

from typing import Protocol

from rollout_manager.domain import JobState


class JobStateInvariantError(RuntimeError):
    """Raised when a job is advanced from a stage it can never be advanced from."""


class JobConstructionError(ValueError):
    """Raised when a job cannot be built from the given parameters."""


class JobPort(Protocol):
    """Port definition for one resumable job."""

    def job_state(self) -> JobState:
        """Return the current job state.

        Returns:
            JobState: Latest in-memory state.

        Raises:
            RuntimeError: Raised when state is unavailable.
        """

    def job_advance(self) -> JobState:
        """Advance the job by at most one stage and return the resulting state.

        Returns:
            JobState: Resulting state; unchanged while waiting for convergence.

        Raises:
            JobStateInvariantError: Raised when the job is in an unexpected stage.
            RuntimeError: Raised when persisting the new state fails.
        """


class JobFactoryPort(Protocol):
    """Port definition for building new jobs and resuming persisted ones."""

    def job_build_deploy_state(self, component: str | None, sha: str | None) -> JobState:
        """Build a queued deploy job state.

        Args:
            component: Component identifier.
            sha: Target commit hash.

        Returns:
            JobState: Queued job state with a resolved layout.

        Raises:
            JobConstructionError: Raised when inputs are missing or unknown.
        """

    def job_resume(self, state: JobState) -> JobPort:
        """Wrap a persisted job state into an advanceable job.

        Args:
            state: Persisted job state.

        Returns:
            JobPort: Job ready to be advanced.

        Raises:
            JobConstructionError: Raised when the state cannot be resumed.
        """
