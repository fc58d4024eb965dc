"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from typing import Protocol

from rollout_manager.domain import DeployComponent, HealthStatus, JobStage, JobState


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class JobStateRepositoryPort(Protocol):
    """Port definition for durable job state persistence."""

    def db_job_state_save(self, state: JobState) -> None:
        """Insert or replace the full state of one job.

        Args:
            state: Job state to persist.

        Returns:
            None: State is persisted as a side effect.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_job_state_get_by_id(self, job_id: str) -> JobState | None:
        """Fetch one job state by identifier.

        Args:
            job_id: Job identifier.

        Returns:
            JobState | None: Persisted state, or None when absent.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_job_state_list(self, limit: int, offset: int, stage: JobStage | None = None) -> list[JobState]:
        """List job states, latest first.

        Args:
            limit: Maximum number of rows.
            offset: Number of rows to skip.
            stage: Optional stage filter.

        Returns:
            list[JobState]: Ordered job states.

        Raises:
            ValueError: Raised when limit or offset are invalid.
            RuntimeError: Raised when database read fails.
        """


class ComponentHashRepositoryPort(Protocol):
    """Port definition for per-component build and deploy commit tracking."""

    def db_component_record_build_hash(self, component: DeployComponent, sha: str) -> None:
        """Record the commit hash whose rollout has started for a component.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_component_record_deploy_hash(self, component: DeployComponent, sha: str) -> None:
        """Record the commit hash that is fully deployed for a component.

        Raises:
            RuntimeError: Raised when persistence fails.
        """
