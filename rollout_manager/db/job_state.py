"""Database service for rollout job state persistence."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from rollout_manager.domain import (
    JobStage,
    JobState,
    domain_job_params_to_payload,
    domain_job_state_from_payload,
)

from .interfaces import JobStateRepositoryPort

_JOB_STATE_SELECT_COLUMNS = "job_id, job_type, stage, job_ts, params "


class SQLAlchemyJobStateService(JobStateRepositoryPort):
    """SQLAlchemy-backed job state service.

    Every save replaces the full job state so that a redispatched job resumes
    from the last persisted stage and task identifiers.
    """

    def __init__(self, engine: Engine):
        """Initialize job state persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_job_state_save(self, state: JobState) -> None:
        """Upsert the full state of one job.

        Args:
            state: Job state to persist.

        Returns:
            None: State is persisted as a side effect.

        Raises:
            ValueError: Raised when the job id is blank.
            RuntimeError: Raised when persistence fails.
        """

        if not state.job_id.strip():
            raise ValueError("job_id must not be blank")

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO job_state (job_id, job_type, stage, job_ts, params, updated_at_utc) "
                        "VALUES (:job_id, :job_type, :stage, :job_ts, CAST(:params AS jsonb), now()) "
                        "ON CONFLICT (job_id) DO UPDATE SET "
                        "stage = EXCLUDED.stage, "
                        "params = EXCLUDED.params, "
                        "updated_at_utc = now()"
                    ),
                    {
                        "job_id": state.job_id,
                        "job_type": state.job_type.value,
                        "stage": state.stage.value,
                        "job_ts": state.timestamp,
                        "params": json.dumps(domain_job_params_to_payload(state.params)),
                    },
                )
        except SQLAlchemyError as error:
            raise RuntimeError("failed to save job state") from error

    def db_job_state_get_by_id(self, job_id: str) -> JobState | None:
        """Fetch one job state by identifier.

        Args:
            job_id: Job identifier.

        Returns:
            JobState | None: Persisted state, or None when absent.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(f"SELECT {_JOB_STATE_SELECT_COLUMNS}FROM job_state WHERE job_id = :job_id"),
                    {"job_id": job_id},
                ).mappings().first()
                if row is None:
                    return None
                return self._map_job_state(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch job state by id") from error

    def db_job_state_list(self, limit: int, offset: int, stage: JobStage | None = None) -> list[JobState]:
        """List job states ordered by creation time, latest first.

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

        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        parameters: dict[str, Any] = {"limit": limit, "offset": offset}
        if stage is None:
            query = (
                f"SELECT {_JOB_STATE_SELECT_COLUMNS}FROM job_state "
                "ORDER BY job_ts DESC, job_id DESC "
                "LIMIT :limit OFFSET :offset"
            )
        else:
            query = (
                f"SELECT {_JOB_STATE_SELECT_COLUMNS}FROM job_state "
                "WHERE stage = :stage "
                "ORDER BY job_ts DESC, job_id DESC "
                "LIMIT :limit OFFSET :offset"
            )
            parameters["stage"] = stage.value

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(text(query), parameters).mappings().all()
                return [self._map_job_state(row) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list job states") from error

    def _map_job_state(self, row: Any) -> JobState:
        """Map SQLAlchemy row mapping to typed job state.

        Args:
            row: SQLAlchemy mapping row.

        Returns:
            JobState: Typed job state.

        Raises:
            TypeError: Raised when params are not a JSON object.
        """

        params_value = row["params"]
        if isinstance(params_value, str):
            params_value = json.loads(params_value)
        if not isinstance(params_value, dict):
            raise TypeError("job_state.params must be a JSON object")

        return domain_job_state_from_payload(
            {
                "job_id": row["job_id"],
                "job_type": row["job_type"],
                "stage": row["stage"],
                "timestamp": row["job_ts"],
                "params": params_value,
            }
        )
