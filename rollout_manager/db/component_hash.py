"""Database service for per-component build and deploy commit tracking."""

from __future__ import annotations

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from rollout_manager.domain import DeployComponent

from .interfaces import ComponentHashRepositoryPort


class SQLAlchemyComponentHashService(ComponentHashRepositoryPort):
    """SQLAlchemy-backed component hash service."""

    def __init__(self, engine: Engine):
        """Initialize component hash persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_component_record_build_hash(self, component: DeployComponent, sha: str) -> None:
        """Record the commit whose rollout started for the component.

        Args:
            component: Deployed component.
            sha: Commit hash.

        Returns:
            None: Hash is persisted as a side effect.

        Raises:
            ValueError: Raised when sha is blank.
            RuntimeError: Raised when persistence fails.
        """

        self._db_component_upsert_hash(component=component, sha=sha, column_name="build_hash")

    def db_component_record_deploy_hash(self, component: DeployComponent, sha: str) -> None:
        """Record the commit that is fully deployed for the component.

        Args:
            component: Deployed component.
            sha: Commit hash.

        Returns:
            None: Hash is persisted as a side effect.

        Raises:
            ValueError: Raised when sha is blank.
            RuntimeError: Raised when persistence fails.
        """

        self._db_component_upsert_hash(component=component, sha=sha, column_name="deploy_hash")

    def _db_component_upsert_hash(self, component: DeployComponent, sha: str, column_name: str) -> None:
        normalized_sha = sha.strip()
        if not normalized_sha:
            raise ValueError("sha must not be blank")
        if column_name not in {"build_hash", "deploy_hash"}:
            raise ValueError(f"unsupported column_name={column_name}")

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        f"INSERT INTO component_hash (component, {column_name}, updated_at_utc) "
                        "VALUES (:component, :sha, now()) "
                        f"ON CONFLICT (component) DO UPDATE SET {column_name} = EXCLUDED.{column_name}, "
                        "updated_at_utc = now()"
                    ),
                    {"component": component.value, "sha": normalized_sha},
                )
        except SQLAlchemyError as error:
            raise RuntimeError(f"failed to record {column_name} for component={component.value}") from error
