"""Database readiness checks for the job state store."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from rollout_manager.domain import HealthStatus

from .interfaces import DatabaseHealthPort

_REQUIRED_TABLES = ("job_state", "component_hash")


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Reports whether the job state store is reachable and migrated."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL with the password masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Check connectivity and the presence of the rollout tables.

        Returns:
            HealthStatus: `ok` when all tables exist, `degraded` when migrations are missing.

        Raises:
            ConnectionError: Raised when the database cannot be queried.
        """

        try:
            with self._engine.connect() as connection:
                regclass_row = connection.execute(
                    text("SELECT to_regclass(:job_table), to_regclass(:hash_table)"),
                    {"job_table": _REQUIRED_TABLES[0], "hash_table": _REQUIRED_TABLES[1]},
                ).one()
            present_tables = {str(table_name) for table_name in regclass_row if table_name is not None}
        except SQLAlchemyError as error:
            raise ConnectionError(f"job state store unreachable: {error.__class__.__name__}") from error

        missing_tables = [table_name for table_name in _REQUIRED_TABLES if table_name not in present_tables]
        if missing_tables:
            return HealthStatus(status="degraded", detail=f"missing tables: {', '.join(missing_tables)}")
        return HealthStatus(status="ok", detail="job state store ready")
