"""Database layer package for all SQL and persistence boundaries."""

from .component_hash import SQLAlchemyComponentHashService
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import ComponentHashRepositoryPort, DatabaseHealthPort, JobStateRepositoryPort
from .job_state import SQLAlchemyJobStateService
from .session import db_create_engine

__all__ = [
	"ComponentHashRepositoryPort",
	"DatabaseHealthPort",
	"JobStateRepositoryPort",
	"SQLAlchemyComponentHashService",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyJobStateService",
	"db_create_engine",
]
