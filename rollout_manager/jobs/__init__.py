"""Job layer package for resumable rollout jobs."""

from .deploy_job import JOB_TIMEOUT_ERROR_MESSAGE, DeployJob, DeployJobConfig, job_utc_now
from .factory import DeployJobFactory
from .interfaces import JobConstructionError, JobFactoryPort, JobPort, JobStateInvariantError

__all__ = [
	"JOB_TIMEOUT_ERROR_MESSAGE",
	"DeployJob",
	"DeployJobConfig",
	"DeployJobFactory",
	"JobConstructionError",
	"JobFactoryPort",
	"JobPort",
	"JobStateInvariantError",
	"job_utc_now",
]
