"""Domain models used across application layer boundaries."""

from .job_state import (
	NOTIFY_JOB_STAGES,
	TERMINAL_JOB_STAGES,
	DeployComponent,
	DeployJobParams,
	JobStage,
	JobState,
	JobType,
	domain_job_params_from_payload,
	domain_job_params_to_payload,
	domain_job_state_describe,
	domain_job_state_from_payload,
	domain_job_state_to_payload,
	job_stage_is_terminal,
)
from .models import HealthStatus
from .topology import (
	Cluster,
	DeployUnit,
	DeployUnitKind,
	Layout,
	Task,
	TaskSet,
	domain_iter_layout_units,
	domain_layout_from_payload,
	domain_layout_to_payload,
	domain_resolve_task_repository,
)

__all__ = [
	"HealthStatus",
	"Cluster",
	"DeployUnit",
	"DeployUnitKind",
	"Layout",
	"Task",
	"TaskSet",
	"domain_iter_layout_units",
	"domain_layout_from_payload",
	"domain_layout_to_payload",
	"domain_resolve_task_repository",
	"NOTIFY_JOB_STAGES",
	"TERMINAL_JOB_STAGES",
	"DeployComponent",
	"DeployJobParams",
	"JobStage",
	"JobState",
	"JobType",
	"domain_job_params_from_payload",
	"domain_job_params_to_payload",
	"domain_job_state_describe",
	"domain_job_state_from_payload",
	"domain_job_state_to_payload",
	"job_stage_is_terminal",
]
