"""Adapter layer package for orchestration platform and notification boundaries."""

from .ecs_client import EcsOrchestrationClient
from .interfaces import JobNotifierPort, OrchestrationClientPort
from .notifications import LogJobNotifier, WebhookJobNotifier
from .orchestration_errors import (
	OrchestrationClientError,
	OrchestrationConnectionError,
	OrchestrationFailure,
	OrchestrationFailureError,
	OrchestrationRequestError,
	OrchestrationTimeoutError,
)

__all__ = [
	"EcsOrchestrationClient",
	"JobNotifierPort",
	"LogJobNotifier",
	"OrchestrationClientError",
	"OrchestrationClientPort",
	"OrchestrationConnectionError",
	"OrchestrationFailure",
	"OrchestrationFailureError",
	"OrchestrationRequestError",
	"OrchestrationTimeoutError",
	"WebhookJobNotifier",
]
