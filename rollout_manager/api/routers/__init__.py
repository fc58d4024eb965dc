"""API router package for endpoint composition."""

from .health import api_create_health_router
from .jobs import api_create_jobs_router, api_serialize_job_state

__all__ = ["api_create_health_router", "api_create_jobs_router", "api_serialize_job_state"]
