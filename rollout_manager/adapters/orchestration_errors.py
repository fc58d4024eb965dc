"""Project-native typed exceptions for orchestration platform failures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrchestrationFailure:
    """One failure entry reported by the orchestration platform.

    Attributes:
        arn: Resource identifier the failure refers to.
        detail: Platform-provided failure detail.
        reason: Platform-provided failure reason.
    """

    arn: str = ""
    detail: str = ""
    reason: str = ""


class OrchestrationClientError(Exception):
    """Base exception for orchestration client failures.

    Attributes:
        operation: Client operation that failed.
    """

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class OrchestrationConnectionError(OrchestrationClientError, ConnectionError):
    """Transport-level failure while calling the orchestration platform."""


class OrchestrationTimeoutError(OrchestrationClientError, TimeoutError):
    """Call deadline expired before the orchestration platform answered."""


class OrchestrationRequestError(OrchestrationClientError, ValueError):
    """Request rejected by the platform or invalid before it was sent."""


class OrchestrationFailureError(OrchestrationClientError, RuntimeError):
    """Platform accepted the call but reported failures for the target resources."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        failures: tuple[OrchestrationFailure, ...] = (),
    ):
        super().__init__(message=message, operation=operation)
        self.failures = failures
