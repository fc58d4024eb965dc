"""Small value objects shared by the db and api layers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    """Result of a dependency readiness check.

    Attributes:
        status: `ok` or `degraded`.
        detail: Human-readable reason.
    """

    status: str
    detail: str
