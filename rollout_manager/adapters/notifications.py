"""Job notification sinks for stage transition announcements."""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from rollout_manager.domain import JobStage, JobState, domain_job_state_describe

from .interfaces import JobNotifierPort

logger = logging.getLogger(__name__)

# InvalidURL, CookieConflict and StreamError sit outside httpx.HTTPError.
_DELIVERY_ERRORS: Final[tuple[type[Exception], ...]] = (
    httpx.HTTPError,
    httpx.InvalidURL,
    httpx.CookieConflict,
    httpx.StreamError,
    KeyError,
    ValueError,
)


class LogJobNotifier(JobNotifierPort):
    """Notifier that only writes job transitions to the application log."""

    def notify_job(self, state: JobState) -> None:
        logger.info("job notification: %s", domain_job_state_describe(state))


class WebhookJobNotifier(JobNotifierPort):
    """Notifier posting Discord-compatible embeds to a webhook URL.

    Delivery is best-effort: transport and HTTP errors are logged and dropped.
    """

    _USER_AGENT: Final[str] = "rollout-manager/1.0 (Python/httpx)"
    _STAGE_COLORS: Final[dict[JobStage, int]] = {
        JobStage.QUEUED: 0x808080,
        JobStage.STARTED: 0x3498DB,
        JobStage.COMPLETED: 0x2ECC71,
        JobStage.FAILED: 0xE74C3C,
    }

    def __init__(self, webhook_url: str, environment_name: str, timeout_seconds: float = 5.0):
        """Initialize webhook notifier.

        Args:
            webhook_url: Target webhook URL.
            environment_name: Environment label shown in notifications.
            timeout_seconds: Delivery deadline.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_webhook_url = webhook_url.strip()
        if not normalized_webhook_url:
            raise ValueError("webhook_url must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._webhook_url = normalized_webhook_url
        self._environment_name = environment_name
        self._timeout_seconds = timeout_seconds

    def notify_job(self, state: JobState) -> None:
        """Post one embed describing the job state.

        Args:
            state: Job state to announce.

        Returns:
            None: Delivery failures are logged only.

        Raises:
            RuntimeError: This implementation does not raise delivery errors.
        """

        try:
            payload = self.notify_build_payload(state)
            with httpx.Client(timeout=self._timeout_seconds, headers={"User-Agent": self._USER_AGENT}) as client:
                response = client.post(self._webhook_url, json=payload)
                response.raise_for_status()
        except _DELIVERY_ERRORS as error:
            logger.warning("job notification delivery failed: %s, %s", error, domain_job_state_describe(state))

    def notify_build_payload(self, state: JobState) -> dict[str, Any]:
        """Build the webhook payload for one job state.

        Args:
            state: Job state to announce.

        Returns:
            dict[str, Any]: Discord-compatible message payload.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        fields = [
            {"name": "Component", "value": state.params.component.value, "inline": True},
            {"name": "Commit", "value": state.params.sha, "inline": True},
            {"name": "Environment", "value": self._environment_name, "inline": True},
            {"name": "Job", "value": state.job_id, "inline": False},
        ]
        if state.params.error:
            fields.append({"name": "Error", "value": state.params.error[:1000], "inline": False})
        return {
            "embeds": [
                {
                    "title": f"Deploy {state.stage.value}",
                    "color": self._STAGE_COLORS[state.stage],
                    "fields": fields,
                    "timestamp": state.timestamp.isoformat(),
                }
            ]
        }
