"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from typing import Protocol

from rollout_manager.domain import JobState


class OrchestrationClientPort(Protocol):
    """Port definition for mutating and observing units on the orchestration platform."""

    def orchestration_update_service(self, cluster: str, service: str, image: str, transient: bool) -> str:
        """Register a new revision with the given image and point the service at it.

        Args:
            cluster: Cluster name.
            service: Service name.
            image: Image reference in `repository:tag` form.
            transient: Whether old instances must be left running.

        Returns:
            str: Identifier of the newly registered revision.

        Raises:
            OrchestrationClientError: Raised when any platform call fails.
        """

    def orchestration_update_task(self, cluster: str, family: str, image: str, transient: bool) -> str:
        """Clone the latest revision of a task family with the given image.

        Args:
            cluster: Cluster name.
            family: Task definition family.
            image: Image reference in `repository:tag` form.
            transient: Whether running instances must be left running.

        Returns:
            str: Identifier of the newly registered revision.

        Raises:
            OrchestrationClientError: Raised when any platform call fails.
        """

    def orchestration_check_service(self, cluster: str, service: str, revision_id: str) -> bool:
        """Return whether the service runs at least one instance of the revision.

        Args:
            cluster: Cluster name.
            service: Service name.
            revision_id: Expected revision identifier.

        Returns:
            bool: True when a deployment of the revision has running instances.

        Raises:
            OrchestrationClientError: Raised when any platform call fails.
        """

    def orchestration_check_task(self, cluster: str, family: str, task_id: str, running: bool) -> bool:
        """Return whether tasks matching the identifier are in the requested lifecycle state.

        Args:
            cluster: Cluster name.
            family: Task definition family.
            task_id: Task or revision identifier.
            running: True to check for running, False to check for stopped.

        Returns:
            bool: True when matching tasks exist and all are in the requested state.

        Raises:
            OrchestrationClientError: Raised when any platform call fails.
        """

    def orchestration_launch_task(
        self,
        cluster: str,
        family: str,
        container: str,
        vpc_config_parameter: str,
        overrides: dict[str, str] | None = None,
    ) -> str:
        """Launch one task using network configuration stored in a parameter.

        Args:
            cluster: Cluster name.
            family: Task definition family or revision.
            container: Container receiving environment overrides.
            vpc_config_parameter: Parameter name holding the network configuration JSON.
            overrides: Optional container environment overrides.

        Returns:
            str: Identifier of the launched task.

        Raises:
            OrchestrationClientError: Raised when any platform call fails.
        """

    def orchestration_launch_service_task(
        self,
        cluster: str,
        service: str,
        family: str,
        container: str,
        overrides: dict[str, str] | None = None,
    ) -> str:
        """Launch one task reusing the network configuration of a service.

        Args:
            cluster: Cluster name.
            service: Service whose network configuration is reused.
            family: Task definition family or revision.
            container: Container receiving environment overrides.
            overrides: Optional container environment overrides.

        Returns:
            str: Identifier of the launched task.

        Raises:
            OrchestrationClientError: Raised when any platform call fails.
        """


class JobNotifierPort(Protocol):
    """Port definition for fire-and-forget job notifications."""

    def notify_job(self, state: JobState) -> None:
        """Deliver one notification describing the job state.

        Args:
            state: Job state to announce.

        Returns:
            None: Delivery failures are not reported to the caller.

        Raises:
            RuntimeError: Implementations must not raise delivery errors.
        """
