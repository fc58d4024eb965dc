"""Cluster rollout driver: image updates and convergence checks over a layout."""

from __future__ import annotations

import logging

from rollout_manager.adapters import OrchestrationClientPort
from rollout_manager.domain import DeployUnit, DeployUnitKind, Layout, domain_iter_layout_units

logger = logging.getLogger(__name__)


class ClusterRolloutDriver:
    """Walks a layout and drives each deployment unit through the orchestration client.

    Both phases are safe to repeat on the same layout. Updating writes the
    returned revision identifier into `Task.id`; checking reads it back.
    """

    def __init__(self, orchestration_client: OrchestrationClientPort):
        """Initialize rollout driver.

        Args:
            orchestration_client: Client issuing platform calls.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the client is missing.
        """

        if orchestration_client is None:
            raise ValueError("orchestration_client must not be None")
        self._orchestration_client = orchestration_client

    def rollout_update_layout(self, layout: Layout, image_tag: str) -> None:
        """Point every unit of the layout at a new revision using the image tag.

        The first failing unit aborts the phase. Ids already written for
        earlier units are kept; updating them again on retry is safe.

        Args:
            layout: Layout owned by the calling job.
            image_tag: Image tag, usually the target commit hash.

        Returns:
            None: Revision identifiers are written into the layout.

        Raises:
            ValueError: Raised when the image tag is blank or a unit kind is unknown.
            OrchestrationClientError: Raised when a platform call fails.
        """

        normalized_image_tag = image_tag.strip()
        if not normalized_image_tag:
            raise ValueError("image_tag must not be blank")

        for unit in domain_iter_layout_units(layout):
            image = f"{unit.repository}:{normalized_image_tag}"
            unit.task.id = self._rollout_update_unit(unit=unit, image=image)
            logger.info(
                "rollout update: cluster=%s unit=%s kind=%s image=%s revision=%s",
                unit.cluster_name,
                unit.unit_name,
                unit.kind.value,
                image,
                unit.task.id,
            )

    def rollout_check_layout(self, layout: Layout) -> bool:
        """Return whether every checked unit of the layout has converged.

        Service units must run their stored revision. Plain task units are
        checked only when permanent; transient units are skipped.

        Args:
            layout: Layout previously passed to `rollout_update_layout`.

        Returns:
            bool: True when all checked units converged, or there is nothing to check.

        Raises:
            ValueError: Raised when a unit kind is unknown.
            OrchestrationClientError: Raised when a platform call fails.
        """

        for unit in domain_iter_layout_units(layout):
            if not self._rollout_check_unit(unit):
                logger.info(
                    "rollout check: not converged: cluster=%s unit=%s kind=%s revision=%s",
                    unit.cluster_name,
                    unit.unit_name,
                    unit.kind.value,
                    unit.task.id,
                )
                return False
        return True

    def _rollout_update_unit(self, unit: DeployUnit, image: str) -> str:
        if unit.kind is DeployUnitKind.SERVICE:
            return self._orchestration_client.orchestration_update_service(
                cluster=unit.cluster_name,
                service=unit.unit_name,
                image=image,
                transient=unit.task.temp,
            )
        if unit.kind is DeployUnitKind.TASK:
            return self._orchestration_client.orchestration_update_task(
                cluster=unit.cluster_name,
                family=unit.unit_name,
                image=image,
                transient=unit.task.temp,
            )
        raise ValueError(f"unsupported deploy unit kind={unit.kind}")

    def _rollout_check_unit(self, unit: DeployUnit) -> bool:
        if unit.kind is DeployUnitKind.SERVICE:
            if not unit.task.id:
                return False
            return self._orchestration_client.orchestration_check_service(
                cluster=unit.cluster_name,
                service=unit.unit_name,
                revision_id=unit.task.id,
            )
        if unit.kind is DeployUnitKind.TASK:
            # Transient tasks never take part in convergence.
            if unit.task.temp:
                return True
            if not unit.task.id:
                return False
            return self._orchestration_client.orchestration_check_task(
                cluster=unit.cluster_name,
                family=unit.unit_name,
                task_id=unit.task.id,
                running=True,
            )
        raise ValueError(f"unsupported deploy unit kind={unit.kind}")
