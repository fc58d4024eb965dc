"""Static topology table mapping components to their clusters and units."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from rollout_manager.domain import Cluster, DeployComponent, Layout, Task, TaskSet

PROD_ENVIRONMENT_NAME: Final[str] = "prod"

SERVICE_SUFFIX_CERAMIC_NODE: Final[str] = "node"
SERVICE_SUFFIX_CERAMIC_GATEWAY: Final[str] = "gateway"
SERVICE_SUFFIX_ELP_1_1_CERAMIC_NODE: Final[str] = "elp-1-1-node"
SERVICE_SUFFIX_ELP_1_2_CERAMIC_NODE: Final[str] = "elp-1-2-node"
SERVICE_SUFFIX_IPFS_NODE: Final[str] = "ipfs-nd"
SERVICE_SUFFIX_IPFS_GATEWAY: Final[str] = "ipfs-gw"
SERVICE_SUFFIX_ELP_1_1_IPFS_NODE: Final[str] = "elp-1-1-ipfs-nd"
SERVICE_SUFFIX_ELP_1_2_IPFS_NODE: Final[str] = "elp-1-2-ipfs-nd"
SERVICE_SUFFIX_CAS_API: Final[str] = "api"
SERVICE_SUFFIX_CAS_SCHEDULER: Final[str] = "scheduler"
SERVICE_SUFFIX_CAS_RUNNER: Final[str] = "anchor"


class TopologyResolutionError(ValueError):
    """Raised when a component has no known topology."""


@dataclass(frozen=True)
class EnvironmentConfig:
    """Environment inputs for topology naming.

    Attributes:
        environment_name: Deployment environment (`dev`, `qa`, `tnet`, `prod`).
        cluster_prefix: Global prefix of cluster and unit names.
    """

    environment_name: str
    cluster_prefix: str = "ceramic"


class TopologyResolver:
    """Builds a fresh layout for a component from environment naming conventions."""

    def __init__(self, config: EnvironmentConfig):
        """Initialize topology resolver.

        Args:
            config: Environment naming configuration.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are blank.
        """

        if not config.environment_name.strip():
            raise ValueError("config.environment_name must not be blank")
        if not config.cluster_prefix.strip():
            raise ValueError("config.cluster_prefix must not be blank")
        self._config = config

    def topology_resolve_layout(self, component: DeployComponent | str) -> Layout:
        """Return a new layout for the component.

        Args:
            component: Component identifier.

        Returns:
            Layout: Layout with empty task ids, owned by the caller.

        Raises:
            TopologyResolutionError: Raised when the component is unknown.
        """

        try:
            resolved_component = DeployComponent(component)
        except ValueError as error:
            raise TopologyResolutionError(f"unexpected component: {component}") from error

        if resolved_component is DeployComponent.CERAMIC:
            return self._topology_build_node_layout(
                node_suffix=SERVICE_SUFFIX_CERAMIC_NODE,
                gateway_suffix=SERVICE_SUFFIX_CERAMIC_GATEWAY,
                prod_suffixes=(SERVICE_SUFFIX_ELP_1_1_CERAMIC_NODE, SERVICE_SUFFIX_ELP_1_2_CERAMIC_NODE),
                repo=f"ceramic-{self._config.environment_name}",
            )
        if resolved_component is DeployComponent.IPFS:
            return self._topology_build_node_layout(
                node_suffix=SERVICE_SUFFIX_IPFS_NODE,
                gateway_suffix=SERVICE_SUFFIX_IPFS_GATEWAY,
                prod_suffixes=(SERVICE_SUFFIX_ELP_1_1_IPFS_NODE, SERVICE_SUFFIX_ELP_1_2_IPFS_NODE),
                repo=f"go-ipfs-{self._config.environment_name}",
            )
        if resolved_component is DeployComponent.CAS:
            return self._topology_build_cas_layout()
        raise TopologyResolutionError(f"unexpected component: {component}")

    def topology_cluster_names(self) -> tuple[str, str, str]:
        """Return private, public and CAS cluster names for the environment."""

        private_cluster = f"{self._config.cluster_prefix}-{self._config.environment_name}"
        return private_cluster, f"{private_cluster}-ex", f"{private_cluster}-cas"

    def _topology_build_node_layout(
        self,
        node_suffix: str,
        gateway_suffix: str,
        prod_suffixes: tuple[str, ...],
        repo: str,
    ) -> Layout:
        private_cluster, public_cluster, cas_cluster = self.topology_cluster_names()
        public_services = {
            f"{public_cluster}-{node_suffix}": Task(),
            f"{public_cluster}-{gateway_suffix}": Task(),
        }
        if self._config.environment_name == PROD_ENVIRONMENT_NAME:
            for prod_suffix in prod_suffixes:
                public_services[f"{self._config.cluster_prefix}-{prod_suffix}"] = Task()

        return Layout(
            clusters={
                private_cluster: Cluster(service_tasks=TaskSet(tasks={f"{private_cluster}-{node_suffix}": Task()})),
                public_cluster: Cluster(service_tasks=TaskSet(tasks=public_services)),
                cas_cluster: Cluster(service_tasks=TaskSet(tasks={f"{cas_cluster}-{node_suffix}": Task()})),
            },
            repo=repo,
        )

    def _topology_build_cas_layout(self) -> Layout:
        _, _, cas_cluster = self.topology_cluster_names()
        environment_name = self._config.environment_name
        return Layout(
            clusters={
                cas_cluster: Cluster(
                    service_tasks=TaskSet(
                        tasks={
                            f"{cas_cluster}-{SERVICE_SUFFIX_CAS_API}": Task(),
                            f"{cas_cluster}-{SERVICE_SUFFIX_CAS_SCHEDULER}": Task(),
                        }
                    ),
                    tasks=TaskSet(
                        tasks={
                            f"{cas_cluster}-{SERVICE_SUFFIX_CAS_RUNNER}": Task(
                                repo=f"ceramic-{environment_name}-cas-runner",
                                temp=True,
                            )
                        }
                    ),
                )
            },
            repo=f"ceramic-{environment_name}-cas",
        )
