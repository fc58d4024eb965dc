"""Regression tests for component topology resolution."""

from __future__ import annotations

import pytest

from rollout_manager.domain import DeployComponent, DeployUnitKind, domain_iter_layout_units
from rollout_manager.topology import EnvironmentConfig, TopologyResolutionError, TopologyResolver


def test_topology_cas_dev_layout_has_two_services_and_one_transient_runner() -> None:
    """Resolve the CAS layout for dev into one cluster with api, scheduler and anchor units.

    Returns:
        None: Assertions validate layout shape.

    Raises:
        AssertionError: Raised when the layout differs from expectation.
    """

    resolver = TopologyResolver(EnvironmentConfig(environment_name="dev"))

    layout = resolver.topology_resolve_layout(DeployComponent.CAS)

    assert list(layout.clusters) == ["ceramic-dev-cas"]
    cluster = layout.clusters["ceramic-dev-cas"]
    assert sorted(cluster.service_tasks.tasks) == ["ceramic-dev-cas-api", "ceramic-dev-cas-scheduler"]
    assert list(cluster.tasks.tasks) == ["ceramic-dev-cas-anchor"]
    anchor = cluster.tasks.tasks["ceramic-dev-cas-anchor"]
    assert anchor.temp is True
    assert anchor.repo == "ceramic-dev-cas-runner"
    assert layout.repo == "ceramic-dev-cas"
    assert all(not unit.task.id for unit in domain_iter_layout_units(layout))


def test_topology_ceramic_layout_spans_private_public_and_cas_clusters() -> None:
    """Place ceramic node and gateway services on the three environment clusters."""

    resolver = TopologyResolver(EnvironmentConfig(environment_name="qa"))

    layout = resolver.topology_resolve_layout("ceramic")

    assert set(layout.clusters) == {"ceramic-qa", "ceramic-qa-ex", "ceramic-qa-cas"}
    assert set(layout.clusters["ceramic-qa-ex"].service_tasks.tasks) == {
        "ceramic-qa-ex-node",
        "ceramic-qa-ex-gateway",
    }
    assert layout.repo == "ceramic-qa"
    assert all(unit.kind is DeployUnitKind.SERVICE for unit in domain_iter_layout_units(layout))


def test_topology_prod_adds_regional_units_to_public_cluster() -> None:
    """Add the extra regional units only in prod."""

    prod_layout = TopologyResolver(EnvironmentConfig(environment_name="prod")).topology_resolve_layout("ipfs")
    dev_layout = TopologyResolver(EnvironmentConfig(environment_name="dev")).topology_resolve_layout("ipfs")

    assert set(prod_layout.clusters["ceramic-prod-ex"].service_tasks.tasks) == {
        "ceramic-prod-ex-ipfs-nd",
        "ceramic-prod-ex-ipfs-gw",
        "ceramic-elp-1-1-ipfs-nd",
        "ceramic-elp-1-2-ipfs-nd",
    }
    assert set(dev_layout.clusters["ceramic-dev-ex"].service_tasks.tasks) == {
        "ceramic-dev-ex-ipfs-nd",
        "ceramic-dev-ex-ipfs-gw",
    }
    assert prod_layout.repo == "go-ipfs-prod"


def test_topology_returns_independent_layout_per_call() -> None:
    """Never share task entries between two resolved layouts."""

    resolver = TopologyResolver(EnvironmentConfig(environment_name="dev"))

    first_layout = resolver.topology_resolve_layout("cas")
    second_layout = resolver.topology_resolve_layout("cas")
    first_layout.clusters["ceramic-dev-cas"].service_tasks.tasks["ceramic-dev-cas-api"].id = "rev-1"

    assert second_layout.clusters["ceramic-dev-cas"].service_tasks.tasks["ceramic-dev-cas-api"].id == ""


def test_topology_unknown_component_raises_resolution_error() -> None:
    """Reject components without a topology."""

    resolver = TopologyResolver(EnvironmentConfig(environment_name="dev"))

    with pytest.raises(TopologyResolutionError, match="unexpected component"):
        resolver.topology_resolve_layout("unknown")


def test_topology_resolver_rejects_blank_environment() -> None:
    """Reject blank environment configuration."""

    with pytest.raises(ValueError, match="environment_name"):
        TopologyResolver(EnvironmentConfig(environment_name=" "))
