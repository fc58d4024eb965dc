"""Topology layer package for component-to-layout resolution."""

from .resolver import EnvironmentConfig, TopologyResolutionError, TopologyResolver

__all__ = ["EnvironmentConfig", "TopologyResolutionError", "TopologyResolver"]
