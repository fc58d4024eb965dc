"""Rollout layer package for cluster update and convergence checks."""

from .driver import ClusterRolloutDriver

__all__ = ["ClusterRolloutDriver"]
