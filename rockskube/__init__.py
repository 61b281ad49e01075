"""Kubernetes manifests and in-memory reconcile helpers for StarRocks clusters."""

__version__ = "0.1.0"

__all__ = [
    "apply",
    "components",
    "configs",
    "mounts",
    "objects",
    "podspec",
    "podstatus",
    "probes",
    "rollout",
    "services",
    "workloads",
]