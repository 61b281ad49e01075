"""Readiness and phase summaries of pods."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

POD_RUNNING = "Running"
POD_PENDING = "Pending"


@dataclass(frozen=True)
class PodStatus:
    """Phase and reason of one pod."""

    phase: str
    reason: str


def pod_is_ready(status: dict[str, Any]) -> bool:
    """True when container statuses are reported and all containers are ready."""
    container_statuses = status.get("containerStatuses")
    if container_statuses is None:
        return False
    return all(cs.get("ready", False) for cs in container_statuses)


def pod_statuses(pods: Iterable[dict[str, Any]]) -> dict[str, PodStatus]:
    """Map each pod's name to its phase and reason."""
    result = {}
    for pod in pods:
        status = pod.get("status") or {}
        name = (pod.get("metadata") or {}).get("name", "")
        result[name] = PodStatus(phase=status.get("phase", ""), reason=status.get("reason", ""))
    return result


def count(pods: Iterable[dict[str, Any]]) -> tuple[list[str], list[str], list[str]]:
    """Split pod names into (creating, ready, failed)."""
    creating: list[str] = []
    ready: list[str] = []
    failed: list[str] = []
    for pod in pods:
        status = pod.get("status") or {}
        name = (pod.get("metadata") or {}).get("name", "")
        if pod_is_ready(status):
            ready.append(name)
        elif status.get("phase") in (POD_RUNNING, POD_PENDING):
            creating.append(name)
        else:
            failed.append(name)
    return creating, ready, failed