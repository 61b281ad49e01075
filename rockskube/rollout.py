"""Rollout progress of deployments and statefulsets."""

from __future__ import annotations

from typing import Any

TIMED_OUT_REASON = "ProgressDeadlineExceeded"
DEPLOYMENT_PROGRESSING = "Progressing"
ROLLING_UPDATE = "RollingUpdate"


class RolloutError(Exception):
    """The rollout cannot be reported on or has failed."""


def deployment_status(deployment: dict[str, Any]) -> tuple[str, bool]:
    """Describe a deployment's rollout and tell whether it is done."""
    meta = deployment.get("metadata") or {}
    spec = deployment.get("spec") or {}
    status = deployment.get("status") or {}
    name = meta.get("name", "")

    if meta.get("generation", 0) > status.get("observedGeneration", 0):
        return "Waiting for deployment spec update to be observed", False

    cond = get_deployment_condition(status, DEPLOYMENT_PROGRESSING)
    if cond is not None and cond.get("reason") == TIMED_OUT_REASON:
        raise RolloutError(f'deployment "{name}" exceeded its progress deadline')

    replicas = spec.get("replicas")
    updated = status.get("updatedReplicas", 0)
    total = status.get("replicas", 0)
    available = status.get("availableReplicas", 0)
    if replicas is not None and updated < replicas:
        return (
            f'Waiting for deployment "{name}" rollout to finish: '
            f"{updated} out of {replicas} new replicas have been updated",
            False,
        )
    if total > updated:
        return (
            f'Waiting for deployment "{name}" rollout to finish: '
            f"{total - updated} old replicas are pending termination",
            False,
        )
    if available < updated:
        return (
            f'Waiting for deployment "{name}" rollout to finish: '
            f"{available} of {updated} updated replicas are available",
            False,
        )
    return f'deployment "{name}" successfully rolled out', True


def get_deployment_condition(status: dict[str, Any], cond_type: str) -> dict[str, Any] | None:
    """Copy of the first condition of the given type, or ``None``."""
    for condition in status.get("conditions") or []:
        if condition.get("type") == cond_type:
            return dict(condition)
    return None


def statefulset_status(sts: dict[str, Any]) -> tuple[str, bool]:
    """Describe a statefulset's rollout and tell whether it is done."""
    meta = sts.get("metadata") or {}
    spec = sts.get("spec") or {}
    status = sts.get("status") or {}
    strategy = spec.get("updateStrategy") or {}

    if strategy.get("type") != ROLLING_UPDATE:
        raise RolloutError(f"rollout status is only available for {ROLLING_UPDATE} strategy type")

    observed = status.get("observedGeneration", 0)
    if observed == 0 or meta.get("generation", 0) > observed:
        return "Waiting for statefulset spec update to be observed", False

    replicas = spec.get("replicas")
    ready = status.get("readyReplicas", 0)
    if replicas is not None and ready < replicas:
        return f"Waiting for {replicas - ready} pods to be ready", False

    updated = status.get("updatedReplicas", 0)
    rolling = strategy.get("rollingUpdate")
    if rolling is not None:
        partition = rolling.get("partition")
        if replicas is not None and partition is not None and updated < replicas - partition:
            return (
                "Waiting for partitioned roll out to finish: "
                f"{updated} out of {replicas - partition} new pods have been updated",
                False,
            )
        return f"partitioned roll out complete: {updated} new pods have been updated", True

    update_revision = status.get("updateRevision", "")
    current_revision = status.get("currentRevision", "")
    if update_revision != current_revision:
        return (
            "waiting for statefulset rolling update to complete "
            f"{updated} pods at revision {update_revision}",
            False,
        )
    return (
        "statefulset rolling update complete "
        f"{status.get('currentReplicas', 0)} pods at revision {current_revision}",
        True,
    )