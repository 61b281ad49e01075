"""Startup, liveness and readiness probes for component containers."""

from __future__ import annotations

from typing import Any


def startup_probe(failure_seconds: int | None, port: int, path: str) -> dict[str, Any] | None:
    """Startup probe; ``None`` when it is disabled by ``failure_seconds == 0``."""
    return complete_probe(failure_seconds, 60, 5, http_get_handler(port, path))


def liveness_probe(failure_seconds: int | None, port: int, path: str) -> dict[str, Any] | None:
    """Liveness probe; ``None`` when it is disabled by ``failure_seconds == 0``."""
    return complete_probe(failure_seconds, 3, 5, http_get_handler(port, path))


def readiness_probe(failure_seconds: int | None, port: int, path: str) -> dict[str, Any] | None:
    """Readiness probe; ``None`` when it is disabled by ``failure_seconds == 0``."""
    return complete_probe(failure_seconds, 3, 5, http_get_handler(port, path))


def complete_probe(
    failure_seconds: int | None,
    default_failure_threshold: int,
    default_period_seconds: int,
    handler: dict[str, Any],
) -> dict[str, Any] | None:
    """Combine a handler with thresholds derived from the allowed failure time."""
    if failure_seconds is None:
        threshold = default_failure_threshold
    elif failure_seconds == 0:
        return None
    else:
        threshold = (failure_seconds + default_period_seconds - 1) // default_period_seconds
    return {
        **handler,
        "failureThreshold": threshold,
        "periodSeconds": default_period_seconds,
    }


def http_get_handler(port: int, path: str) -> dict[str, Any]:
    """Probe handler issuing an HTTP GET on ``path`` at ``port``."""
    return {"httpGet": {"path": path, "port": port}}