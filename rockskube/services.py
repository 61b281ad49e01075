"""Names and manifests of component services."""

from __future__ import annotations

import copy
from typing import Any

from rockskube.components import ComponentKind, ComponentSpec

_SEARCH_KINDS = (ComponentKind.FE, ComponentKind.BE, ComponentKind.CN)


def make_search_service(
    service_name: str,
    external_service: dict[str, Any],
    ports: list[dict[str, Any]],
    default_labels: dict[str, str],
) -> dict[str, Any]:
    """Headless service publishing not-ready addresses, derived from the external one."""
    metadata = copy.deepcopy(external_service.get("metadata") or {})
    # Annotations of the external service may only suit a LoadBalancer, and its
    # labels could widen what selects this service, so neither is carried over.
    metadata.pop("annotations", None)
    metadata["name"] = service_name
    metadata["labels"] = default_labels

    spec: dict[str, Any] = {
        "clusterIP": "None",
        "ports": ports,
        "publishNotReadyAddresses": True,
    }
    selector = (external_service.get("spec") or {}).get("selector")
    if selector is not None:
        spec["selector"] = selector
    return {"metadata": metadata, "spec": spec}


def search_service_name(cluster_name: str, spec: ComponentSpec | ComponentKind) -> str:
    """Name of the headless search service; empty for kinds that have none."""
    kind = spec.kind
    if kind in _SEARCH_KINDS:
        return f"{cluster_name}-{kind.value}-search"
    return ""


def external_service_name(cluster_name: str, spec: ComponentSpec | ComponentKind) -> str:
    """Name of the external service of a component."""
    return f"{cluster_name}-{spec.kind.value}-service"