"""Component kinds and the names, labels and selectors derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

OWNER_REFERENCE_LABEL = "app.starrocks.ownerreference/name"
COMPONENT_LABEL_KEY = "app.kubernetes.io/component"


class ComponentKind(str, Enum):
    """The StarRocks components the operator deploys."""

    FE = "fe"
    BE = "be"
    CN = "cn"
    FE_PROXY = "fe-proxy"

    @property
    def kind(self) -> "ComponentKind":
        """Let a bare kind stand wherever a spec is accepted."""
        return self


def _default_update_strategy() -> dict[str, Any]:
    return {"type": "RollingUpdate", "rollingUpdate": {"partition": 0}}


@dataclass
class ComponentSpec:
    """User-facing settings of one component of a cluster."""

    kind: ComponentKind
    replicas: int | None = None
    pod_labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    service_account: str = ""
    storage_volumes: list[Any] = field(default_factory=list)
    env_vars: list[dict[str, Any]] = field(default_factory=list)
    command: list[str] | None = None
    args: list[str] | None = None
    sidecars: list[dict[str, Any]] = field(default_factory=list)
    init_containers: list[dict[str, Any]] = field(default_factory=list)
    termination_grace_period_seconds: int = 120
    affinity: dict[str, Any] | None = None
    topology_spread_constraints: list[dict[str, Any]] = field(default_factory=list)
    tolerations: list[dict[str, Any]] = field(default_factory=list)
    image_pull_secrets: list[dict[str, Any]] = field(default_factory=list)
    node_selector: dict[str, str] = field(default_factory=dict)
    host_aliases: list[dict[str, Any]] = field(default_factory=list)
    scheduler_name: str = ""
    share_process_namespace: bool | None = None
    run_as_user: int | None = None
    run_as_group: int | None = None
    sysctls: list[dict[str, Any]] = field(default_factory=list)
    read_only_root_filesystem: bool = False
    capabilities: dict[str, Any] | None = None
    update_strategy: dict[str, Any] = field(default_factory=_default_update_strategy)


def component_name(cluster_name: str, spec: ComponentSpec | ComponentKind) -> str:
    """Name of the workload of a component, e.g. ``mycluster-fe``."""
    return f"{cluster_name}-{spec.kind.value}"


def component_labels(owner_reference: str, spec: ComponentSpec | ComponentKind) -> dict[str, str]:
    """Labels that mark an object as belonging to a component."""
    return {
        OWNER_REFERENCE_LABEL: owner_reference,
        COMPONENT_LABEL_KEY: spec.kind.value,
    }


def selector(cluster_name: str, spec: ComponentSpec | ComponentKind) -> dict[str, str]:
    """Label selector matching the pods of a component."""
    return component_labels(component_name(cluster_name, spec), spec)


def default_annotations() -> dict[str, str]:
    """Annotations put on every generated workload."""
    return {}