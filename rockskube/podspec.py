"""Pod templates, environment and paths of component containers."""

from __future__ import annotations

import os
from typing import Any, Iterable

from rockskube.components import ComponentKind, ComponentSpec, selector

HEALTH_API_PATH = "/api/health"
COMPONENT_NAME = "COMPONENT_NAME"
FE_SERVICE_NAME = "FE_SERVICE_NAME"
UNSUPPORTED_ENVS_VARIABLE = "KUBE_STARROCKS_UNSUPPORTED_ENVS"

_DEFAULT_ROOT = "/opt/starrocks"
_STARROCKS_KINDS = (ComponentKind.FE, ComponentKind.BE, ComponentKind.CN)
_STORAGE_SUBDIR = {ComponentKind.FE: "fe/meta", ComponentKind.BE: "be/storage", ComponentKind.CN: "cn/storage"}


def _field_env(name: str, field_path: str) -> dict[str, Any]:
    return {"name": name, "valueFrom": {"fieldRef": {"fieldPath": field_path}}}


def _prune(mapping: dict[str, Any]) -> dict[str, Any]:
    """Drop unset fields: None and empty strings or collections."""
    return {k: v for k, v in mapping.items() if v is not None and v != "" and v != [] and v != {}}


def life_cycle(life_cycle: dict[str, Any] | None, pre_stop_script_path: str) -> dict[str, Any]:
    """Lifecycle hooks, with the pre-stop script as the default preStop."""
    default_pre_stop = {"exec": {"command": [pre_stop_script_path]}}
    if life_cycle is None:
        return {"preStop": default_pre_stop}
    result: dict[str, Any] = {"preStop": life_cycle.get("preStop") or default_pre_stop}
    if life_cycle.get("postStart") is not None:
        result["postStart"] = life_cycle["postStart"]
    return result


def pod_labels(cluster_name: str, spec: ComponentSpec | ComponentKind) -> dict[str, str]:
    """Selector labels of a component merged with its user pod labels."""
    labels = selector(cluster_name, spec)
    if spec.kind in _STARROCKS_KINDS:
        labels.update(getattr(spec, "pod_labels", None) or {})
    return labels


def envs(
    spec: ComponentSpec | ComponentKind,
    query_port: int,
    fe_external_service_name: str,
    namespace: str,
    env_vars: Iterable[dict[str, Any]] | None,
) -> list[dict[str, Any]]:
    """User environment variables followed by the defaults they do not define.

    Names listed, comma separated, in ``KUBE_STARROCKS_UNSUPPORTED_ENVS`` are
    never added.
    """
    result = list(env_vars or [])
    keys = {env["name"] for env in result}
    unsupported_value = os.environ.get(UNSUPPORTED_ENVS_VARIABLE, "")
    unsupported = set(unsupported_value.split(",")) if unsupported_value else set()

    defaults = [
        _field_env("POD_NAME", "metadata.name"),
        _field_env("POD_IP", "status.podIP"),
        _field_env("HOST_IP", "status.hostIP"),
        _field_env("POD_NAMESPACE", "metadata.namespace"),
        {"name": "HOST_TYPE", "value": "FQDN"},
    ]
    kind = spec.kind
    if kind is ComponentKind.FE:
        defaults += [
            {"name": COMPONENT_NAME, "value": kind.value},
            {"name": FE_SERVICE_NAME, "value": f"{fe_external_service_name}.{namespace}"},
        ]
    elif kind in (ComponentKind.BE, ComponentKind.CN):
        defaults += [
            {"name": COMPONENT_NAME, "value": kind.value},
            {"name": FE_SERVICE_NAME, "value": fe_external_service_name},
            {"name": "FE_QUERY_PORT", "value": str(query_port)},
        ]

    for env in defaults:
        if env["name"] not in keys and env["name"] not in unsupported:
            keys.add(env["name"])
            result.append(env)
    return result


def pod_spec(
    spec: ComponentSpec, container: dict[str, Any], volumes: list[dict[str, Any]] | None
) -> dict[str, Any]:
    """Pod spec running the main container, its sidecars and init containers."""
    return _prune(
        {
            "initContainers": spec.init_containers,
            "containers": [container, *spec.sidecars],
            "volumes": volumes,
            "serviceAccountName": spec.service_account,
            "terminationGracePeriodSeconds": spec.termination_grace_period_seconds,
            "affinity": spec.affinity,
            "topologySpreadConstraints": spec.topology_spread_constraints,
            "tolerations": spec.tolerations,
            "imagePullSecrets": spec.image_pull_secrets,
            "nodeSelector": spec.node_selector,
            "hostAliases": spec.host_aliases,
            "schedulerName": spec.scheduler_name,
            "automountServiceAccountToken": False,
            "shareProcessNamespace": spec.share_process_namespace,
        }
    )


def pod_annotations(spec: ComponentSpec) -> dict[str, str]:
    """A copy of the user's pod annotations."""
    return dict(spec.annotations)


def pod_security_context(spec: ComponentSpec) -> dict[str, Any]:
    """Pod security context: fsGroup from the run-as group, chown only on mismatch."""
    return _prune(
        {
            "fsGroupChangePolicy": "OnRootMismatch",
            "fsGroup": spec.run_as_group,
            "sysctls": spec.sysctls,
        }
    )


def container_security_context(spec: ComponentSpec) -> dict[str, Any]:
    """Container security context; non-root is asserted for a non-zero user."""
    run_as_non_root = True if spec.run_as_user is not None and spec.run_as_user != 0 else None
    return _prune(
        {
            "runAsUser": spec.run_as_user,
            "runAsGroup": spec.run_as_group,
            "runAsNonRoot": run_as_non_root,
            "allowPrivilegeEscalation": False,
            "readOnlyRootFilesystem": spec.read_only_root_filesystem,
            "capabilities": spec.capabilities,
        }
    )


def _root(spec: ComponentSpec | ComponentKind) -> str:
    return get_starrocks_root_path(getattr(spec, "env_vars", None))


def _default_entrypoint_script(spec: ComponentSpec | ComponentKind) -> str:
    kind = spec.kind
    if kind not in _STARROCKS_KINDS:
        return ""
    return f"{_root(spec)}/{kind.value}_entrypoint.sh"


def get_storage_dir(spec: ComponentSpec | ComponentKind) -> str:
    """Data directory of a component; empty for the FE proxy."""
    subdir = _STORAGE_SUBDIR.get(spec.kind)
    return f"{_root(spec)}/{subdir}" if subdir else ""


def get_log_dir(spec: ComponentSpec | ComponentKind) -> str:
    """Log directory of a component; empty for the FE proxy."""
    kind = spec.kind
    return f"{_root(spec)}/{kind.value}/log" if kind in _STARROCKS_KINDS else ""


def get_config_dir(spec: ComponentSpec | ComponentKind) -> str:
    """Configuration directory of a component; empty for the FE proxy."""
    kind = spec.kind
    return f"{_root(spec)}/{kind.value}/conf" if kind in _STARROCKS_KINDS else ""


def get_pre_stop_script_path(spec: ComponentSpec | ComponentKind) -> str:
    """Pre-stop script of a component; empty for the FE proxy."""
    kind = spec.kind
    return f"{_root(spec)}/{kind.value}_prestop.sh" if kind in _STARROCKS_KINDS else ""


def default_root_path() -> str:
    """StarRocks installation root used when none is configured."""
    return _DEFAULT_ROOT


def get_starrocks_root_path(env_vars: Iterable[dict[str, Any]] | None) -> str:
    """Value of ``STARROCKS_ROOT`` (name compared case-insensitively), else the default."""
    for env in env_vars or []:
        if env.get("name", "").lower() == "starrocks_root":
            return env.get("value", "")
    return _DEFAULT_ROOT


def container_command(spec: ComponentSpec) -> list[str]:
    """The user command, or the component's entrypoint script."""
    if spec.command is not None:
        return spec.command
    return [_default_entrypoint_script(spec)]


def container_args(spec: ComponentSpec) -> list[str]:
    """The user arguments, or the FE service name."""
    if spec.args is not None:
        return spec.args
    return ["$(FE_SERVICE_NAME)"]