"""Volumes and volume mounts for component pods."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable

from rockskube.components import ComponentSpec

EMPTY_DIR = "emptyDir"
HOST_PATH = "hostPath"

_EXECUTION_PERMISSION = 0o755
_HASH_SUFFIX_LEN = 4

Volumes = list[dict[str, Any]]
VolumeMounts = list[dict[str, Any]]


@dataclass
class StorageVolume:
    """A storage volume requested for a component."""

    name: str
    mount_path: str = ""
    storage_class_name: str | None = None
    storage_size: str = ""
    sub_path: str = ""
    host_path: dict[str, Any] | None = None


@dataclass(frozen=True)
class MountInfo:
    """A reference to a configmap or secret and where it is mounted."""

    name: str
    mount_path: str = ""
    sub_path: str = ""


@dataclass(frozen=True)
class ConfigMapInfo:
    """A configmap holding the component configuration, and its key."""

    config_map_name: str = ""
    resolve_key: str = ""


def special_storage_class_name(sv: StorageVolume) -> str:
    """``emptyDir`` or ``hostPath`` when the volume is one of those, else ``""``."""
    if sv.storage_class_name is not None:
        lowered = sv.storage_class_name.lower()
        if lowered == EMPTY_DIR.lower():
            return EMPTY_DIR
        if lowered == HOST_PATH.lower():
            return HOST_PATH
        return ""
    if sv.host_path is not None:
        return HOST_PATH
    return ""


def _volume_mount(name: str, mount_path: str, sub_path: str = "") -> dict[str, Any]:
    mount: dict[str, Any] = {"name": name, "mountPath": mount_path}
    if sub_path:
        mount["subPath"] = sub_path
    return mount


def mount_storage_volumes(spec: ComponentSpec) -> tuple[Volumes, VolumeMounts]:
    """Volumes and mounts for the storage volumes of a spec; zero-sized ones are skipped."""
    volumes: Volumes = []
    mounts: VolumeMounts = []
    for sv in spec.storage_volumes:
        if sv.storage_size.startswith("0"):
            continue
        special = special_storage_class_name(sv)
        if special == EMPTY_DIR:
            volumes, mounts = mount_empty_dir_volume(volumes, mounts, sv.name, sv.mount_path, sv.sub_path)
        elif special == HOST_PATH:
            volumes, mounts = mount_host_path_volume(
                volumes, mounts, sv.name, sv.mount_path, sv.sub_path, sv.host_path
            )
        else:
            volumes, mounts = mount_persistent_volume_claim(
                volumes, mounts, sv.name, sv.mount_path, sv.sub_path
            )
    return volumes, mounts


def mount_persistent_volume_claim(
    volumes: Volumes | None,
    volume_mounts: VolumeMounts | None,
    volume_name: str,
    mount_path: str,
    sub_path: str = "",
) -> tuple[Volumes, VolumeMounts]:
    """Append a volume backed by the same-named persistent volume claim."""
    volume = {"name": volume_name, "persistentVolumeClaim": {"claimName": volume_name}}
    return (
        [*(volumes or []), volume],
        [*(volume_mounts or []), _volume_mount(volume_name, mount_path, sub_path)],
    )


def mount_empty_dir_volume(
    volumes: Volumes | None,
    volume_mounts: VolumeMounts | None,
    volume_name: str,
    mount_path: str,
    sub_path: str = "",
) -> tuple[Volumes, VolumeMounts]:
    """Append an emptyDir volume."""
    volume = {"name": volume_name, "emptyDir": {}}
    return (
        [*(volumes or []), volume],
        [*(volume_mounts or []), _volume_mount(volume_name, mount_path, sub_path)],
    )


def mount_host_path_volume(
    volumes: Volumes | None,
    volume_mounts: VolumeMounts | None,
    volume_name: str,
    mount_path: str,
    sub_path: str,
    host_path: dict[str, Any] | None,
) -> tuple[Volumes, VolumeMounts]:
    """Append a hostPath volume."""
    volume = {"name": volume_name, "hostPath": host_path}
    return (
        [*(volumes or []), volume],
        [*(volume_mounts or []), _volume_mount(volume_name, mount_path, sub_path)],
    )


def mount_config_maps(
    spec: ComponentSpec | None,
    volumes: Volumes | None,
    volume_mounts: VolumeMounts | None,
    references: Iterable[MountInfo],
    with_hash: bool = True,
) -> tuple[Volumes, VolumeMounts]:
    """Append a volume and a mount for each referenced configmap.

    When the spec overrides the command or arguments, configmaps mounted by
    sub path are made executable so they can serve as scripts.
    """
    executable = spec is not None and (spec.command is not None or spec.args is not None)
    new_volumes = list(volumes or [])
    new_mounts = list(volume_mounts or [])
    for reference in references:
        name = volume_name(reference, with_hash)
        source: dict[str, Any] = {"name": reference.name}
        if executable and reference.sub_path:
            source["defaultMode"] = _EXECUTION_PERMISSION
        new_volumes.append({"name": name, "configMap": source})
        new_mounts.append(_volume_mount(name, reference.mount_path, reference.sub_path))
    return new_volumes, new_mounts


def mount_config_map_info(
    volumes: Volumes | None,
    volume_mounts: VolumeMounts | None,
    cm_info: ConfigMapInfo,
    mount_path: str,
) -> tuple[Volumes, VolumeMounts]:
    """Mount the configuration configmap when both its name and key are set."""
    new_volumes = list(volumes or [])
    new_mounts = list(volume_mounts or [])
    if cm_info.config_map_name and cm_info.resolve_key:
        new_volumes.append(
            {"name": cm_info.config_map_name, "configMap": {"name": cm_info.config_map_name}}
        )
        new_mounts.append(_volume_mount(cm_info.config_map_name, mount_path))
    return new_volumes, new_mounts


def mount_secrets(
    volumes: Volumes | None,
    volume_mounts: VolumeMounts | None,
    references: Iterable[MountInfo],
    with_hash: bool = True,
) -> tuple[Volumes, VolumeMounts]:
    """Append a volume and a mount for each referenced secret."""
    new_volumes = list(volumes or [])
    new_mounts = list(volume_mounts or [])
    for reference in references:
        name = volume_name(reference, with_hash)
        source = dict(secretName=reference.name)
        new_volumes.append(dict(name=name, secret=source))
        new_mounts.append(_volume_mount(name, reference.mount_path, reference.sub_path))
    return new_volumes, new_mounts


def _fnv1a_32(data: bytes) -> int:
    value = 0x811C9DC5
    for byte in data:
        value ^= byte
        value = (value * 0x01000193) & 0xFFFFFFFF
    return value


def volume_name(mount_info: MountInfo, with_hash: bool = True) -> str:
    """Volume name for a mount, optionally suffixed with a short hash of the mount."""
    if not with_hash:
        return mount_info.name
    payload = json.dumps(
        {"name": mount_info.name, "mountPath": mount_info.mount_path, "subPath": mount_info.sub_path},
        sort_keys=True,
    ).encode()
    suffix = str(_fnv1a_32(payload))[:_HASH_SUFFIX_LEN]
    return f"{mount_info.name}-{suffix}"