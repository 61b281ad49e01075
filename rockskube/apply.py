"""Creating, updating and deleting cluster resources through a client."""

from __future__ import annotations

import base64
import copy
import itertools
import logging
import posixpath
from typing import Any, Callable, Iterable

from rockskube.configs import resolve_config_map
from rockskube.mounts import ConfigMapInfo, MountInfo

logger = logging.getLogger(__name__)

SERVICE = "Service"
STATEFULSET = "StatefulSet"
DEPLOYMENT = "Deployment"
CONFIG_MAP = "ConfigMap"
SECRET = "Secret"
ORDERED_READY_POD_MANAGEMENT = "OrderedReady"

Resource = dict[str, Any]
Equal = Callable[[Resource, Resource], bool]


class NotFoundError(LookupError):
    """The requested resource does not exist."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        super().__init__(f'{kind} "{name}" not found in namespace "{namespace}"')
        self.kind = kind
        self.namespace = namespace
        self.name = name


def _merge_patch(target: dict[str, Any], patch: dict[str, Any]) -> None:
    for key, value in patch.items():
        if value is None:
            target.pop(key, None)
        elif isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_patch(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class KubeClient:
    """An in-memory store of resources with the verbs of a Kubernetes client.

    Resources are dictionaries carrying ``kind`` and ``metadata``; every
    write stamps a new ``metadata.resourceVersion``. Objects handed in or out
    are copies, never the stored ones.
    """

    def __init__(self, *objects: Resource) -> None:
        self._objects: dict[tuple[str, str, str], Resource] = {}
        self._versions = itertools.count(1)
        for obj in objects:
            self.create(obj)

    @staticmethod
    def _key(obj: Resource) -> tuple[str, str, str]:
        kind = obj.get("kind")
        if not kind:
            raise ValueError("object has no kind")
        meta = obj.get("metadata") or {}
        return kind, meta.get("namespace", ""), meta.get("name", "")

    def _store(self, key: tuple[str, str, str], obj: Resource) -> None:
        stored = copy.deepcopy(obj)
        stored.setdefault("metadata", {})["resourceVersion"] = str(next(self._versions))
        self._objects[key] = stored

    def get(self, kind: str, namespace: str, name: str) -> Resource:
        """A copy of the stored resource; raises NotFoundError when absent."""
        try:
            return copy.deepcopy(self._objects[(kind, namespace, name)])
        except KeyError:
            raise NotFoundError(kind, namespace, name) from None

    def create(self, obj: Resource) -> None:
        """Store a new resource; raises ValueError when it already exists."""
        key = self._key(obj)
        if key in self._objects:
            kind, namespace, name = key
            raise ValueError(f'{kind} "{name}" already exists in namespace "{namespace}"')
        self._store(key, obj)

    def update(self, obj: Resource) -> None:
        """Replace an existing resource."""
        key = self._key(obj)
        if key not in self._objects:
            raise NotFoundError(*key)
        self._store(key, obj)

    def patch(self, obj: Resource) -> None:
        """Merge-patch an existing resource with the given object."""
        key = self._key(obj)
        if key not in self._objects:
            raise NotFoundError(*key)
        merged = copy.deepcopy(self._objects[key])
        _merge_patch(merged, obj)
        self._store(key, merged)

    def delete(self, obj: Resource) -> None:
        """Remove an existing resource."""
        key = self._key(obj)
        if self._objects.pop(key, None) is None:
            raise NotFoundError(*key)


def _name_of(obj: Resource) -> tuple[str, str]:
    meta = obj.setdefault("metadata", {})
    return meta.get("namespace", ""), meta.get("name", "")


def create_object(client: KubeClient, obj: Resource) -> None:
    """Create ``obj`` through the client."""
    client.create(obj)


def update_object(client: KubeClient, obj: Resource) -> None:
    """Update ``obj`` through the client."""
    client.update(obj)


def apply_service(client: KubeClient, expect: Resource, equal: Equal) -> None:
    """Create the service, or patch it unless ``equal`` finds it unchanged."""
    expect.setdefault("kind", SERVICE)
    namespace, name = _name_of(expect)
    logger.info("create or update k8s service %s", name)
    try:
        actual = client.get(SERVICE, namespace, name)
    except NotFoundError:
        create_object(client, expect)
        return
    if equal(expect, actual):
        logger.info("no need to update service resource %s", name)
        return
    expect["metadata"]["resourceVersion"] = actual["metadata"].get("resourceVersion")
    client.patch(expect)


def apply_config_map(client: KubeClient, config_map: Resource) -> None:
    """Create the configmap, or update it when its data differs."""
    config_map.setdefault("kind", CONFIG_MAP)
    namespace, name = _name_of(config_map)
    logger.info("create or update configmap %s", name)
    try:
        actual = client.get(CONFIG_MAP, namespace, name)
    except NotFoundError:
        create_object(client, config_map)
        return
    if (config_map.get("data") or {}) != (actual.get("data") or {}):
        update_object(client, config_map)


def apply_statefulset(
    client: KubeClient, expect: Resource, enable_scale_to_1: bool, equal: Equal
) -> None:
    """Create the statefulset, or patch it unless ``equal`` finds it unchanged.

    A statefulset being deleted only has its finalizers removed. Unless
    ``enable_scale_to_1`` is set, scaling from more than one replica down to
    one raises ValueError.
    """
    expect.setdefault("kind", STATEFULSET)
    namespace, name = _name_of(expect)
    logger.info("create or update statefulset %s", name)
    try:
        actual = client.get(STATEFULSET, namespace, name)
    except NotFoundError:
        create_object(client, expect)
        return

    actual_meta = actual.setdefault("metadata", {})
    if actual_meta.get("deletionTimestamp") is not None and actual_meta.get("finalizers") is not None:
        del actual_meta["finalizers"]
        client.update(actual)
        return

    actual_spec = actual.get("spec") or {}
    expect_spec = expect.setdefault("spec", {})
    if not enable_scale_to_1:
        actual_replicas = actual_spec.get("replicas")
        expect_replicas = expect_spec.get("replicas")
        if actual_replicas is not None and actual_replicas > 1:
            if expect_replicas is None or expect_replicas == 1:
                raise ValueError(f"the replicas of statefulset {name} can not be scaled to 1")

    # Statefulsets from older releases were ordered and used another search service.
    if actual_spec.get("podManagementPolicy") == ORDERED_READY_POD_MANAGEMENT:
        expect_spec["podManagementPolicy"] = ORDERED_READY_POD_MANAGEMENT
    if actual_spec.get("serviceName"):
        expect_spec["serviceName"] = actual_spec["serviceName"]
    else:
        expect_spec.pop("serviceName", None)

    if equal(expect, actual):
        logger.info("no need to update statefulset resource %s", name)
        return
    expect["metadata"]["resourceVersion"] = actual_meta.get("resourceVersion")
    client.patch(expect)


def _delete(client: KubeClient, kind: str, namespace: str, name: str) -> None:
    logger.info("delete %s %s from kubernetes", kind, name)
    try:
        obj = client.get(kind, namespace, name)
    except NotFoundError:
        return
    client.delete(obj)


def delete_statefulset(client: KubeClient, namespace: str, name: str) -> None:
    """Delete a statefulset; a missing one is ignored."""
    _delete(client, STATEFULSET, namespace, name)


def delete_service(client: KubeClient, namespace: str, name: str) -> None:
    """Delete a service; a missing one is ignored."""
    _delete(client, SERVICE, namespace, name)


def delete_deployment(client: KubeClient, namespace: str, name: str) -> None:
    """Delete a deployment; a missing one is ignored."""
    _delete(client, DEPLOYMENT, namespace, name)


def delete_config_map(client: KubeClient, namespace: str, name: str) -> None:
    """Delete a configmap; a missing one is ignored."""
    _delete(client, CONFIG_MAP, namespace, name)


def get_config_map(client: KubeClient, namespace: str, name: str) -> Resource:
    """Fetch a configmap; raises NotFoundError when absent."""
    logger.info("fetch configmap %s from kubernetes", name)
    return client.get(CONFIG_MAP, namespace, name)


def get_env_var_value(client: KubeClient, namespace: str, env_var: dict[str, Any]) -> str:
    """Runtime value of an environment variable, following configmap and secret references."""
    if env_var.get("value"):
        return env_var["value"]
    value_from = env_var.get("valueFrom")
    if value_from is not None:
        cm_ref = value_from.get("configMapKeyRef")
        if cm_ref is not None:
            return get_value_from_config_map(client, namespace, cm_ref.get("name", ""), cm_ref.get("key", ""))
        secret_ref = value_from.get("secretKeyRef")
        if secret_ref is not None:
            return get_value_from_secret(
                client, namespace, secret_ref.get("name", ""), secret_ref.get("key", "")
            )
    raise ValueError(f"invalid environment variable: {env_var}")


def get_value_from_config_map(client: KubeClient, namespace: str, name: str, key: str) -> str:
    """Value of ``key`` in a configmap; raises LookupError when the key is absent."""
    logger.info("fetch configmap %s key %s from kubernetes", name, key)
    config_map = client.get(CONFIG_MAP, namespace, name)
    data = config_map.get("data") or {}
    if key not in data:
        raise LookupError(f"key {key} not found in configmap {name}")
    return data[key]


def get_value_from_secret(client: KubeClient, namespace: str, name: str, key: str) -> str:
    """Value of ``key`` in a secret; raises LookupError when the key is absent.

    Secret data may be raw bytes or, as the API serves it, base64 text.
    """
    logger.info("fetch secret %s key %s from kubernetes", name, key)
    secret = client.get(SECRET, namespace, name)
    data = secret.get("data") or {}
    if key not in data:
        raise LookupError(f"key {key} not found in secret {name}")
    value = data[key]
    if isinstance(value, str):
        value = base64.b64decode(value)
    return bytes(value).decode()


def get_config(
    client: KubeClient,
    config_map_info: ConfigMapInfo,
    config_maps: Iterable[MountInfo],
    expect_mount_path: str,
    expect_key: str,
    namespace: str,
) -> dict[str, Any]:
    """Configuration of a component.

    The configmap named by ``config_map_info`` is read first; when that is
    unset, the mounted configmaps are searched. A missing configmap or an
    incomplete ``config_map_info`` yields an empty configuration.
    """
    if config_map_info.config_map_name or config_map_info.resolve_key:
        if not config_map_info.config_map_name or not config_map_info.resolve_key:
            return {}
        try:
            config_map = get_config_map(client, namespace, config_map_info.config_map_name)
        except NotFoundError:
            return {}
        return resolve_config_map(config_map, config_map_info.resolve_key)
    return _config_from_config_maps(client, config_maps, expect_mount_path, expect_key, namespace)


def _join(*parts: str) -> str:
    joined = posixpath.join(*(p for p in parts if p))
    return posixpath.normpath(joined) if joined else ""


def _config_from_config_maps(
    client: KubeClient,
    config_maps: Iterable[MountInfo],
    expect_mount_path: str,
    expect_key: str,
    namespace: str,
) -> dict[str, Any]:
    """A reference mounted by sub path at ``mount_path/key`` wins over one mounted whole."""
    config_map_name = ""
    key_path = _join(expect_mount_path, expect_key)
    for reference in config_maps:
        if not reference.sub_path:
            if reference.mount_path == expect_mount_path:
                config_map_name = reference.name
        elif reference.mount_path == key_path and expect_key == reference.sub_path:
            config_map_name = reference.name
            break
    if not config_map_name:
        return {}
    try:
        config_map = get_config_map(client, namespace, config_map_name)
    except NotFoundError:
        return {}
    return resolve_config_map(config_map, expect_key)