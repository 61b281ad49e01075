"""Deployment and statefulset manifests for components."""

from __future__ import annotations

import copy
import re
from typing import Any, Iterable

from rockskube.components import (
    ComponentKind,
    ComponentSpec,
    component_labels,
    component_name,
    default_annotations,
    selector,
)
from rockskube.mounts import StorageVolume, special_storage_class_name
from rockskube.objects import STARROCKS_WAREHOUSE_KIND, StarRocksObject
from rockskube.services import search_service_name

STARROCKS_WAREHOUSE_FINALIZER = "starrocks.com.starrockswarehouse/protection"
PARALLEL_POD_MANAGEMENT = "Parallel"
READ_WRITE_ONCE = "ReadWriteOnce"

_QUANTITY = re.compile(
    r"^[+-]?(\d+(\.\d*)?|\.\d+)(Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E|[eE][+-]?\d+)?$"
)


def _check_quantity(size: str) -> str:
    if not _QUANTITY.match(size):
        raise ValueError(f"quantity {size!r} is not a valid resource quantity")
    return size


def pvc_list(volumes: Iterable[StorageVolume]) -> list[dict[str, Any]]:
    """Volume claim templates for the storage volumes that need a persistent claim.

    Special volumes (emptyDir, hostPath) and zero-sized ones are skipped.
    Raises ValueError for a storage size that is not a valid quantity.
    """
    claims = []
    for volume in volumes:
        if special_storage_class_name(volume):
            continue
        if volume.storage_size.startswith("0"):
            continue
        claim_spec: dict[str, Any] = {"accessModes": [READ_WRITE_ONCE]}
        if volume.storage_class_name is not None:
            claim_spec["storageClassName"] = volume.storage_class_name
        if volume.storage_size:
            claim_spec["resources"] = {
                "requests": {"storage": _check_quantity(volume.storage_size)}
            }
        claims.append({"metadata": {"name": volume.name}, "spec": claim_spec})
    return claims


def make_statefulset(
    obj: StarRocksObject,
    spec: ComponentSpec,
    pod_template: dict[str, Any],
) -> dict[str, Any]:
    """Statefulset running the pods of a component of a cluster or warehouse."""
    owner = obj.alias_name
    sts_spec: dict[str, Any] = {}
    if spec.replicas is not None:
        sts_spec["replicas"] = spec.replicas
    sts_spec["selector"] = {"matchLabels": selector(owner, spec)}
    sts_spec["updateStrategy"] = copy.deepcopy(spec.update_strategy)
    sts_spec["template"] = pod_template
    sts_spec["serviceName"] = search_service_name(owner, spec)
    claims = pvc_list(spec.storage_volumes)
    if claims:
        sts_spec["volumeClaimTemplates"] = claims
    sts_spec["podManagementPolicy"] = PARALLEL_POD_MANAGEMENT

    metadata: dict[str, Any] = {
        "name": component_name(owner, spec),
        "namespace": obj.namespace,
        "annotations": default_annotations(),
        "labels": component_labels(owner, spec),
        "ownerReferences": [obj.owner_reference()],
    }
    # Dropping a warehouse needs settings read from its statefulset, so the
    # statefulset must outlive the warehouse resource until that is done.
    if obj.kind == STARROCKS_WAREHOUSE_KIND:
        metadata["finalizers"] = [STARROCKS_WAREHOUSE_FINALIZER]
    return {"metadata": metadata, "spec": sts_spec}


def make_deployment(
    obj: StarRocksObject,
    spec: ComponentSpec | ComponentKind,
    pod_template: dict[str, Any],
) -> dict[str, Any]:
    """Deployment running the pods of a component of a cluster."""
    owner = obj.name
    deploy_spec: dict[str, Any] = {}
    replicas = getattr(spec, "replicas", None)
    if replicas is not None:
        deploy_spec["replicas"] = replicas
    deploy_spec["selector"] = {"matchLabels": selector(owner, spec)}
    deploy_spec["template"] = pod_template
    return {
        "metadata": {
            "name": component_name(owner, spec),
            "namespace": obj.namespace,
            "labels": component_labels(owner, spec),
            "annotations": default_annotations(),
            "ownerReferences": [obj.owner_reference()],
        },
        "spec": deploy_spec,
    }