"""A common view over StarRocksCluster and StarRocksWarehouse resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

STARROCKS_CLUSTER_KIND = "StarRocksCluster"
STARROCKS_WAREHOUSE_KIND = "StarRocksWarehouse"


@dataclass
class StarRocksObject:
    """Type and object metadata of a cluster or warehouse, with naming details.

    ``type_meta`` and ``metadata`` are the very dictionaries of the source
    resource, not copies.
    """

    type_meta: dict[str, Any]
    metadata: dict[str, Any]
    cluster_name: str
    kind: str
    alias_name: str

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace", "")

    def owner_reference(self) -> dict[str, Any]:
        """Controller owner reference pointing at this object."""
        return {
            "apiVersion": self.type_meta.get("apiVersion", ""),
            "kind": self.type_meta.get("kind", ""),
            "name": self.name,
            "uid": self.metadata.get("uid", ""),
            "controller": True,
            "blockOwnerDeletion": True,
        }


def _split(resource: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    type_meta = {k: resource[k] for k in ("apiVersion", "kind") if k in resource}
    metadata = resource.setdefault("metadata", {})
    return type_meta, metadata


def new_from_cluster(cluster: dict[str, Any]) -> StarRocksObject:
    """Build the object view of a StarRocksCluster resource."""
    type_meta, metadata = _split(cluster)
    name = metadata.get("name", "")
    return StarRocksObject(
        type_meta=type_meta,
        metadata=metadata,
        cluster_name=name,
        kind=STARROCKS_CLUSTER_KIND,
        alias_name=name,
    )


def new_from_warehouse(warehouse: dict[str, Any]) -> StarRocksObject:
    """Build the object view of a StarRocksWarehouse resource."""
    type_meta, metadata = _split(warehouse)
    spec = warehouse.get("spec") or {}
    return StarRocksObject(
        type_meta=type_meta,
        metadata=metadata,
        cluster_name=spec.get("starRocksCluster", ""),
        kind=STARROCKS_WAREHOUSE_KIND,
        # the suffix keeps warehouse resources apart from a same-named cluster
        alias_name=alias_name(metadata.get("name", "")),
    )


def alias_name(warehouse_name: str) -> str:
    """Prefix used for the sub-resources of a warehouse."""
    return warehouse_name + "-warehouse"