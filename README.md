# rockskube

Helpers for building the Kubernetes resources that run a StarRocks cluster
(FE, BE, CN and FE proxy components) and for reconciling them against a
store of resources. Resources are plain Python dictionaries shaped like
Kubernetes manifests, so they can be dumped to YAML or JSON as they are.

The package has no dependencies beyond the standard library.

## Modules

- `rockskube.components`: `ComponentKind` (`FE`, `BE`, `CN`, `FE_PROXY`),
  the `ComponentSpec` dataclass holding a component's settings, and
  `component_name`, `component_labels`, `selector` and `default_annotations`.
  Wherever a spec is accepted, a bare `ComponentKind` works too.
- `rockskube.objects`: `StarRocksObject`, built with `new_from_cluster` or
  `new_from_warehouse` from a resource dictionary, with `name`, `namespace`
  and `owner_reference()`. `alias_name` gives the `-warehouse` prefix used for
  the resources of a warehouse.
- `rockskube.probes`: `startup_probe`, `liveness_probe`, `readiness_probe`,
  `complete_probe` and `http_get_handler`. Given a failure time in seconds,
  the failure threshold is that time divided by the 5-second period, rounded
  up; a failure time of `0` gives `None`, turning the probe off.
- `rockskube.mounts`: `StorageVolume`, `MountInfo` and `ConfigMapInfo`, and
  functions returning new `(volumes, volume_mounts)` lists for storage
  volumes, persistent volume claims, empty dirs, host paths, config maps and
  secrets. `volume_name` suffixes a name with a short hash of the mount unless
  `with_hash=False`. Storage volumes whose size starts with `0` are skipped.
- `rockskube.podspec`: `life_cycle`, `pod_labels`, `envs`, `pod_spec`,
  `pod_annotations`, `pod_security_context`, `container_security_context`,
  the directory and script helpers (`get_storage_dir`, `get_log_dir`,
  `get_config_dir`, `get_pre_stop_script_path`, `get_starrocks_root_path`,
  `default_root_path`), `container_command` and `container_args`.
  `envs` adds default variables the user has not set, leaving out any named,
  comma separated, in the `KUBE_STARROCKS_UNSUPPORTED_ENVS` environment
  variable.
- `rockskube.services`: `search_service_name`, `external_service_name` and
  `make_search_service`, which builds a headless service that publishes
  not-ready addresses and drops the external service's annotations and labels.
- `rockskube.workloads`: `make_statefulset`, `make_deployment` and
  `pvc_list`. Statefulsets of a warehouse carry a protection finalizer;
  `pvc_list` raises `ValueError` for a storage size that is not a valid
  quantity.
- `rockskube.rollout`: `deployment_status`, `statefulset_status` and
  `get_deployment_condition`. The status functions return a
  `(message, done)` pair and raise `RolloutError` when a deployment has
  exceeded its progress deadline or a statefulset does not use the
  `RollingUpdate` strategy.
- `rockskube.podstatus`: `PodStatus`, `pod_is_ready`, `pod_statuses` and
  `count`, which splits pod names into `(creating, ready, failed)`.
- `rockskube.configs`: `has_volume`, `has_mount_path`, `check_volumes`
  (raises `ValueError` on a duplicated mount path or volume name),
  `clean_minor_version` (keeps the digits of a version such as `28+`),
  `parse_properties` and `resolve_config_map`. Properties keys are
  lower-cased and dotted keys are nested; values stay strings.
- `rockskube.apply`: `KubeClient`, an in-memory store of resources with
  `get`, `create`, `update`, `patch` (merge patch) and `delete`, and helpers
  that use those methods: `apply_service`, `apply_config_map`,
  `apply_statefulset`, `create_object`, `update_object`, the `delete_*`
  helpers, `get_config_map`, `get_env_var_value`,
  `get_value_from_config_map`, `get_value_from_secret` and `get_config`.
  A missing resource raises `NotFoundError`; the apply helpers then create
  it and the delete helpers treat it as already gone.

## Example

```python
from rockskube.components import ComponentKind, ComponentSpec, component_name, selector
from rockskube.probes import liveness_probe

fe = ComponentSpec(kind=ComponentKind.FE)
component_name("kube-starrocks", fe)   # "kube-starrocks-fe"
selector("kube-starrocks", fe)
# {"app.starrocks.ownerreference/name": "kube-starrocks-fe",
#  "app.kubernetes.io/component": "fe"}

liveness_probe(50, 8030, "/api/health")
# {"httpGet": {"path": "/api/health", "port": 8030},
#  "failureThreshold": 10, "periodSeconds": 5}
```

## Reconciling

```python
from rockskube.apply import KubeClient, apply_config_map, get_config
from rockskube.mounts import ConfigMapInfo

client = KubeClient()
apply_config_map(client, {
    "metadata": {"name": "fe-config", "namespace": "ns"},
    "data": {"fe.conf": "http_port = 8030\n"},
})
get_config(client, ConfigMapInfo("fe-config", "fe.conf"), [], "", "", "ns")
# {"http_port": "8030"}
```

## What it does not do

The package does not talk to a Kubernetes API server. `KubeClient` keeps
resources in memory only; there is no discovery of the cluster's version,
no handling of horizontal pod autoscalers, and no create-or-update helper
for deployments. Nothing is run as a controller or command: the package is
a library of functions that build and compare resource dictionaries.

## Tests

Install the `test` extra and run `pytest`.