import pytest

from rockskube.components import ComponentKind, ComponentSpec
from rockskube.podspec import (
    container_args,
    container_command,
    container_security_context,
    default_root_path,
    envs,
    get_config_dir,
    get_log_dir,
    get_pre_stop_script_path,
    get_starrocks_root_path,
    get_storage_dir,
    life_cycle,
    pod_annotations,
    pod_labels,
    pod_security_context,
    pod_spec,
)

FE_SERVICE = "test-fe-service"


def _field(name, path):
    return {"name": name, "valueFrom": {"fieldRef": {"fieldPath": path}}}


BASE_ENVS = [
    _field("POD_NAME", "metadata.name"),
    _field("POD_IP", "status.podIP"),
    _field("HOST_IP", "status.hostIP"),
    _field("POD_NAMESPACE", "metadata.namespace"),
    {"name": "HOST_TYPE", "value": "FQDN"},
]

BASE_ENVS_WITHOUT_IP = [
    _field("POD_NAME", "metadata.name"),
    _field("POD_NAMESPACE", "metadata.namespace"),
    {"name": "HOST_TYPE", "value": "FQDN"},
]


def test_life_cycle_without_lifecycle():
    assert life_cycle(None, "/scripts/pre-stop.sh") == {
        "preStop": {"exec": {"command": ["/scripts/pre-stop.sh"]}}
    }


def test_life_cycle_with_lifecycle():
    lc = {
        "preStop": {"exec": {"command": ["/scripts/my-pre-stop.sh"]}},
        "postStart": {"exec": {"command": ["/scripts/my-post-start.sh"]}},
    }
    assert life_cycle(lc, "/scripts/pre-stop.sh") == lc


def test_life_cycle_without_pre_stop():
    lc = {"postStart": {"exec": {"command": ["/scripts/my-post-start.sh"]}}}
    assert life_cycle(lc, "/scripts/pre-stop.sh") == {
        "preStop": {"exec": {"command": ["/scripts/pre-stop.sh"]}},
        "postStart": {"exec": {"command": ["/scripts/my-post-start.sh"]}},
    }


def test_pod_labels():
    spec = ComponentSpec(kind=ComponentKind.FE, pod_labels={"l1": "v1"})
    assert pod_labels("test", spec) == {
        "l1": "v1",
        "app.starrocks.ownerreference/name": "test-fe",
        "app.kubernetes.io/component": "fe",
    }


@pytest.mark.parametrize(
    "kind, unsupported, expected",
    [
        (
            ComponentKind.FE,
            "",
            BASE_ENVS
            + [
                {"name": "COMPONENT_NAME", "value": "fe"},
                {"name": "FE_SERVICE_NAME", "value": FE_SERVICE + ".ns"},
            ],
        ),
        (
            ComponentKind.BE,
            "",
            BASE_ENVS
            + [
                {"name": "COMPONENT_NAME", "value": "be"},
                {"name": "FE_SERVICE_NAME", "value": FE_SERVICE},
                {"name": "FE_QUERY_PORT", "value": "9030"},
            ],
        ),
        (
            ComponentKind.CN,
            "",
            BASE_ENVS
            + [
                {"name": "COMPONENT_NAME", "value": "cn"},
                {"name": "FE_SERVICE_NAME", "value": FE_SERVICE},
                {"name": "FE_QUERY_PORT", "value": "9030"},
            ],
        ),
        (
            ComponentKind.BE,
            "HOST_IP,POD_IP",
            BASE_ENVS_WITHOUT_IP
            + [
                {"name": "COMPONENT_NAME", "value": "be"},
                {"name": "FE_SERVICE_NAME", "value": FE_SERVICE},
                {"name": "FE_QUERY_PORT", "value": "9030"},
            ],
        ),
    ],
)
def test_envs(monkeypatch, kind, unsupported, expected):
    monkeypatch.setenv("KUBE_STARROCKS_UNSUPPORTED_ENVS", unsupported)
    got = envs(ComponentSpec(kind=kind), 9030, FE_SERVICE, "ns", None)
    assert got == expected


def test_envs_keeps_user_values(monkeypatch):
    monkeypatch.delenv("KUBE_STARROCKS_UNSUPPORTED_ENVS", raising=False)
    user = [{"name": "HOST_TYPE", "value": "IP"}]
    got = envs(ComponentSpec(kind=ComponentKind.FE), 9030, FE_SERVICE, "ns", user)
    assert got[0] == {"name": "HOST_TYPE", "value": "IP"}
    assert [e["name"] for e in got].count("HOST_TYPE") == 1
    assert user == [{"name": "HOST_TYPE", "value": "IP"}]


def test_pod_spec_with_service_account():
    spec = ComponentSpec(kind=ComponentKind.FE, service_account="test")
    assert pod_spec(spec, {}, None) == {
        "containers": [{}],
        "serviceAccountName": "test",
        "terminationGracePeriodSeconds": 120,
        "automountServiceAccountToken": False,
    }


def test_pod_spec_default():
    assert pod_spec(ComponentSpec(kind=ComponentKind.FE), {}, None) == {
        "containers": [{}],
        "terminationGracePeriodSeconds": 120,
        "automountServiceAccountToken": False,
    }


def test_pod_spec_with_sidecars():
    spec = ComponentSpec(kind=ComponentKind.BE, sidecars=[{"name": "side"}])
    got = pod_spec(spec, {"name": "be"}, [{"name": "v", "emptyDir": {}}])
    assert got["containers"] == [{"name": "be"}, {"name": "side"}]
    assert got["volumes"] == [{"name": "v", "emptyDir": {}}]


def test_pod_security_context():
    assert pod_security_context(ComponentSpec(kind=ComponentKind.FE)) == {
        "fsGroupChangePolicy": "OnRootMismatch"
    }


def test_pod_security_context_with_group():
    got = pod_security_context(ComponentSpec(kind=ComponentKind.FE, run_as_group=1000))
    assert got == {"fsGroupChangePolicy": "OnRootMismatch", "fsGroup": 1000}


def test_pod_annotations():
    spec = ComponentSpec(kind=ComponentKind.FE, annotations={"v1": "v1"})
    got = pod_annotations(spec)
    assert got == {"v1": "v1"}
    got["x"] = "y"
    assert spec.annotations == {"v1": "v1"}


@pytest.mark.parametrize(
    "capabilities",
    [
        None,
        {"add": ["SYS_PTRACE", "PERFMON"]},
        {"add": ["SYS_PTRACE", "PERFMON"], "drop": ["SYS_ADMIN"]},
    ],
)
def test_container_security_context_capabilities(capabilities):
    spec = ComponentSpec(kind=ComponentKind.FE, capabilities=capabilities)
    expected = {"allowPrivilegeEscalation": False, "readOnlyRootFilesystem": False}
    if capabilities is not None:
        expected["capabilities"] = capabilities
    assert container_security_context(spec) == expected


def test_container_security_context_non_root():
    spec = ComponentSpec(kind=ComponentKind.FE, run_as_user=1000, run_as_group=1000)
    got = container_security_context(spec)
    assert got["runAsNonRoot"] is True
    assert got["runAsUser"] == 1000
    assert got["runAsGroup"] == 1000


def test_container_security_context_root_user():
    got = container_security_context(ComponentSpec(kind=ComponentKind.FE, run_as_user=0))
    assert got["runAsUser"] == 0
    assert "runAsNonRoot" not in got


def test_get_starrocks_root_path_default():
    assert get_starrocks_root_path(None) == "/opt/starrocks"
    assert default_root_path() == "/opt/starrocks"


def test_get_starrocks_root_path_from_env():
    assert get_starrocks_root_path([{"name": "STARROCKS_ROOT", "value": "xxx"}]) == "xxx"
    assert get_starrocks_root_path([{"name": "starrocks_root", "value": "yyy"}]) == "yyy"


def test_directories():
    fe = ComponentSpec(kind=ComponentKind.FE)
    be = ComponentSpec(kind=ComponentKind.BE, env_vars=[{"name": "STARROCKS_ROOT", "value": "/sr"}])
    assert get_storage_dir(fe) == "/opt/starrocks/fe/meta"
    assert get_log_dir(fe) == "/opt/starrocks/fe/log"
    assert get_config_dir(fe) == "/opt/starrocks/fe/conf"
    assert get_pre_stop_script_path(fe) == "/opt/starrocks/fe_prestop.sh"
    assert get_storage_dir(be) == "/sr/be/storage"
    assert get_storage_dir(ComponentKind.CN) == "/opt/starrocks/cn/storage"
    assert get_log_dir(ComponentSpec(kind=ComponentKind.FE_PROXY)) == ""


def test_container_command_and_args():
    cn = ComponentSpec(kind=ComponentKind.CN)
    assert container_command(cn) == ["/opt/starrocks/cn_entrypoint.sh"]
    assert container_args(cn) == ["$(FE_SERVICE_NAME)"]
    custom = ComponentSpec(kind=ComponentKind.CN, command=["/bin/sh"], args=["-c", "run"])
    assert container_command(custom) == ["/bin/sh"]
    assert container_args(custom) == ["-c", "run"]