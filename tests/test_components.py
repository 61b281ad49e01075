import pytest

from rockskube.components import (
    COMPONENT_LABEL_KEY,
    OWNER_REFERENCE_LABEL,
    ComponentKind,
    ComponentSpec,
    component_labels,
    component_name,
    default_annotations,
    selector,
)


def test_selector_for_bare_fe_proxy_kind():
    assert selector("kube-starrocks", ComponentKind.FE_PROXY) == {
        "app.kubernetes.io/component": "fe-proxy",
        "app.starrocks.ownerreference/name": "kube-starrocks-fe-proxy",
    }


def test_selector_for_fe_spec():
    assert selector("test", ComponentSpec(ComponentKind.FE)) == {
        OWNER_REFERENCE_LABEL: "test-fe",
        COMPONENT_LABEL_KEY: "fe",
    }


@pytest.mark.parametrize(
    "kind, want",
    [
        (ComponentKind.BE, "test-be"),
        (ComponentKind.CN, "test-cn"),
        (ComponentKind.FE, "test-fe"),
    ],
)
def test_component_name(kind, want):
    assert component_name("test", ComponentSpec(kind)) == want


@pytest.mark.parametrize(
    "kind, want",
    [
        (ComponentKind.BE, "be"),
        (ComponentKind.CN, "cn"),
        (ComponentKind.FE, "fe"),
    ],
)
def test_component_labels(kind, want):
    assert component_labels("test", ComponentSpec(kind)) == {
        OWNER_REFERENCE_LABEL: "test",
        COMPONENT_LABEL_KEY: want,
    }


def test_default_annotations_empty_and_fresh():
    first = default_annotations()
    assert first == {}
    first["x"] = "y"
    assert default_annotations() == {}


def test_spec_defaults():
    spec = ComponentSpec(ComponentKind.BE)
    assert spec.termination_grace_period_seconds == 120
    assert spec.update_strategy == {"type": "RollingUpdate", "rollingUpdate": {"partition": 0}}
    assert spec.read_only_root_filesystem is False