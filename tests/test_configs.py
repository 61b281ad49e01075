import pytest

from rockskube.configs import (
    check_volumes,
    clean_minor_version,
    has_mount_path,
    has_volume,
    parse_properties,
    resolve_config_map,
)


def test_has_volume_exact_name():
    assert has_volume([{"name": "fe-meta"}], "fe-meta") is True


def test_has_volume_same_suffix():
    assert has_volume([{"name": "be0-data"}], "be-data") is True
    assert has_volume([{"name": "be0-log"}], "be-data") is False


def test_has_volume_requires_dash_in_both():
    assert has_volume([{"name": "data"}], "be-data") is False
    assert has_volume([], "be-data") is False


def test_has_mount_path_contains():
    mounts = [{"mountPath": "/opt/starrocks/be/storage0"}]
    assert has_mount_path(mounts, "/opt/starrocks/be/storage") is True
    assert has_mount_path(mounts, "/opt/starrocks/be/log") is False


def test_check_volumes_accepts_unique():
    volumes = [{"name": "a"}, {"name": "b"}]
    mounts = [{"mountPath": "/a"}, {"mountPath": "/b"}]
    assert check_volumes(volumes, mounts) is None


def test_check_volumes_duplicate_mount_path():
    with pytest.raises(ValueError, match="mount path /a is duplicated"):
        check_volumes([], [{"mountPath": "/a"}, {"mountPath": "/a"}])


def test_check_volumes_duplicate_volume_name():
    with pytest.raises(ValueError, match="volume name a is duplicated"):
        check_volumes([{"name": "a"}, {"name": "a"}], [])


def test_clean_minor_version():
    assert clean_minor_version("28+") == "28"
    assert clean_minor_version("25") == "25"


def test_parse_properties_basic():
    text = "# comment\n! other comment\nhttp_port = 8030\nquery_port:9030\n\nsys_log_level INFO\n"
    assert parse_properties(text) == {
        "http_port": "8030",
        "query_port": "9030",
        "sys_log_level": "INFO",
    }


def test_parse_properties_lowercases_and_nests():
    settings = parse_properties("Priority.Networks = 10.0.0.0/8\n")
    assert settings == {"priority": {"networks": "10.0.0.0/8"}}


def test_parse_properties_continuation_and_escape():
    settings = parse_properties("jvm = -Xmx8g \\\n    -XX:+UseG1GC\nkey\\ with\\ space = v\n")
    assert settings["jvm"] == "-Xmx8g -XX:+UseG1GC"
    assert settings["key with space"] == "v"


def test_parse_properties_bad_unicode_escape():
    with pytest.raises(ValueError):
        parse_properties("a = \\uZZZZ\n")


def test_resolve_config_map_missing_key():
    assert resolve_config_map({"data": {"other": "a=1"}}, "fe.conf") == {}
    assert resolve_config_map({}, "fe.conf") == {}


def test_resolve_config_map_reads_key():
    config_map = {"data": {"fe.conf": "http_port = 8030\nrpc_port = 9020\n"}}
    assert resolve_config_map(config_map, "fe.conf") == {"http_port": "8030", "rpc_port": "9020"}