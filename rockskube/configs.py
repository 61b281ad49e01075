"""Volume checks and component configuration read from configmaps."""

from __future__ import annotations

from typing import Any, Iterable

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def has_volume(volumes: Iterable[dict[str, Any]], default_volume_name: str) -> bool:
    """Whether a volume stands in for the default one.

    A volume matches by exact name, or when both names contain a dash and end
    with the same dash-separated suffix (``be0-data`` for ``be-data``).
    """
    default_parts = default_volume_name.split("-")
    for volume in volumes:
        name = volume.get("name", "")
        if name == default_volume_name:
            return True
        parts = name.split("-")
        if len(default_parts) > 1 and len(parts) > 1 and default_parts[-1] == parts[-1]:
            return True
    return False


def has_mount_path(mounts: Iterable[dict[str, Any]], default_mount_path: str) -> bool:
    """Whether any mount path contains the default mount path."""
    return any(default_mount_path in mount.get("mountPath", "") for mount in mounts)


def check_volumes(volumes: Iterable[dict[str, Any]], mounts: Iterable[dict[str, Any]]) -> None:
    """Raise ValueError on a duplicated mount path or volume name."""
    seen_paths: set[str] = set()
    for mount in mounts:
        path = mount.get("mountPath", "")
        if path in seen_paths:
            raise ValueError(f"mount path {path} is duplicated")
        seen_paths.add(path)

    seen_names: set[str] = set()
    for volume in volumes:
        name = volume.get("name", "")
        if name in seen_names:
            raise ValueError(f"volume name {name} is duplicated")
        seen_names.add(name)


def clean_minor_version(version: str) -> str:
    """Keep only the digits of a Kubernetes minor version such as ``28+``."""
    return "".join(ch for ch in version if ch.isdecimal())


def _logical_lines(text: str) -> Iterable[str]:
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip() if not pending else raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        # An odd number of trailing backslashes continues the line.
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def _unescape(text: str) -> str:
    out: list[str] = []
    chars = iter(enumerate(text))
    for i, ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = text[i + 1] if i + 1 < len(text) else ""
        if not nxt:
            break
        next(chars)
        if nxt == "u":
            code = text[i + 2 : i + 6]
            if len(code) != 4 or any(c not in "0123456789abcdefABCDEF" for c in code):
                raise ValueError(f"invalid unicode escape in {text!r}")
            out.append(chr(int(code, 16)))
            for _ in range(4):
                next(chars)
        else:
            out.append(_ESCAPES.get(nxt, nxt))
    return "".join(out)


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        ch = line[index]
        if ch == "\\":
            index += 2
            continue
        if ch in "=: \t\f":
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(" \t\f")
    if rest[:1] in ("=", ":") and (index >= len(line) or line[index] in " \t\f" or True):
        if rest[:1] in ("=", ":"):
            rest = rest[1:].lstrip(" \t\f")
    return _unescape(key), _unescape(rest.rstrip())


def parse_properties(text: str) -> dict[str, Any]:
    """Parse a properties file into settings keyed by lower-cased names.

    Dotted keys are nested, so ``a.b = 1`` becomes ``{"a": {"b": "1"}}``.
    Values are kept as strings. Raises ValueError on a malformed escape.
    """
    settings: dict[str, Any] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        path = key.lower().split(".")
        node = settings
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value
    return settings


def resolve_config_map(config_map: dict[str, Any], key: str) -> dict[str, Any]:
    """Settings held under ``key`` of a configmap; empty when the key is absent."""
    data = config_map.get("data") or {}
    if key not in data:
        return {}
    return parse_properties(data[key])