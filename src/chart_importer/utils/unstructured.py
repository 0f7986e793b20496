"""Path-based access to schema-free Kubernetes objects.

Custom resources come back from ``CustomObjectsApi`` as plain dicts.  These
helpers read and write nested fields by key path without assuming any
particular shape, so unknown fields survive an update untouched.
"""

from __future__ import annotations

from typing import Any


def get_nested_field(obj: dict, *path: str, default: Any = None) -> Any:
    current: Any = obj
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def set_nested_field(obj: dict, value: Any, *path: str) -> None:
    """Set ``obj[path[0]]...[path[-1]] = value``, creating maps on the way.

    Intermediate values that are missing or not maps are replaced by empty
    maps.
    """
    if not path:
        raise ValueError("path must not be empty")
    current = obj
    for key in path[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[path[-1]] = value


def get_labels(obj: dict) -> dict[str, str]:
    return dict(get_nested_field(obj, "metadata", "labels", default=None) or {})


def set_labels(obj: dict, labels: dict[str, str]) -> None:
    set_nested_field(obj, labels, "metadata", "labels")


def get_name(obj: dict) -> str:
    return get_nested_field(obj, "metadata", "name", default="") or ""
