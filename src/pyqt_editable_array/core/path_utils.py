"""Dotted field path helpers shared by the edit session, validation and form encoding."""

from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any, Iterator, List, Tuple

PATH_SEPARATOR = "."
LIST_DISPLAY_SEPARATOR = ", "


def split_path(path: str) -> List[str]:
    """Split 'address.city' into ['address', 'city']; empty segments are dropped."""
    return [part for part in str(path).split(PATH_SEPARATOR) if part]


def get_path(obj: Any, path: str, default: Any = None) -> Any:
    """Read a nested value by dotted path.

    Numeric segments index into lists, so 'tags.0' reads the first tag.
    Missing segments return default.
    """
    current = obj
    for part in split_path(path):
        if isinstance(current, Mapping):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return default
            current = current[index]
        else:
            return default
    return current


def set_path(obj: dict, path: str, value: Any) -> None:
    """Assign a nested value by dotted path, creating intermediate dicts.

    Raises ValueError when a segment addresses a list by a non-numeric or
    out-of-range index; lists are never grown.
    """
    parts = split_path(path)
    if not parts:
        raise ValueError(f"Empty field path: {path!r}")

    current: Any = obj
    for part in parts[:-1]:
        if isinstance(current, list):
            current = current[_list_index(current, part, path)]
            if not isinstance(current, (dict, list)):
                raise ValueError(f"Cannot descend into {type(current).__name__} at {path!r}")
            continue
        nxt = current.get(part)
        if not isinstance(nxt, (dict, list)):
            nxt = {}
            current[part] = nxt
        current = nxt

    last = parts[-1]
    if isinstance(current, list):
        current[_list_index(current, last, path)] = value
    else:
        current[last] = value


def _list_index(items: list, part: str, path: str) -> int:
    if not part.isdigit() or int(part) >= len(items):
        raise ValueError(f"No list item {part!r} in path {path!r}")
    return int(part)


def iter_leaf_paths(obj: Mapping, prefix: str = "") -> Iterator[Tuple[str, Any]]:
    """Yield (dotted_path, value) for every non-mapping leaf of a nested mapping."""
    for key, value in obj.items():
        path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            yield from iter_leaf_paths(value, path)
        else:
            yield path, value


def format_display_value(value: Any) -> str:
    """Text shown for a bound value: lists comma-joined, None as empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return LIST_DISPLAY_SEPARATOR.join(format_display_value(item) for item in value)
    return str(value)
