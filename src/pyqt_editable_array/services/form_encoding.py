"""
Form and JSON encodings of the row collection.

Flat form encoding: field path p of row i becomes key "<name>[<i>].<p>".
Engine-internal markers are never encoded. A soft-delete marker is encoded
only while it is set, so a receiving form can act on pending deletions.
"""

from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any, Dict, List
import json
import logging

from pyqt_editable_array.core.path_utils import format_display_value, iter_leaf_paths
from .row_store import DELETED_KEY, INTERNAL_KEYS

logger = logging.getLogger(__name__)


def form_key(name: str, index: int, path: str) -> str:
    return f"{name}[{index}].{path}"


def to_form_data(rows: List[Dict[str, Any]], name: str) -> Dict[str, str]:
    """Flatten rows into an ordered {form key: string value} mapping."""
    encoded: Dict[str, str] = {}
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            continue
        visible = {k: v for k, v in row.items() if k not in INTERNAL_KEYS}
        if not visible.get(DELETED_KEY):
            visible.pop(DELETED_KEY, None)
        for path, value in iter_leaf_paths(visible):
            if isinstance(value, Mapping):
                value = ""  # empty nested mapping
            encoded[form_key(name, index, path)] = format_display_value(value)
    return encoded


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(rows: List[Dict[str, Any]]) -> str:
    """JSON text of the collection; internal markers are kept (round-trip form)."""
    return json.dumps(rows, default=_json_default, separators=(",", ":"))


def from_json(text: Any) -> List[Dict[str, Any]]:
    """Parse a JSON collection; malformed text or a non-list yields []."""
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.debug(f"Malformed JSON value ignored: {e}")
        return []
    if not isinstance(parsed, list):
        logger.debug(f"JSON value is {type(parsed).__name__}, not a list; using empty collection")
        return []
    return parsed
