"""
Canonical ordered row collection.

RowStore is the only owner of live row dicts. Everything handed out is a deep
clone; everything taken in is deep cloned first. Engine collaborators that
need to mutate rows in place (edit session, reorder, bulk operations) go
through the structural methods here, never through a reference obtained
from get_all().
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple
import logging

from pyqt_editable_array.core.deep_clone import DeepCloner

logger = logging.getLogger(__name__)

DELETED_KEY = "deleted"
IS_NEW_KEY = "__isNew"

# Engine-managed fields, never part of the form-encoded view of a row.
INTERNAL_KEYS = frozenset({IS_NEW_KEY})


class RowStore:
    """
    Ordered list of row dicts plus clone policy.

    set_all() coerces anything that is not a list/tuple to an empty
    collection, and any entry that is not a mapping to an empty row.
    """

    def __init__(self, cloner: Optional[DeepCloner] = None, max_rows: Optional[int] = None):
        self.cloner = cloner or DeepCloner()
        self.max_rows = max_rows
        self._rows: List[Dict[str, Any]] = []

    # ========== WHOLESALE ==========

    def set_all(self, rows: Any) -> Tuple[int, int]:
        """
        Replace the collection with a deep clone of rows.

        Returns:
            (attempted, kept): row count offered and row count stored, so the
            caller can report truncation by max_rows
        """
        if not isinstance(rows, (list, tuple)):
            if rows is not None:
                logger.debug(f"RowStore.set_all: non-sequence {type(rows).__name__} coerced to empty collection")
            self._rows = []
            return 0, 0

        attempted = len(rows)
        if self.max_rows is not None and attempted > self.max_rows:
            rows = rows[:self.max_rows]

        cloned = self.cloner.clone(list(rows))
        if not isinstance(cloned, list):
            cloned = []
        self._rows = [row if isinstance(row, dict) else (dict(row) if isinstance(row, Mapping) else {})
                      for row in cloned]
        return attempted, len(self._rows)

    def get_all(self) -> List[Dict[str, Any]]:
        return self.cloner.clone(self._rows)

    def get_row_copy(self, index: int) -> Optional[Dict[str, Any]]:
        if not self.in_range(index):
            return None
        return self.cloner.clone(self._rows[index])

    # ========== LIVE ACCESS (engine collaborators only) ==========

    def live_row(self, index: int) -> Dict[str, Any]:
        """The live dict at index. Callers must not let it escape the engine."""
        return self._rows[index]

    def replace_row(self, index: int, row: Dict[str, Any]) -> None:
        self._rows[index] = self.cloner.clone(row)

    def append_row(self, row: Dict[str, Any]) -> int:
        self._rows.append(self.cloner.clone(row))
        return len(self._rows) - 1

    def remove_row(self, index: int) -> Dict[str, Any]:
        return self._rows.pop(index)

    def move_row(self, from_index: int, to_index: int) -> None:
        """Remove at from_index and reinsert at to_index; others keep relative order."""
        row = self._rows.pop(from_index)
        self._rows.insert(to_index, row)

    # ========== QUERIES ==========

    def in_range(self, index: int) -> bool:
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(self._rows)

    def is_deleted(self, index: int) -> bool:
        return self.in_range(index) and bool(self._rows[index].get(DELETED_KEY))

    def __len__(self) -> int:
        return len(self._rows)
