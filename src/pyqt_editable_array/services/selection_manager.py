"""
Row selection and bulk operations over the selection.

The selection is a set of row indices kept within [0, row_count). Structural
changes call back into this service so indices keep pointing at the same
rows (moves) or are dropped (rows gone).
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, List, Set
import logging

from .row_store import DELETED_KEY

if TYPE_CHECKING:
    from pyqt_editable_array.forms.editable_array_manager import EditableArrayManager

logger = logging.getLogger(__name__)


class SelectionManager:
    """
    Selection state for one manager.

    Pure selection calls (select, deselect, ...) only touch the index set and
    emit selection_changed when it actually changes. Bulk operations mutate
    rows and commit exactly one history entry for the whole batch.
    """

    def __init__(self, manager: 'EditableArrayManager'):
        self._manager = manager
        self._selected: Set[int] = set()

    # ========== QUERIES ==========

    @property
    def selected_indices(self) -> List[int]:
        return sorted(self._selected)

    def is_selected(self, index: int) -> bool:
        return index in self._selected

    def get_selected_data(self) -> List[Dict[str, Any]]:
        """Deep clones of the selected rows, in index order."""
        store = self._manager.store
        return [store.get_row_copy(i) for i in self.selected_indices if store.in_range(i)]

    # ========== SELECTION CHANGES ==========

    def _set(self, indices: Set[int]) -> None:
        if indices == self._selected:
            return
        self._selected = indices
        self._manager.signals.selection_changed.emit(self.selected_indices)

    def select(self, index: int) -> None:
        if self._manager.store.in_range(index):
            self._set(self._selected | {index})

    def deselect(self, index: int) -> None:
        self._set(self._selected - {index})

    def toggle_selection(self, index: int) -> None:
        if index in self._selected:
            self.deselect(index)
        else:
            self.select(index)

    def select_all(self) -> None:
        self._set(set(range(len(self._manager.store))))

    def clear_selection(self) -> None:
        self._set(set())

    deselect_all = clear_selection

    # ========== INDEX MAINTENANCE ==========

    def prune(self) -> None:
        """Drop indices no longer inside the collection."""
        count = len(self._manager.store)
        self._set({i for i in self._selected if 0 <= i < count})

    def on_row_removed(self, index: int) -> None:
        """Row at index is gone: drop it, shift the ones after it down."""
        self._set({i if i < index else i - 1 for i in self._selected if i != index})

    def on_row_moved(self, from_index: int, to_index: int) -> None:
        """Remap indices so each stays attached to the same row."""
        def remap(i: int) -> int:
            if i == from_index:
                return to_index
            if from_index < to_index and from_index < i <= to_index:
                return i - 1
            if to_index < from_index and to_index <= i < from_index:
                return i + 1
            return i
        self._set({remap(i) for i in self._selected})

    # ========== BULK OPERATIONS ==========

    def _bulk_allowed(self, operation: str) -> bool:
        manager = self._manager
        if manager.read_only:
            logger.debug(f"{operation} refused: read-only")
            return False
        if manager.is_editing:
            logger.debug(f"{operation} refused: row {manager.editing_index} is editing")
            return False
        if not self._selected:
            logger.debug(f"{operation} skipped: empty selection")
            return False
        return True

    def bulk_update(self, partial: Mapping) -> bool:
        """Shallow-merge partial into every selected row; one history entry."""
        if not isinstance(partial, Mapping):
            logger.warning(f"bulk_update ignored: expected mapping, got {type(partial).__name__}")
            return False
        if not self._bulk_allowed("bulk_update"):
            return False

        store = self._manager.store
        updates = store.cloner.clone(dict(partial))
        for index in self.selected_indices:
            if store.in_range(index):
                store.live_row(index).update(store.cloner.clone(updates))
        logger.debug(f"bulk_update applied {list(updates.keys())} to rows {self.selected_indices}")
        self._manager._commit()
        return True

    def delete_selected(self) -> bool:
        """Soft-delete every selected row, then clear the selection."""
        if not self._bulk_allowed("delete_selected"):
            return False

        store = self._manager.store
        for index in self.selected_indices:
            if store.in_range(index):
                store.live_row(index)[DELETED_KEY] = True
        self._manager._commit()
        self.clear_selection()
        return True

    mark_selected_deleted = delete_selected
