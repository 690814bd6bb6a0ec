"""
Row reordering.

move_to() validates in a fixed order and reports problems as structured
MoveError events rather than exceptions. An out-of-range target is not a
rejection: the move happens at the clamped position and the MoveError with
reason INVALID_TO_INDEX is advisory.
"""

from typing import TYPE_CHECKING
import logging

from .events import MoveError, MoveErrorReason, now_ms

if TYPE_CHECKING:
    from pyqt_editable_array.forms.editable_array_manager import EditableArrayManager

logger = logging.getLogger(__name__)


class ReorderEngine:
    """Validates and applies row moves for one manager."""

    def __init__(self, manager: 'EditableArrayManager'):
        self._manager = manager

    def _emit_error(self, from_index, to_index, reason: MoveErrorReason, message: str,
                    clamped_to_index=None) -> None:
        logger.debug(f"Move {from_index} -> {to_index}: {reason.value} ({message})")
        self._manager.signals.move_error.emit(MoveError(
            from_index=from_index,
            to_index=to_index,
            reason=reason,
            message=message,
            timestamp=now_ms(),
            clamped_to_index=clamped_to_index,
        ))

    def move_to(self, from_index: int, to_index: int) -> bool:
        """
        Move the row at from_index to to_index.

        Returns:
            True if the collection changed
        """
        manager = self._manager
        store = manager.store
        length = len(store)

        if not store.in_range(from_index):
            self._emit_error(from_index, to_index, MoveErrorReason.INVALID_FROM_INDEX,
                             f"Invalid from index {from_index}: must be between 0 and {length - 1}")
            return False

        if manager.is_editing:
            self._emit_error(from_index, to_index, MoveErrorReason.EDITING,
                             f"Cannot move rows while row {manager.editing_index} is being edited")
            return False

        if manager.read_only:
            self._emit_error(from_index, to_index, MoveErrorReason.READONLY,
                             "Cannot move rows in read-only mode")
            return False

        try:
            target = int(to_index)
        except (TypeError, ValueError):
            target = length - 1
        clamped = max(0, min(target, length - 1))
        if clamped != to_index:
            self._emit_error(from_index, to_index, MoveErrorReason.INVALID_TO_INDEX,
                             f"Target index {to_index} out of range, clamped to {clamped}",
                             clamped_to_index=clamped)

        if clamped == from_index:
            return False

        store.move_row(from_index, clamped)
        manager.selection.on_row_moved(from_index, clamped)
        manager.validation.cancel_pending()
        manager.validation.clear_results()
        manager._commit()
        manager.signals.reordered.emit(from_index, clamped)
        return True

    def move_up(self, index: int) -> bool:
        """Swap with the row above; the first row stays put."""
        if not self._manager.store.in_range(index) or index == 0:
            return False
        return self.move_to(index, index - 1)

    def move_down(self, index: int) -> bool:
        """Swap with the row below; the last row stays put."""
        store = self._manager.store
        if not store.in_range(index) or index == len(store) - 1:
            return False
        return self.move_to(index, index + 1)
