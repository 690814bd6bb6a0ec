"""
Edit session state machine.

States:
    Idle                      no row is editing
    Editing(index, snapshot)  exactly one row is editing; snapshot is a deep
                              clone of the row taken when editing began

The state is one value owned by the controller, so "which row is editing"
is a field read, and "at most one row editing" holds by construction.

Transitions:
    Idle -> Editing(i)   begin(i); refused when read-only, out of range,
                         already editing, or vetoed via before_toggle_mode
    Editing(i) -> Idle   save(); blocked while the row is invalid or an
                         async rule is unresolved
    Editing(i) -> Idle   cancel(); restores the snapshot, or removes the
                         row if it was added by add_row; vetoable

Field edits write straight into the live row, which is why cancel restores
from the snapshot instead of replaying edits backwards.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional, Union
import logging

from pyqt_editable_array.core.path_utils import get_path, set_path, split_path, format_display_value
from pyqt_editable_array.services.events import ToggleRequest
from pyqt_editable_array.services.row_store import IS_NEW_KEY

if TYPE_CHECKING:
    from .editable_array_manager import EditableArrayManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Editing:
    index: int
    snapshot: Dict[str, Any]


EditState = Union[Idle, Editing]

IDLE = Idle()


class EditSessionController:
    """Owns the single edit-session state for one manager."""

    def __init__(self, manager: 'EditableArrayManager'):
        self._manager = manager
        self._state: EditState = IDLE

    # ========== STATE ==========

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def editing_index(self) -> Optional[int]:
        return self._state.index if isinstance(self._state, Editing) else None

    @property
    def is_editing(self) -> bool:
        return isinstance(self._state, Editing)

    def snapshot(self) -> Optional[Dict[str, Any]]:
        """Deep clone of the pre-edit row, or None when idle."""
        if not isinstance(self._state, Editing):
            return None
        return self._manager.cloner.clone(self._state.snapshot)

    def request_toggle(self, index: int, editing: bool) -> bool:
        """Emit the cancelable before_toggle_mode; True if nobody vetoed."""
        request = ToggleRequest(index, editing)
        self._manager.signals.before_toggle_mode.emit(request)
        if request.cancelled:
            logger.debug(f"Toggle of row {index} to editing={editing} vetoed by listener")
            return False
        return True

    # ========== TRANSITIONS ==========

    def toggle(self, index: int) -> bool:
        """Begin editing index, or save it if it is the row being edited."""
        if self.editing_index == index:
            return self.save()
        return self.begin(index)

    def begin(self, index: int, ask: bool = True) -> bool:
        """Enter edit mode on index. ask=False skips before_toggle_mode when the caller already asked."""
        manager = self._manager
        if manager.read_only:
            logger.debug(f"Edit of row {index} refused: read-only")
            return False
        if not manager.store.in_range(index):
            logger.debug(f"Edit of row {index} refused: out of range")
            return False
        if self.is_editing:
            logger.debug(f"Edit of row {index} refused: row {self.editing_index} is already editing")
            return False
        if ask and not self.request_toggle(index, True):
            return False

        snapshot = manager.cloner.clone(manager.store.live_row(index))
        self._state = Editing(index, snapshot)
        manager.validation.clear_results(index)

        manager.signals.after_toggle_mode.emit(index, True)
        manager._render()
        return True

    def save(self) -> bool:
        manager = self._manager
        if manager.read_only or not isinstance(self._state, Editing):
            return False

        index = self._state.index
        row = manager.store.live_row(index)

        manager.validation.flush()
        result = manager.validation.validate_row(row, index=index)
        if not result.is_valid:
            logger.debug(f"Save of row {index} blocked: invalid fields {list(result.errors.keys())}")
            manager._render()
            return False

        row.pop(IS_NEW_KEY, None)
        self._state = IDLE
        manager.validation.cancel_pending(index)
        manager.validation.clear_results(index)

        manager._commit()
        manager.signals.after_toggle_mode.emit(index, False)
        return True

    def cancel(self) -> bool:
        manager = self._manager
        if manager.read_only or not isinstance(self._state, Editing):
            return False

        index = self._state.index
        if not self.request_toggle(index, False):
            return False

        snapshot = self._state.snapshot
        self._state = IDLE

        if snapshot.get(IS_NEW_KEY):
            # Later rows shift down, so no stored result keeps its index.
            manager.validation.cancel_pending()
            manager.validation.clear_results()
            manager.store.remove_row(index)
            manager.selection.on_row_removed(index)
            manager._commit()
        else:
            manager.validation.cancel_pending(index)
            manager.validation.clear_results(index)
            manager.store.replace_row(index, snapshot)
            manager._render()

        manager.signals.after_toggle_mode.emit(index, False)
        return True

    def abandon(self) -> None:
        """Drop the session without restoring (collection is being replaced)."""
        if not isinstance(self._state, Editing):
            return
        index = self._state.index
        self._state = IDLE
        self._manager.validation.cancel_pending(index)
        logger.debug(f"Edit session on row {index} abandoned")
        self._manager.signals.after_toggle_mode.emit(index, False)

    # ========== FIELD ACCESS ==========

    def update_field(self, path: str, value: Any) -> bool:
        """Write value into the editing row at dotted path and queue re-validation."""
        manager = self._manager
        if manager.read_only or not isinstance(self._state, Editing):
            return False
        parts = split_path(path)
        if not parts or parts[0] == IS_NEW_KEY:
            logger.debug(f"update_field refused for path {path!r}")
            return False

        index = self._state.index
        try:
            set_path(manager.store.live_row(index), path, manager.cloner.clone(value))
        except ValueError as e:
            logger.debug(f"update_field refused: {e}")
            return False
        manager.validation.schedule_field_validation(index, path, value)
        return True

    def get_field(self, index: int, path: str, default: Any = None) -> Any:
        store = self._manager.store
        if not store.in_range(index):
            return default
        return self._manager.cloner.clone(get_path(store.live_row(index), path, default))

    def display_value(self, index: int, path: str) -> str:
        return format_display_value(self.get_field(index, path))
