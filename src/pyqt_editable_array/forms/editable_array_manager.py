"""
Editable array manager: the public facade over one row collection.

Owns the row store and every collaborator that works on it (history,
validation, selection, reordering, the edit session) and is the only place
that commits a change. Every committed change runs in the same order:

    1. state is mutated (store / selection / session)
    2. history records the new whole-collection snapshot
    3. data_changed carries a deep clone of the collection
    4. the renderer is handed a fresh RenderView

Listeners therefore always observe settled state with history already
consistent with it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging

from PyQt6.QtCore import QObject

from pyqt_editable_array.core.deep_clone import DeepCloner
from pyqt_editable_array.core.performance_monitor import timed, timer
from pyqt_editable_array.protocols.editor_config import EditableArrayConfig, get_editor_config
from pyqt_editable_array.protocols.renderer import NullRenderer, Renderer, RenderView, get_renderer
from pyqt_editable_array.services.events import RenderError, RowLimitExceeded, now_ms
from pyqt_editable_array.services.form_encoding import from_json, to_form_data, to_json
from pyqt_editable_array.services.history_manager import HistoryManager
from pyqt_editable_array.services.reorder_engine import ReorderEngine
from pyqt_editable_array.services.row_store import DELETED_KEY, IS_NEW_KEY, RowStore
from pyqt_editable_array.services.selection_manager import SelectionManager
from pyqt_editable_array.services.signals import EditableArraySignals
from pyqt_editable_array.validation.messages import MessageCatalog
from pyqt_editable_array.validation.validation_engine import ValidationEngine, ValidationResult
from .edit_session import EditSessionController

logger = logging.getLogger(__name__)

DIAGNOSTIC_PREFIX = "[editable-array]"


@dataclass
class EditorManagerConfig:
    """
    Construction options for EditableArrayManager.

    Anything left as None falls back to the global EditableArrayConfig
    (see set_editor_config) or the registered renderer.
    """
    config: Optional[EditableArrayConfig] = None
    schema: Optional[Any] = None
    new_item_factory: Optional[Callable[[], Dict[str, Any]]] = None
    read_only: bool = False
    renderer: Optional[Renderer] = None
    initial_data: Optional[List[Dict[str, Any]]] = None


class EditableArrayManager(QObject):
    """
    Reactive editor for an ordered collection of row dicts.

    Reads (data, get_all, selection data) always return deep clones, so the
    caller can never alias engine state. Refused operations return False and
    leave state untouched; nothing here raises for a refused request.

    Example:
        manager = EditableArrayManager(EditorManagerConfig(
            schema={"name": {"required": True, "minLength": 2}},
            new_item_factory=lambda: {"name": ""},
        ))
        manager.signals.data_changed.connect(on_change)
        manager.set_all([{"name": "Alice"}])
        manager.add_row()
        manager.update_field("name", "Bob")
        manager.save()
    """

    def __init__(self, manager_config: Optional[EditorManagerConfig] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        manager_config = manager_config or EditorManagerConfig()
        self.config = manager_config.config or get_editor_config()

        self._debug = self.config.debug
        self.name = self.config.name
        self.cloner = DeepCloner(max_depth=self.config.clone_max_depth,
                                 max_properties=self.config.clone_max_properties,
                                 debug=self._debug)
        self.signals = EditableArraySignals(self)

        self.store = RowStore(cloner=self.cloner, max_rows=self.config.max_rows_limit)
        self.history = HistoryManager(max_size=self.config.max_history_size, cloner=self.cloner)
        self.validation = ValidationEngine(schema=manager_config.schema,
                                           messages=MessageCatalog(self.config.messages),
                                           frame_ms=self.config.validation_frame_ms,
                                           parent=self)
        self.selection = SelectionManager(self)
        self.reorder_engine = ReorderEngine(self)
        self.session = EditSessionController(self)

        self.new_item_factory = manager_config.new_item_factory
        self._read_only = bool(manager_config.read_only)
        self.renderer: Renderer = manager_config.renderer or get_renderer()
        self._last_error: Optional[Exception] = None

        self.validation.validation_failed.connect(self.signals.validation_failed.emit)
        self.validation.field_validated.connect(self._on_field_validated)

        if manager_config.initial_data is not None:
            self.set_all(manager_config.initial_data)

    # ========== COMMIT / RENDER ==========

    def _commit(self) -> None:
        """Record the current collection in history, notify, re-render."""
        self.history.push(self.store.get_all())
        self.signals.data_changed.emit(self.store.get_all())
        self._render()

    def _render(self) -> None:
        if isinstance(self.renderer, NullRenderer):
            return
        view = RenderView(
            rows=self.store.get_all(),
            editing_index=self.session.editing_index,
            selected_indices=self.selection.selected_indices,
            errors={index: dict(result.errors) for index, result in self.validation.all_results().items()},
            read_only=self._read_only,
        )
        try:
            self.renderer.render(view)
        except Exception as e:
            self._record_error(e, "render")

    def _record_error(self, error: Exception, context: str) -> None:
        self._last_error = error
        if self._debug:
            logger.error(f"{DIAGNOSTIC_PREFIX} {context} error: {error}", exc_info=error)
        else:
            logger.debug(f"{context} error contained: {error}")
        self.signals.render_error.emit(RenderError(error, context))

    def _on_field_validated(self, index: int, path: str) -> None:
        if index == self.session.editing_index:
            self.signals.field_validated.emit(index, path)
            self._render()

    # ========== DATA ==========

    @property
    def data(self) -> List[Dict[str, Any]]:
        return self.store.get_all()

    @data.setter
    def data(self, rows: Any) -> None:
        self.set_all(rows)

    def get_all(self) -> List[Dict[str, Any]]:
        return self.store.get_all()

    @timed("set_all")
    def set_all(self, rows: Any) -> None:
        """
        Replace the whole collection with a deep clone of rows.

        Allowed in read-only mode. Any active edit session is abandoned, the
        selection is pruned to the new length and stored validation results
        are dropped. Truncation by max_rows_limit emits row_limit_exceeded.
        """
        attempted, kept = self.store.set_all(rows)
        if kept < attempted:
            self._report_row_limit(attempted)

        self.session.abandon()
        self.selection.prune()
        self.validation.cancel_pending()
        self.validation.clear_results()
        self._commit()

    def _report_row_limit(self, attempted: int) -> None:
        limit = self.store.max_rows
        message = f"Row limit of {limit} exceeded"
        if self._debug:
            logger.warning(f"{DIAGNOSTIC_PREFIX} {message}: {attempted} rows offered, {limit} kept")
        else:
            logger.debug(f"{message}: {attempted} rows offered")
        self.signals.row_limit_exceeded.emit(RowLimitExceeded(
            limit=limit, attempted=attempted, message=message, timestamp=now_ms()))

    @property
    def value(self) -> str:
        """JSON text of the collection."""
        return to_json(self.store.get_all())

    @value.setter
    def value(self, text: Any) -> None:
        self.set_all(from_json(text))

    def __len__(self) -> int:
        return len(self.store)

    # ========== CONFIGURATION ==========

    @property
    def schema(self):
        return self.validation.schema

    @schema.setter
    def schema(self, schema: Any) -> None:
        self.validation.set_schema(schema)
        self._render()

    @property
    def messages(self) -> Dict[str, str]:
        return self.validation.messages.overrides

    def set_messages(self, overrides: Mapping) -> None:
        self.validation.messages.update(overrides)

    @property
    def read_only(self) -> bool:
        return self._read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        value = bool(value)
        if value == self._read_only:
            return
        self._read_only = value
        self._render()

    def set_read_only(self, value: bool) -> None:
        self.read_only = value

    @property
    def debug(self) -> bool:
        return self._debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._debug = bool(value)
        self.cloner.debug = self._debug

    @property
    def max_history_size(self) -> int:
        return self.history.max_size

    @max_history_size.setter
    def max_history_size(self, value: int) -> None:
        self.history.max_size = value

    @property
    def max_rows_limit(self) -> Optional[int]:
        return self.store.max_rows

    @max_rows_limit.setter
    def max_rows_limit(self, value: Optional[int]) -> None:
        self.store.max_rows = None if value is None else max(0, int(value))

    # ========== ROW OPERATIONS ==========

    def add_row(self) -> bool:
        """Append a row from new_item_factory, flagged new, and begin editing it."""
        if self._read_only:
            logger.debug("add_row refused: read-only")
            return False
        if self.session.is_editing:
            logger.debug(f"add_row refused: row {self.session.editing_index} is editing")
            return False
        limit = self.store.max_rows
        if limit is not None and len(self.store) >= limit:
            self._report_row_limit(len(self.store) + 1)
            return False

        index = len(self.store)
        if not self.session.request_toggle(index, True):
            return False

        row = self._new_item()
        row[IS_NEW_KEY] = True
        self.store.append_row(row)
        self._commit()
        self.session.begin(index, ask=False)
        return True

    def _new_item(self) -> Dict[str, Any]:
        if self.new_item_factory is None:
            return {}
        try:
            item = self.new_item_factory()
        except Exception as e:
            logger.warning(f"new_item_factory raised, using empty row: {e}")
            return {}
        if not isinstance(item, Mapping):
            logger.warning(f"new_item_factory returned {type(item).__name__}, using empty row")
            return {}
        return dict(self.cloner.clone(dict(item)))

    def _set_deleted(self, index: int, deleted: bool) -> bool:
        if self._read_only or self.session.is_editing or not self.store.in_range(index):
            return False
        row = self.store.live_row(index)
        if DELETED_KEY in row and bool(row[DELETED_KEY]) == deleted:
            return False
        if not deleted and DELETED_KEY not in row:
            return False
        row[DELETED_KEY] = deleted
        self._commit()
        return True

    def delete_row(self, index: int) -> bool:
        """Soft-delete: the row stays in place with deleted=True."""
        return self._set_deleted(index, True)

    def restore_row(self, index: int) -> bool:
        return self._set_deleted(index, False)

    def is_deleted(self, index: int) -> bool:
        return self.store.is_deleted(index)

    # ========== EDIT SESSION ==========

    @property
    def editing_index(self) -> Optional[int]:
        return self.session.editing_index

    @property
    def is_editing(self) -> bool:
        return self.session.is_editing

    def toggle_edit(self, index: int) -> bool:
        return self.session.toggle(index)

    def begin_edit(self, index: int) -> bool:
        return self.session.begin(index)

    def save(self) -> bool:
        return self.session.save()

    def cancel(self) -> bool:
        return self.session.cancel()

    def update_field(self, path: str, value: Any) -> bool:
        return self.session.update_field(path, value)

    def get_field(self, index: int, path: str, default: Any = None) -> Any:
        return self.session.get_field(index, path, default)

    def display_value(self, index: int, path: str) -> str:
        return self.session.display_value(index, path)

    # ========== SELECTION ==========

    @property
    def selected_indices(self) -> List[int]:
        return self.selection.selected_indices

    def select(self, index: int) -> None:
        self.selection.select(index)

    def deselect(self, index: int) -> None:
        self.selection.deselect(index)

    def toggle_selection(self, index: int) -> None:
        self.selection.toggle_selection(index)

    def select_all(self) -> None:
        self.selection.select_all()

    def clear_selection(self) -> None:
        self.selection.clear_selection()

    def get_selected_data(self) -> List[Dict[str, Any]]:
        return self.selection.get_selected_data()

    def bulk_update(self, partial: Mapping) -> bool:
        return self.selection.bulk_update(partial)

    def delete_selected(self) -> bool:
        return self.selection.delete_selected()

    # ========== REORDER ==========

    def move_to(self, from_index: int, to_index: int) -> bool:
        return self.reorder_engine.move_to(from_index, to_index)

    def move_up(self, index: int) -> bool:
        return self.reorder_engine.move_up(index)

    def move_down(self, index: int) -> bool:
        return self.reorder_engine.move_down(index)

    # ========== HISTORY ==========

    def _restore_snapshot(self, rows: List[Dict[str, Any]]) -> None:
        self.store.set_all(rows)
        self.selection.prune()
        self.validation.cancel_pending()
        self.validation.clear_results()

    def undo(self) -> bool:
        if self._read_only or self.session.is_editing:
            return False
        state = self.history.undo()
        if state is None:
            return False
        self._restore_snapshot(state)
        self.signals.data_changed.emit(self.store.get_all())
        self.signals.undone.emit(self.store.get_all())
        self._render()
        return True

    def redo(self) -> bool:
        if self._read_only or self.session.is_editing:
            return False
        state = self.history.redo()
        if state is None:
            return False
        self._restore_snapshot(state)
        self.signals.data_changed.emit(self.store.get_all())
        self.signals.redone.emit(self.store.get_all())
        self._render()
        return True

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def clear_history(self) -> bool:
        if self._read_only:
            return False
        self.history.clear()
        return True

    # ========== VALIDATION / FORM INTEGRATION ==========

    def check_validity(self) -> bool:
        """True iff every non-deleted row passes the schema. Stores nothing."""
        with timer("check_validity", rows=len(self.store), log_args=True):
            for index in range(len(self.store)):
                if self.store.is_deleted(index):
                    continue
                if not self.validation.validate_row(self.store.live_row(index), index=index, store=False).is_valid:
                    return False
        return True

    def report_validity(self) -> bool:
        """Like check_validity, but stores every row's errors and re-renders."""
        valid = True
        with timer("report_validity", rows=len(self.store), log_args=True):
            for index in range(len(self.store)):
                if self.store.is_deleted(index):
                    self.validation.clear_results(index)
                    continue
                if not self.validation.validate_row(self.store.live_row(index), index=index).is_valid:
                    valid = False
        self._render()
        return valid

    def validate_row(self, index: int) -> ValidationResult:
        if not self.store.in_range(index):
            return ValidationResult()
        return self.validation.validate_row(self.store.live_row(index), index=index)

    def errors_for(self, index: int, path: Optional[str] = None):
        """Stored errors for one field, or the row's whole ValidationResult when path is None."""
        if path is None:
            return self.validation.results_for(index)
        return self.validation.errors_for(index, path)

    def wait_for_validation(self, timeout_ms: int = 1000) -> bool:
        return self.validation.wait_for_pending(timeout_ms)

    def to_form_data(self) -> Dict[str, str]:
        return to_form_data(self.store.get_all(), self.name)

    def form_reset(self) -> None:
        """Host form was reset: clear the collection."""
        self.set_all([])

    def form_disabled(self, disabled: bool) -> None:
        """Host form (or fieldset) disabled state maps onto read-only."""
        self.read_only = disabled

    # ========== ERROR BOUNDARY ==========

    @property
    def has_error(self) -> bool:
        return self._last_error is not None

    @property
    def last_error(self) -> Optional[Exception]:
        return self._last_error

    def clear_error(self) -> None:
        self._last_error = None
        self._render()

    # ========== LIFECYCLE ==========

    def teardown(self) -> None:
        """Stop timers and background validators. The manager stays readable."""
        self.session.abandon()
        self.validation.teardown()
