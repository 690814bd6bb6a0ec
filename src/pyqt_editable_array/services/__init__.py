"""
Service layer.

Row storage, history, selection, reordering, encodings and the signal
channel. Services that mutate rows are constructed with their manager and
commit through it, so every change follows the same state -> history ->
notification order.
"""

from .events import MoveError, MoveErrorReason, RowLimitExceeded, RenderError, ToggleRequest, now_ms
from .signals import EditableArraySignals
from .row_store import RowStore, DELETED_KEY, IS_NEW_KEY, INTERNAL_KEYS
from .history_manager import HistoryManager, DEFAULT_MAX_HISTORY_SIZE
from .selection_manager import SelectionManager
from .reorder_engine import ReorderEngine
from .form_encoding import to_form_data, to_json, from_json, form_key

__all__ = [
    "MoveError",
    "MoveErrorReason",
    "RowLimitExceeded",
    "RenderError",
    "ToggleRequest",
    "now_ms",
    "EditableArraySignals",
    "RowStore",
    "DELETED_KEY",
    "IS_NEW_KEY",
    "INTERNAL_KEYS",
    "HistoryManager",
    "DEFAULT_MAX_HISTORY_SIZE",
    "SelectionManager",
    "ReorderEngine",
    "to_form_data",
    "to_json",
    "from_json",
    "form_key",
]
