"""
Typed notification channel between the engine and its host.

One QObject per manager carries every outward event. Connections made from
the manager's thread are direct, so emission is synchronous: a listener
reacting to data_changed sees a store that is already settled and already
recorded in history.

Listeners must not raise. PyQt treats an exception escaping a slot as fatal
unless the application installs its own sys.excepthook.

Event taxonomy (host-facing name -> signal):
    datachanged        data_changed(list)                 authoritative rows changed
    beforetogglemode   before_toggle_mode(ToggleRequest)  cancelable
    aftertogglemode    after_toggle_mode(index, editing)
    reorder            reordered(from_index, to_index)
    moveerror          move_error(MoveError)
    selectionchanged   selection_changed(list)            sorted selected indices
    undo / redo        undone(list) / redone(list)
    validationfailed   validation_failed(ValidationFailure)
    rendererror        render_error(RenderError)
    rowlimitexceeded   row_limit_exceeded(RowLimitExceeded)
"""

from PyQt6.QtCore import QObject, pyqtSignal


class EditableArraySignals(QObject):
    """Signals emitted by EditableArrayManager. Payloads are deep clones."""

    data_changed = pyqtSignal(object)         # List[dict]
    before_toggle_mode = pyqtSignal(object)   # ToggleRequest
    after_toggle_mode = pyqtSignal(int, bool)  # index, editing
    reordered = pyqtSignal(int, int)          # from_index, to_index
    move_error = pyqtSignal(object)           # MoveError
    selection_changed = pyqtSignal(object)    # List[int]
    undone = pyqtSignal(object)               # List[dict]
    redone = pyqtSignal(object)               # List[dict]
    validation_failed = pyqtSignal(object)    # ValidationFailure
    field_validated = pyqtSignal(int, str)    # index, path (editing row only)
    render_error = pyqtSignal(object)         # RenderError
    row_limit_exceeded = pyqtSignal(object)   # RowLimitExceeded
