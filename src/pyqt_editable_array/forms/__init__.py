"""
Editable array manager and its edit-session state machine.

EditableArrayManager is the public facade; everything else in the package
is reachable from it.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .editable_array_manager import EditableArrayManager, EditorManagerConfig
    from .edit_session import EditSessionController, Editing, Idle

_EXPORTS = {
    "EditableArrayManager": ("pyqt_editable_array.forms.editable_array_manager", "EditableArrayManager"),
    "EditorManagerConfig": ("pyqt_editable_array.forms.editable_array_manager", "EditorManagerConfig"),
    "DIAGNOSTIC_PREFIX": ("pyqt_editable_array.forms.editable_array_manager", "DIAGNOSTIC_PREFIX"),
    "EditSessionController": ("pyqt_editable_array.forms.edit_session", "EditSessionController"),
    "Editing": ("pyqt_editable_array.forms.edit_session", "Editing"),
    "Idle": ("pyqt_editable_array.forms.edit_session", "Idle"),
    "EditState": ("pyqt_editable_array.forms.edit_session", "EditState"),
}


def __getattr__(name: str):
    if name in _EXPORTS:
        module_name, attr = _EXPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_EXPORTS.keys())
