"""
pyqt-editable-array: reactive editing engine for arrays of records on PyQt6.

Manages an ordered collection of row dicts edited one row at a time, with
schema validation, bounded undo/redo, selection with bulk operations,
reordering and form integration. Display is delegated to a host Renderer.

Architecture:
- Tier 1 (Core): Bounded deep clone, dotted paths, debounce, background tasks
- Tier 2 (Protocols): Global config and the Renderer ABC
- Tier 3 (Validation): Rule variants, message catalog, sync/batched/async engine
- Tier 4 (Services): Row store, history, selection, reorder, encodings, signals
- Tier 5 (Forms): EditableArrayManager facade and the edit-session state machine

Key Features:
- Single edit session with snapshot-based cancel
- Every committed change: state, then history, then data_changed
- Async validators on QThread with stale-result suppression
- Renderer failures contained by an error boundary
"""

__version__ = "0.1.0"

from pyqt_editable_array.forms.editable_array_manager import EditableArrayManager, EditorManagerConfig
from pyqt_editable_array.protocols.editor_config import EditableArrayConfig, set_editor_config, get_editor_config
from pyqt_editable_array.protocols.renderer import Renderer, RenderView, register_renderer

__all__ = [
    "__version__",
    "EditableArrayManager",
    "EditorManagerConfig",
    "EditableArrayConfig",
    "set_editor_config",
    "get_editor_config",
    "Renderer",
    "RenderView",
    "register_renderer",
]
