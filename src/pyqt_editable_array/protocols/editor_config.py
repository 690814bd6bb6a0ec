"""Base configuration for editable-array managers.

Provides process-wide defaults that applications can override once at startup.
"""

from typing import Dict, Optional
from dataclasses import dataclass, field

from pyqt_editable_array.core.deep_clone import DEFAULT_MAX_DEPTH, DEFAULT_MAX_PROPERTIES
from pyqt_editable_array.core.debounce_timer import DEFAULT_FRAME_MS


@dataclass
class EditableArrayConfig:
    """Base configuration for editable-array behavior.

    Applications can subclass this to provide custom configuration.

    Attributes:
        name: Prefix used for form-encoded keys ("<name>[<i>].<path>")
        max_history_size: Number of undoable steps kept
        max_rows_limit: Truncate assigned data beyond this many rows (None = unlimited)
        clone_max_depth: DeepCloner depth limit
        clone_max_properties: DeepCloner breadth limit per clone call
        validation_frame_ms: Batching delay for field re-validation while typing
        debug: Diagnostic mode (limit hits and render errors logged at warning/error)
        messages: Validation message overrides keyed by rule name
    """

    name: str = "items"
    max_history_size: int = 50
    max_rows_limit: Optional[int] = None
    clone_max_depth: int = DEFAULT_MAX_DEPTH
    clone_max_properties: int = DEFAULT_MAX_PROPERTIES
    validation_frame_ms: int = DEFAULT_FRAME_MS
    debug: bool = False
    messages: Dict[str, str] = field(default_factory=dict)
    performance_logger_name: str = "pyqt_editable_array.performance"
    performance_log_file: Optional[str] = None


# Global config instance (set by application)
_editor_config: Optional[EditableArrayConfig] = None


def set_editor_config(config: Optional[EditableArrayConfig]) -> None:
    """Set the global editable-array configuration.

    Args:
        config: EditableArrayConfig instance, or None to restore defaults
    """
    global _editor_config
    _editor_config = config


def get_editor_config() -> EditableArrayConfig:
    """Get the current editable-array configuration.

    Returns:
        Current EditableArrayConfig or default if not set
    """
    if _editor_config is None:
        return EditableArrayConfig()
    return _editor_config
