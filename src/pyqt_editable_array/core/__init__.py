"""
Core utilities.

Foundational helpers with no domain-specific logic: bounded deep clone,
dotted-path access, keyed debounce and background tasks.
"""

from .deep_clone import DeepCloner, deep_clone, DEFAULT_MAX_DEPTH, DEFAULT_MAX_PROPERTIES
from .path_utils import get_path, set_path, split_path, iter_leaf_paths, format_display_value
from .debounce_timer import KeyedDebounceTimer
from .background_task import BackgroundTask

__all__ = [
    "DeepCloner",
    "deep_clone",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_PROPERTIES",
    "get_path",
    "set_path",
    "split_path",
    "iter_leaf_paths",
    "format_display_value",
    "KeyedDebounceTimer",
    "BackgroundTask",
]
