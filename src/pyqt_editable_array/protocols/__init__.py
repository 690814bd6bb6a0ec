"""
Protocol definitions and configuration hooks.

Applications customize the engine through these: a process-wide config and
the renderer that projects state onto a display.
"""

from .editor_config import EditableArrayConfig, set_editor_config, get_editor_config
from .renderer import RenderView, Renderer, NullRenderer, register_renderer, get_renderer

__all__ = [
    "EditableArrayConfig",
    "set_editor_config",
    "get_editor_config",
    "RenderView",
    "Renderer",
    "NullRenderer",
    "register_renderer",
    "get_renderer",
]
