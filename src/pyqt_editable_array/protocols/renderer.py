"""Renderer protocol: the external layer that projects row state onto a display.

The engine owns no display code. A host registers a Renderer and the manager
hands it a RenderView after every state change. Exceptions raised by the
renderer are contained by the manager's error boundary.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RenderView:
    """Read-only projection of manager state for one render pass.

    rows are deep clones; mutating them has no effect on the manager.
    """
    rows: List[Dict[str, Any]]
    editing_index: Optional[int]
    selected_indices: List[int]
    errors: Dict[int, Dict[str, List[Any]]] = field(default_factory=dict)
    read_only: bool = False


class Renderer(ABC):
    """Projects a RenderView onto a display surface."""

    @abstractmethod
    def render(self, view: RenderView) -> None:
        """Render the full view. May raise; the manager records the error."""
        ...


class NullRenderer(Renderer):
    """Renderer that draws nothing. Used when no host renderer is registered."""

    def render(self, view: RenderView) -> None:
        return None


_default_renderer: Optional[Renderer] = None


def register_renderer(renderer: Optional[Renderer]) -> None:
    """Register the renderer used by managers created without an explicit one."""
    global _default_renderer
    _default_renderer = renderer


def get_renderer() -> Renderer:
    """Return the registered renderer, or a NullRenderer."""
    if _default_renderer is None:
        return NullRenderer()
    return _default_renderer
