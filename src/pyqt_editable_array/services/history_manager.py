"""
Bounded undo/redo history of whole-collection snapshots.

The past stack's top is always the current committed state, so undo needs
at least two entries: the state being left and the one returned to.
max_size counts undoable steps; the past stack therefore holds at most
max_size + 1 entries and evicts from the bottom beyond that.
"""

from typing import Any, List, Optional
import logging

from pyqt_editable_array.core.deep_clone import DeepCloner

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 50


class HistoryManager:
    """
    Two-stack history. Entries are deep clones owned by the manager; undo()
    and redo() hand back fresh clones, never the stored entry.

    Usage:
        history = HistoryManager(max_size=3)
        history.push(rows)          # after every committed change
        previous = history.undo()   # None when nothing to undo
    """

    def __init__(self, max_size: int = DEFAULT_MAX_HISTORY_SIZE, cloner: Optional[DeepCloner] = None):
        self.cloner = cloner or DeepCloner()
        self._past: List[Any] = []
        self._future: List[Any] = []
        self._max_size = max(0, int(max_size))

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int) -> None:
        self._max_size = max(0, int(value))
        self._trim()

    def push(self, snapshot: Any) -> None:
        """Record a committed state; discards the redo branch."""
        self._past.append(self.cloner.clone(snapshot))
        self._future.clear()
        self._trim()

    def _trim(self) -> None:
        excess = len(self._past) - (self._max_size + 1)
        if excess > 0:
            del self._past[:excess]
            logger.debug(f"History evicted {excess} oldest entr{'y' if excess == 1 else 'ies'}")

    def undo(self) -> Optional[Any]:
        """Step back one state and return it, or None if there is no prior state."""
        if not self.can_undo:
            return None
        self._future.append(self._past.pop())
        return self.cloner.clone(self._past[-1])

    def redo(self) -> Optional[Any]:
        """Re-apply the most recently undone state and return it, or None."""
        if not self.can_redo:
            return None
        state = self._future.pop()
        self._past.append(state)
        return self.cloner.clone(state)

    @property
    def can_undo(self) -> bool:
        return len(self._past) >= 2

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def undo_depth(self) -> int:
        return max(0, len(self._past) - 1)

    def current(self) -> Optional[Any]:
        return self.cloner.clone(self._past[-1]) if self._past else None

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
