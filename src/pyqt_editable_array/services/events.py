"""
Event payloads emitted by EditableArraySignals.

Structured payloads are frozen dataclasses so listeners cannot alter what
other listeners see. ToggleRequest is the one mutable payload: it is the
cancelable "before toggle" signal, vetoed by calling cancel().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import time


def now_ms() -> int:
    """Epoch milliseconds, the timestamp unit of every event payload."""
    return int(time.time() * 1000)


class MoveErrorReason(Enum):
    INVALID_FROM_INDEX = "invalid_from_index"
    INVALID_TO_INDEX = "invalid_to_index"
    EDITING = "editing"
    READONLY = "readonly"


@dataclass(frozen=True)
class MoveError:
    """A move request was rejected, or (INVALID_TO_INDEX) performed at a clamped target."""
    from_index: int
    to_index: int
    reason: MoveErrorReason
    message: str
    timestamp: int
    clamped_to_index: Optional[int] = None


@dataclass(frozen=True)
class RowLimitExceeded:
    limit: int
    attempted: int
    message: str
    timestamp: int


@dataclass(frozen=True)
class RenderError:
    error: Exception
    context: str


class ToggleRequest:
    """
    Cancelable notice that row `index` is about to enter (editing=True) or
    leave (editing=False) edit mode.

    Listeners connected to before_toggle_mode call request.cancel() to veto.
    Delivery is synchronous, so the veto is seen before the transition.
    """

    __slots__ = ("index", "editing", "_cancelled")

    def __init__(self, index: int, editing: bool):
        self.index = index
        self.editing = editing
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"ToggleRequest(index={self.index}, editing={self.editing}, cancelled={self._cancelled})"
