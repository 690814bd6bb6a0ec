"""Keyed debounce: coalesce rapid updates per key into one frame-aligned flush."""

from typing import Any, Callable, Dict, Hashable, Optional
import logging

from PyQt6.QtCore import QTimer

logger = logging.getLogger(__name__)

DEFAULT_FRAME_MS = 16  # ~60Hz


class KeyedDebounceTimer:
    """
    Keyed frame-aligned debounce timer.

    Each trigger() stores the latest value for its key. When the timer fires,
    the handler receives every pending key once, with only its latest value.
    Bursts of updates to the same key therefore cost one handler call per frame
    and the final value is never dropped.

    Usage:
        self._debounce = KeyedDebounceTimer(delay_ms=16, handler=self._validate_field)

        def on_text_changed(self, index, path, value):
            self._debounce.trigger((index, path), value)
    """

    def __init__(self, delay_ms: int, handler: Callable[[Hashable, Any], None]):
        self._delay_ms = delay_ms
        self._handler = handler
        self._pending: Dict[Hashable, Any] = {}
        self._timer: Optional[QTimer] = None

    def has_pending(self, predicate: Callable[[Hashable], bool] = None) -> bool:
        if predicate is None:
            return bool(self._pending)
        return any(predicate(key) for key in self._pending)

    def trigger(self, key: Hashable, value: Any) -> None:
        """Record latest value for key and start the frame timer if idle."""
        self._pending[key] = value
        if self._timer is None:
            self._timer = QTimer()
            self._timer.setSingleShot(True)
            self._timer.timeout.connect(self.flush)
        if not self._timer.isActive():
            self._timer.start(self._delay_ms)

    def cancel(self, predicate: Callable[[Hashable], bool] = None) -> None:
        """Drop pending keys (all of them, or those matching predicate)."""
        if predicate is None:
            self._pending.clear()
        else:
            for key in [k for k in self._pending if predicate(k)]:
                del self._pending[key]
        if not self._pending and self._timer is not None:
            self._timer.stop()

    def flush(self) -> None:
        """Stop the timer and run the handler for every pending key now."""
        if self._timer is not None:
            self._timer.stop()
        pending, self._pending = self._pending, {}
        if pending:
            logger.debug(f"KeyedDebounceTimer flushing {len(pending)} key(s)")
        for key, value in pending.items():
            self._handler(key, value)
