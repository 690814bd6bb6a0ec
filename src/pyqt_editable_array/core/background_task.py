"""Background task for out-of-band validators, with cancellation."""

import asyncio
import inspect
from typing import Any, Callable, Tuple

from PyQt6.QtCore import QThread, pyqtSignal

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time during teardown


class BackgroundTask(QThread):
    """
    Run a callable (or coroutine function) off the calling thread.

    Results are delivered through queued signals, so handlers run on the
    thread that owns the task once its event loop spins.

    Usage:
        task = BackgroundTask(target=check_username_free, args=("alice",))
        task.result_ready.connect(on_result)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        # Later:
        task.cancel()  # Signals won't emit after this

    Coroutine functions and callables returning awaitables are driven to
    completion with asyncio.run() inside the worker thread.
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(self, target: Callable[..., Any], args: Tuple = (), kwargs: dict = None, parent=None):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if inspect.isawaitable(result):
                result = asyncio.run(_await(result))
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)

    def cancel(self):
        """Cancel task; signals won't emit after this."""
        self.cancelled = True

    def cleanup(self, wait_ms: int = CLEANUP_WAIT_MS):
        """Cancel and give the worker a moment to finish."""
        self.cancel()
        if self.isRunning():
            self.wait(wait_ms)


async def _await(awaitable):
    return await awaitable
