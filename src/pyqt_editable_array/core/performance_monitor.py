"""Timing of whole-collection operations.

Store-wide validation and bulk assignment scale with row count, so the manager
wraps them here. Output goes to one named logger; nothing is written unless
the application enables that logger or sets a performance log file.
"""

import functools
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional

from pyqt_editable_array.protocols.editor_config import get_editor_config

_config = get_editor_config()
perf_logger = logging.getLogger(_config.performance_logger_name)

if _config.performance_log_file:
    _file_handler = logging.FileHandler(_config.performance_log_file)
    _file_handler.setLevel(logging.DEBUG)
    _file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(message)s'))
    perf_logger.addHandler(_file_handler)


def _report(operation_name: str, started: float, threshold_ms: float, context: Optional[Dict[str, Any]]) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms < threshold_ms:
        return
    detail = ""
    if context:
        detail = " (" + ", ".join(f"{key}={value}" for key, value in context.items()) + ")"
    perf_logger.debug(f"{operation_name} took {elapsed_ms:.2f}ms{detail}")


@contextmanager
def timer(operation_name: str, threshold_ms: float = 0.0, log_args: bool = False, **kwargs):
    """Time the enclosed block.

    Args:
        operation_name: Label for the log line
        threshold_ms: Skip the log line for faster blocks
        log_args: Append kwargs to the log line
        **kwargs: Context such as the row count

    Example:
        with timer("check_validity", rows=len(store), log_args=True):
            ...
    """
    started = time.perf_counter()
    try:
        yield
    finally:
        _report(operation_name, started, threshold_ms, kwargs if log_args else None)


def timed(operation_name: Optional[str] = None, threshold_ms: float = 0.0):
    """Decorator form of timer(); the label defaults to the qualified function name."""
    def decorator(func: Callable) -> Callable:
        name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _report(name, started, threshold_ms, None)

        return wrapper
    return decorator
