"""
Schema-driven validation engine.

Evaluates every rule of every schema field (no short-circuit), so a field
reports all of its problems at once. Three timing modes share one code path:

1. Immediate: validate_row() / validate_field() run to completion
2. Batched: schedule_field_validation() coalesces keystrokes per field onto
   one frame-aligned flush, validating only the latest value
3. Out of band: Async rules run in a BackgroundTask; until they resolve the
   field carries a pending error, which blocks save

Async results are applied only if their token is still current. Cancelling a
row's session (cancel_pending) invalidates its tokens, so a slow validator
can never write into a later, unrelated edit.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
import itertools
import logging
import time

from PyQt6.QtCore import QObject, QCoreApplication, QThread, pyqtSignal

from pyqt_editable_array.core.background_task import BackgroundTask, CLEANUP_WAIT_MS
from pyqt_editable_array.core.debounce_timer import KeyedDebounceTimer, DEFAULT_FRAME_MS
from pyqt_editable_array.core.deep_clone import deep_clone
from pyqt_editable_array.core.path_utils import get_path
from .messages import MessageCatalog
from .rule_evaluator import RuleEvaluator
from .rule_types import Async, Schema, ValidationRule, normalize_schema

logger = logging.getLogger(__name__)

FieldKey = Tuple[int, str]  # (row index, field path); index -1 = no row context


@dataclass(frozen=True)
class ErrorDescriptor:
    """One failed rule for one field."""
    rule: str
    message: str


@dataclass(frozen=True)
class ValidationFailure:
    """A validator raised instead of returning a verdict."""
    field: str
    index: int
    message: str


@dataclass
class ValidationResult:
    """Field path -> ordered errors. Valid iff no field has errors."""
    errors: Dict[str, List[ErrorDescriptor]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def for_field(self, path: str) -> List[ErrorDescriptor]:
        return list(self.errors.get(path, []))

    def set_field(self, path: str, errors: List[ErrorDescriptor]) -> None:
        """Replace a field's errors; an empty list removes the field."""
        if errors:
            self.errors[path] = list(errors)
        else:
            self.errors.pop(path, None)

    def copy(self) -> 'ValidationResult':
        return ValidationResult({path: list(errs) for path, errs in self.errors.items()})

    def __iter__(self) -> Iterator[str]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)


@dataclass
class _PendingAsync:
    token: int
    value: Any
    task: BackgroundTask


@dataclass
class _ResolvedAsync:
    value: Any
    passed: bool
    message: Optional[str] = None


class ValidationEngine(QObject):
    """
    Validates rows against a schema and tracks per-row results.

    Signals:
        validation_failed(ValidationFailure): a custom or async validator raised
        field_validated(index, path): a field's stored errors changed out of
            band (batched flush or async resolution); hosts re-render it if
            the field is still on screen
    """

    validation_failed = pyqtSignal(object)  # ValidationFailure
    field_validated = pyqtSignal(int, str)  # row index, field path

    def __init__(self, schema: Any = None, messages: Optional[MessageCatalog] = None,
                 frame_ms: int = DEFAULT_FRAME_MS, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._evaluator = RuleEvaluator()
        self._schema: Schema = normalize_schema(schema)
        self.messages = messages or MessageCatalog()
        self._results: Dict[int, ValidationResult] = {}
        self._debounce = KeyedDebounceTimer(delay_ms=frame_ms, handler=self._validate_scheduled)
        self._pending: Dict[FieldKey, _PendingAsync] = {}
        self._resolved: Dict[FieldKey, _ResolvedAsync] = {}
        self._tasks: List[BackgroundTask] = []
        self._tokens = itertools.count(1)

    # ========== SCHEMA ==========

    @property
    def schema(self) -> Schema:
        return {path: list(rules) for path, rules in self._schema.items()}

    def set_schema(self, schema: Any) -> None:
        """Replace the schema. Raises ValueError for malformed schemas."""
        self._schema = normalize_schema(schema)
        self.cancel_pending()
        self._results.clear()

    # ========== IMMEDIATE VALIDATION ==========

    def validate_field(self, row: Any, path: str, rules: Optional[List[ValidationRule]] = None,
                       index: int = -1) -> List[ErrorDescriptor]:
        """Evaluate every rule for one field of row; stores the result when index >= 0."""
        if rules is None:
            rules = self._schema.get(path, [])
        value = get_path(row, path) if isinstance(row, dict) else None
        errors = self._evaluate(path, value, rules, index)
        if index >= 0:
            self._results.setdefault(index, ValidationResult()).set_field(path, errors)
        return errors

    def validate_row(self, row: Any, schema: Any = None, index: int = -1,
                     store: bool = True) -> ValidationResult:
        """Evaluate the whole schema against row; stores the result when index >= 0 and store is set."""
        rules_by_path = self._schema if schema is None else normalize_schema(schema)
        result = ValidationResult()
        for path, rules in rules_by_path.items():
            value = get_path(row, path) if isinstance(row, dict) else None
            result.set_field(path, self._evaluate(path, value, rules, index))
        if store and index >= 0:
            self._results[index] = result.copy()
        return result

    def _evaluate(self, path: str, value: Any, rules: List[ValidationRule], index: int) -> List[ErrorDescriptor]:
        errors: List[ErrorDescriptor] = []
        for rule in rules:
            if isinstance(rule, Async):
                error = self._evaluate_async(rule, path, value, index)
                if error is not None:
                    errors.append(error)
                continue

            try:
                passed = self._evaluator.evaluate(rule, value)
            except Exception as e:
                message = str(e) or self.messages.format(rule.rule_key, rule.params())
                logger.warning(f"Validator '{rule.rule_key}' raised for field '{path}' (row {index}): {e}")
                errors.append(ErrorDescriptor(rule.rule_key, message))
                self.validation_failed.emit(ValidationFailure(path, index, str(e)))
                continue

            if not passed:
                errors.append(ErrorDescriptor(rule.rule_key, self.messages.format(rule.rule_key, rule.params())))
        return errors

    # ========== ASYNC RULES ==========

    def _evaluate_async(self, rule: Async, path: str, value: Any, index: int) -> Optional[ErrorDescriptor]:
        key = (index, path)

        resolved = self._resolved.get(key)
        if resolved is not None and _same_value(resolved.value, value):
            if resolved.passed:
                return None
            return ErrorDescriptor(rule.rule_key, resolved.message or self.messages.format(rule.rule_key))

        pending = self._pending.get(key)
        if pending is None or not _same_value(pending.value, value):
            self._start_async(rule, key, value)

        return ErrorDescriptor(rule.rule_key, self.messages.format("asyncPending"))

    def _start_async(self, rule: Async, key: FieldKey, value: Any) -> None:
        previous = self._pending.pop(key, None)
        if previous is not None:
            previous.task.cancel()

        token = next(self._tokens)
        value_copy = deep_clone(value)
        task = BackgroundTask(target=rule.fn, args=(deep_clone(value),))
        task.result_ready.connect(
            lambda result, key=key, token=token, rule=rule: self._on_async_result(key, token, rule, result))
        task.error_occurred.connect(
            lambda error, key=key, token=token, rule=rule: self._on_async_error(key, token, rule, error))
        task.finished.connect(lambda task=task: self._forget_task(task))

        self._pending[key] = _PendingAsync(token, value_copy, task)
        self._tasks.append(task)
        logger.debug(f"Async validation started for field '{key[1]}' (row {key[0]}), token={token}")
        task.start()

    def _take_current(self, key: FieldKey, token: int) -> Optional[_PendingAsync]:
        pending = self._pending.get(key)
        if pending is None or pending.token != token:
            logger.debug(f"Discarding stale async result for field '{key[1]}' (row {key[0]}), token={token}")
            return None
        return self._pending.pop(key)

    def _on_async_result(self, key: FieldKey, token: int, rule: Async, result: Any) -> None:
        pending = self._take_current(key, token)
        if pending is None:
            return
        self._resolved[key] = _ResolvedAsync(pending.value, bool(result))
        self._apply_async(key, rule)

    def _on_async_error(self, key: FieldKey, token: int, rule: Async, error: Exception) -> None:
        pending = self._take_current(key, token)
        if pending is None:
            return
        index, path = key
        logger.warning(f"Async validator raised for field '{path}' (row {index}): {error}")
        message = str(error) or self.messages.format(rule.rule_key)
        self._resolved[key] = _ResolvedAsync(pending.value, False, message)
        self.validation_failed.emit(ValidationFailure(path, index, str(error)))
        self._apply_async(key, rule)

    def _apply_async(self, key: FieldKey, rule: Async) -> None:
        """Re-evaluate the field for its stored row result and request a refresh."""
        index, path = key
        if index < 0 or index not in self._results:
            return
        rules = self._schema.get(path, [rule])
        value = self._resolved[key].value
        self._results[index].set_field(path, self._evaluate(path, value, rules, index))
        self.field_validated.emit(index, path)

    def _forget_task(self, task: BackgroundTask) -> None:
        if task in self._tasks:
            task.wait(CLEANUP_WAIT_MS)
            self._tasks.remove(task)

    def has_pending(self, index: Optional[int] = None) -> bool:
        """True while async rules (or batched re-validations) are outstanding."""
        if index is None:
            return bool(self._pending) or self._debounce.has_pending()
        return (any(k[0] == index for k in self._pending)
                or self._debounce.has_pending(lambda k: k[0] == index))

    def cancel_pending(self, index: Optional[int] = None) -> None:
        """Discard in-flight and batched work for one row (or all rows)."""
        def matches(key: FieldKey) -> bool:
            return index is None or key[0] == index

        for key in [k for k in self._pending if matches(k)]:
            self._pending.pop(key).task.cancel()
        for key in [k for k in self._resolved if matches(k)]:
            del self._resolved[key]
        self._debounce.cancel(matches)

    def wait_for_pending(self, timeout_ms: int = 1000) -> bool:
        """Spin the event loop until no async rule is in flight. False on timeout."""
        deadline = time.monotonic() + timeout_ms / 1000.0
        while self._pending or self._tasks:
            QCoreApplication.processEvents()
            if time.monotonic() >= deadline:
                return not self._pending
            QThread.msleep(1)
        return True

    # ========== BATCHED FIELD VALIDATION ==========

    def schedule_field_validation(self, index: int, path: str, value: Any) -> None:
        """Queue re-validation of one field; rapid calls collapse to the latest value."""
        if path not in self._schema:
            return
        self._debounce.trigger((index, path), deep_clone(value))

    def flush(self) -> None:
        """Run all batched field validations now."""
        self._debounce.flush()

    def _validate_scheduled(self, key: FieldKey, value: Any) -> None:
        index, path = key
        errors = self._evaluate(path, value, self._schema.get(path, []), index)
        self._results.setdefault(index, ValidationResult()).set_field(path, errors)
        self.field_validated.emit(index, path)

    # ========== STORED RESULTS ==========

    def results_for(self, index: int) -> ValidationResult:
        result = self._results.get(index)
        return result.copy() if result is not None else ValidationResult()

    def errors_for(self, index: int, path: str) -> List[ErrorDescriptor]:
        result = self._results.get(index)
        return result.for_field(path) if result is not None else []

    def all_results(self) -> Dict[int, ValidationResult]:
        return {index: result.copy() for index, result in self._results.items() if not result.is_valid}

    def clear_results(self, index: Optional[int] = None) -> None:
        if index is None:
            self._results.clear()
        else:
            self._results.pop(index, None)

    def teardown(self) -> None:
        """Cancel everything; in-flight tasks are waited on briefly."""
        self.cancel_pending()
        for task in list(self._tasks):
            task.cleanup()
        self._tasks.clear()
        self._results.clear()


def _same_value(a: Any, b: Any) -> bool:
    try:
        return bool(a == b)
    except Exception:
        return False
