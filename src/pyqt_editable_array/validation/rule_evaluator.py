"""
Rule evaluation with auto-discovered, exhaustive dispatch.

Pattern:
    Instead of:
        if rule.get('required') and is_empty(value): ...
        if 'minLength' in rule and len(str(value)) < rule['minLength']: ...

    Use:
        class RuleEvaluator(RuleServiceABC):
            def _get_handler_prefix(self) -> str:
                return '_check_'

            def _check_Required(self, rule: Required, value) -> bool: ...
            def _check_MinLength(self, rule: MinLength, value) -> bool: ...

Construction fails if any registered rule variant has no handler, so adding a
variant without teaching the evaluator about it is caught immediately.
"""

import math
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse
import logging

from pyqt_editable_array.core.path_utils import format_display_value
from .rule_types import (
    RuleMeta, ValidationRule,
    Required, MinLength, MaxLength, Pattern, Min, Max, Email, Url, Custom, Async,
)

logger = logging.getLogger(__name__)

# Conservative: one @, no whitespace, a dot in the domain part.
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_SCHEMES = ("http", "https", "ftp")


def is_empty(value: Any) -> bool:
    """Empty for the purpose of 'required': None, '' or an empty container."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


class RuleServiceABC(ABC):
    """
    Abstract base for rule services with auto-discovery dispatch.

    Subclasses must:
    1. Implement _get_handler_prefix() to return method prefix (e.g., '_check_')
    2. Define handler methods following naming convention: {prefix}{VariantName}
    """

    def __init__(self):
        self._handlers: Dict[str, Callable] = {}
        prefix = self._get_handler_prefix()

        for attr_name in dir(self):
            if attr_name.startswith(prefix):
                class_name = attr_name[len(prefix):]
                handler = getattr(self, attr_name)
                if callable(handler):
                    self._handlers[class_name] = handler

        missing = [cls.__name__ for cls in RuleMeta.get_registry().values()
                   if cls.__name__ not in self._handlers]
        if missing:
            raise ValueError(
                f"{self.__class__.__name__} has no handler for rule variant(s) {missing}. "
                f"Did you forget to define {prefix}<Variant>()?"
            )

        logger.debug(f"{self.__class__.__name__} auto-discovered handlers: {list(self._handlers.keys())}")

    @abstractmethod
    def _get_handler_prefix(self) -> str:
        """Return the method prefix for this service's handlers."""
        pass

    def dispatch(self, rule: ValidationRule, *args, **kwargs) -> Any:
        """Auto-dispatch to handler based on the rule's variant class name."""
        class_name = rule.__class__.__name__
        handler = self._handlers.get(class_name)

        if handler is None:
            raise ValueError(
                f"No handler for {class_name} in {self.__class__.__name__}. "
                f"Available handlers: {list(self._handlers.keys())}"
            )

        return handler(rule, *args, **kwargs)


class RuleEvaluator(RuleServiceABC):
    """
    Synchronous evaluation of a single rule against a single value.

    Handlers return True (passes), False (fails) or None (deferred: the rule
    resolves out of band). Handlers may raise; callers own that boundary.
    Every rule except Required passes on empty values so that emptiness is
    reported once, by Required.
    """

    def _get_handler_prefix(self) -> str:
        return '_check_'

    def evaluate(self, rule: ValidationRule, value: Any) -> Optional[bool]:
        return self.dispatch(rule, value)

    def _check_Required(self, rule: Required, value: Any) -> bool:
        return not is_empty(value)

    def _check_MinLength(self, rule: MinLength, value: Any) -> bool:
        if is_empty(value):
            return True
        return len(format_display_value(value)) >= rule.n

    def _check_MaxLength(self, rule: MaxLength, value: Any) -> bool:
        if is_empty(value):
            return True
        return len(format_display_value(value)) <= rule.n

    def _check_Pattern(self, rule: Pattern, value: Any) -> bool:
        if is_empty(value):
            return True
        return rule.compiled.search(format_display_value(value)) is not None

    def _check_Min(self, rule: Min, value: Any) -> bool:
        if is_empty(value):
            return True
        number = _to_number(value)
        return number is not None and number >= float(rule.value)

    def _check_Max(self, rule: Max, value: Any) -> bool:
        if is_empty(value):
            return True
        number = _to_number(value)
        return number is not None and number <= float(rule.value)

    def _check_Email(self, rule: Email, value: Any) -> bool:
        if is_empty(value):
            return True
        return EMAIL_RE.match(str(value)) is not None

    def _check_Url(self, rule: Url, value: Any) -> bool:
        if is_empty(value):
            return True
        text = str(value)
        if any(ch.isspace() for ch in text):
            return False
        try:
            parsed = urlparse(text)
        except ValueError:
            return False
        return parsed.scheme in URL_SCHEMES and bool(parsed.netloc)

    def _check_Custom(self, rule: Custom, value: Any) -> bool:
        return bool(rule.fn(value))

    def _check_Async(self, rule: Async, value: Any) -> None:
        return None


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number
