"""
Discriminated union types for field validation rules.

A schema maps a dotted field path to an ordered list of rule variants.
Instead of one open-ended record with optional keys, every rule is its own
frozen dataclass, so evaluators dispatch on the variant and a missing
handler is caught when the evaluator is built rather than at runtime.

Architecture:
    - RuleMeta: Metaclass that auto-registers every variant by its rule key
    - ValidationRule: Base class for all variants
    - Required, MinLength, MaxLength, Pattern, Min, Max, Email, Url, Custom, Async
    - create_rules(): Factory that turns a declarative record into variants
    - normalize_schema(): Accepts record-form or variant-form schemas

Declarative record form (as assigned by hosts):
    {"name": {"required": True, "minLength": 3},
     "email": {"email": True},
     "age": {"min": 18, "max": 130}}

Evaluation order is registration order, which matches the record keys above.
"""

import re
from abc import ABC, ABCMeta
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Type, Union
import logging

logger = logging.getLogger(__name__)


class RuleMeta(ABCMeta):
    """
    Metaclass for auto-registration of rule variants.

    All classes declaring a rule_key are registered in declaration order,
    keyed by that rule key, for use by create_rules().
    """
    _registry: Dict[str, Type] = {}

    def __new__(mcs, name, bases, namespace):
        cls = super().__new__(mcs, name, bases, namespace)

        rule_key = namespace.get('rule_key')
        if rule_key:
            mcs._registry[rule_key] = cls
            logger.debug(f"Auto-registered validation rule: {name} ({rule_key})")

        return cls

    @classmethod
    def get_registry(mcs) -> Dict[str, Type]:
        """Get all registered rule variants by rule key."""
        return dict(mcs._registry)


class ValidationRule(ABC, metaclass=RuleMeta):
    """ABC for rule variants. rule_key doubles as the message catalog key."""

    rule_key: ClassVar[str] = ""

    def params(self) -> Dict[str, Any]:
        """Values substituted into the rule's message placeholders."""
        return {}

    @classmethod
    def from_record(cls, value: Any) -> List['ValidationRule']:
        """Build the variant from its record value; empty list disables the rule."""
        return [cls(value)]


class _FlagRule(ValidationRule):
    """Rules switched on by a truthy record value (required: true)."""

    @classmethod
    def from_record(cls, value: Any) -> List[ValidationRule]:
        return [cls()] if value else []


@dataclass(frozen=True)
class Required(_FlagRule):
    """Field must be present and non-empty."""
    rule_key: ClassVar[str] = "required"


@dataclass(frozen=True)
class MinLength(ValidationRule):
    """String form must be at least n characters."""
    n: int
    rule_key: ClassVar[str] = "minLength"

    def params(self) -> Dict[str, Any]:
        return {"min": self.n}


@dataclass(frozen=True)
class MaxLength(ValidationRule):
    """String form must be at most n characters."""
    n: int
    rule_key: ClassVar[str] = "maxLength"

    def params(self) -> Dict[str, Any]:
        return {"max": self.n}


@dataclass(frozen=True)
class Pattern(ValidationRule):
    """String form must match regex (search semantics)."""
    regex: Union[str, re.Pattern]
    compiled: re.Pattern = field(init=False, repr=False, compare=False)
    rule_key: ClassVar[str] = "pattern"

    def __post_init__(self):
        compiled = self.regex if isinstance(self.regex, re.Pattern) else re.compile(self.regex)
        object.__setattr__(self, 'compiled', compiled)

    def params(self) -> Dict[str, Any]:
        return {"pattern": self.compiled.pattern}


@dataclass(frozen=True)
class Min(ValidationRule):
    """Numeric value must be >= value."""
    value: float
    rule_key: ClassVar[str] = "min"

    def params(self) -> Dict[str, Any]:
        return {"min": self.value}


@dataclass(frozen=True)
class Max(ValidationRule):
    """Numeric value must be <= value."""
    value: float
    rule_key: ClassVar[str] = "max"

    def params(self) -> Dict[str, Any]:
        return {"max": self.value}


@dataclass(frozen=True)
class Email(_FlagRule):
    rule_key: ClassVar[str] = "email"


@dataclass(frozen=True)
class Url(_FlagRule):
    rule_key: ClassVar[str] = "url"


@dataclass(frozen=True)
class Custom(ValidationRule):
    """fn(value) -> bool; falsy result or a raise fails the field."""
    fn: Callable[[Any], bool]
    rule_key: ClassVar[str] = "custom"


@dataclass(frozen=True)
class Async(ValidationRule):
    """fn(value) -> bool or awaitable[bool], resolved off the calling thread."""
    fn: Callable[[Any], Any]
    rule_key: ClassVar[str] = "async"


# Union type for type hints
Rule = Union[Required, MinLength, MaxLength, Pattern, Min, Max, Email, Url, Custom, Async]

Schema = Dict[str, List[ValidationRule]]


def create_rules(record: Mapping) -> List[ValidationRule]:
    """
    Turn a declarative rule record into an ordered list of rule variants.

    Args:
        record: Mapping of rule key -> parameter, e.g. {"required": True, "maxLength": 10}

    Returns:
        Rule variants in evaluation order

    Raises:
        ValueError: If the record contains an unknown rule key
    """
    registry = RuleMeta.get_registry()
    unknown = [key for key in record if key not in registry]
    if unknown:
        raise ValueError(
            f"Unknown validation rule(s) {unknown}. "
            f"Available rules: {list(registry.keys())}"
        )

    rules: List[ValidationRule] = []
    for rule_key, rule_cls in registry.items():
        if rule_key in record and record[rule_key] is not None:
            rules.extend(rule_cls.from_record(record[rule_key]))
    return rules


def normalize_schema(schema: Any) -> Schema:
    """
    Accept a schema in record form or variant form and return variant form.

    Each field entry may be a record (Mapping), a single ValidationRule, or an
    iterable of ValidationRule. None or an empty mapping yields an empty schema.
    """
    if not schema:
        return {}
    if not isinstance(schema, Mapping):
        raise ValueError(f"Validation schema must be a mapping, got {type(schema).__name__}")

    normalized: Schema = {}
    for path, entry in schema.items():
        if isinstance(entry, Mapping):
            normalized[str(path)] = create_rules(entry)
        elif isinstance(entry, ValidationRule):
            normalized[str(path)] = [entry]
        else:
            rules = list(entry)
            bad = [r for r in rules if not isinstance(r, ValidationRule)]
            if bad:
                raise ValueError(f"Field {path!r}: not validation rules: {bad!r}")
            normalized[str(path)] = rules
    return normalized
