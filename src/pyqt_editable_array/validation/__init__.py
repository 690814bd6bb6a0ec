"""
Validation layer.

Rule variants, message catalog, evaluator and the engine that applies a
schema to rows synchronously, batched per frame, or out of band.
"""

from .rule_types import (
    ValidationRule,
    Required,
    MinLength,
    MaxLength,
    Pattern,
    Min,
    Max,
    Email,
    Url,
    Custom,
    Async,
    Rule,
    Schema,
    create_rules,
    normalize_schema,
)
from .messages import MessageCatalog, DEFAULT_MESSAGES
from .rule_evaluator import RuleEvaluator, is_empty
from .validation_engine import ValidationEngine, ValidationResult, ErrorDescriptor, ValidationFailure

__all__ = [
    "ValidationRule",
    "Required",
    "MinLength",
    "MaxLength",
    "Pattern",
    "Min",
    "Max",
    "Email",
    "Url",
    "Custom",
    "Async",
    "Rule",
    "Schema",
    "create_rules",
    "normalize_schema",
    "MessageCatalog",
    "DEFAULT_MESSAGES",
    "RuleEvaluator",
    "is_empty",
    "ValidationEngine",
    "ValidationResult",
    "ErrorDescriptor",
    "ValidationFailure",
]
