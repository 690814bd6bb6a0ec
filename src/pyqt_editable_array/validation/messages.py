"""Localizable validation messages keyed by rule name."""

from typing import Any, Dict, Mapping, Optional

DEFAULT_MESSAGES: Dict[str, str] = {
    "required": "This field is required",
    "minLength": "Must be at least {min} characters",
    "maxLength": "Must be at most {max} characters",
    "pattern": "Invalid format",
    "min": "Must be at least {min}",
    "max": "Must be at most {max}",
    "email": "Invalid email address",
    "url": "Invalid URL",
    "custom": "Invalid value",
    "async": "Invalid value",
    "asyncPending": "Validation in progress",
}

# Only these placeholders are substituted; other braces are left verbatim.
PLACEHOLDERS = ("min", "max")


class MessageCatalog:
    """
    Message lookup with per-rule overrides.

    Overrides replace individual keys; any key not overridden falls back to
    DEFAULT_MESSAGES, and an unknown rule falls back to the custom message.

    Example:
        catalog = MessageCatalog({"required": "Pflichtfeld",
                                  "minLength": "Mindestens {min} Zeichen"})
        catalog.format("minLength", {"min": 3})  # "Mindestens 3 Zeichen"
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self._overrides: Dict[str, str] = dict(overrides or {})

    def update(self, overrides: Optional[Mapping[str, str]]) -> None:
        """Merge overrides into the existing ones, key by key."""
        self._overrides.update(overrides or {})

    @property
    def overrides(self) -> Dict[str, str]:
        return dict(self._overrides)

    def template(self, rule: str) -> str:
        if rule in self._overrides and self._overrides[rule]:
            return self._overrides[rule]
        return DEFAULT_MESSAGES.get(rule, DEFAULT_MESSAGES["custom"])

    def format(self, rule: str, params: Optional[Mapping[str, Any]] = None) -> str:
        message = self.template(rule)
        for name in PLACEHOLDERS:
            if params and name in params:
                message = message.replace("{" + name + "}", _format_number(params[name]))
        return message


def _format_number(value: Any) -> str:
    """3.0 -> '3' so messages read naturally."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
