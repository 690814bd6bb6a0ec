"""Tests for rule variants, messages and the validation engine."""

import pytest

from pyqt_editable_array.validation import (
    Async,
    Custom,
    Email,
    Max,
    MessageCatalog,
    Min,
    MinLength,
    Pattern,
    Required,
    RuleEvaluator,
    Url,
    ValidationEngine,
    create_rules,
    normalize_schema,
)


def _rules(errors):
    return [e.rule for e in errors]


def test_create_rules_from_record():
    """Declarative records become ordered variants; falsy flags produce nothing."""
    rules = create_rules({"required": True, "minLength": 3, "email": False, "pattern": r"^\d+$"})
    assert rules[0] == Required()
    assert rules[1] == MinLength(3)
    assert isinstance(rules[2], Pattern)
    assert len(rules) == 3


def test_unknown_rule_key_raises():
    """Schemas with rule keys the engine does not know fail loudly."""
    with pytest.raises(ValueError, match="Unknown validation rule"):
        create_rules({"requird": True})


def test_normalize_schema_accepts_variants_and_rejects_junk():
    """Variant lists pass through; non-rules raise."""
    schema = normalize_schema({"name": [Required(), MinLength(2)], "age": Min(0)})
    assert schema == {"name": [Required(), MinLength(2)], "age": [Min(0)]}
    with pytest.raises(ValueError):
        normalize_schema({"name": ["required"]})
    with pytest.raises(ValueError):
        normalize_schema(["name"])


def test_evaluator_covers_every_variant():
    """Constructing the evaluator verifies each registered rule has a handler."""
    evaluator = RuleEvaluator()
    assert evaluator.evaluate(Required(), "") is False
    assert evaluator.evaluate(Required(), []) is False
    assert evaluator.evaluate(Required(), 0) is True
    assert evaluator.evaluate(Email(), "a@b.co") is True
    assert evaluator.evaluate(Email(), "not-an-email") is False
    assert evaluator.evaluate(Url(), "https://example.com/x") is True
    assert evaluator.evaluate(Url(), "example.com") is False
    assert evaluator.evaluate(Min(18), "21") is True
    assert evaluator.evaluate(Min(18), "abc") is False
    assert evaluator.evaluate(Max(10), 11) is False


def test_builtin_rules_skip_empty_values():
    """Only required reacts to an empty field."""
    evaluator = RuleEvaluator()
    for rule in (MinLength(3), Pattern(r"^\d+$"), Min(1), Email(), Url()):
        assert evaluator.evaluate(rule, "") is True
        assert evaluator.evaluate(rule, None) is True


def test_all_rules_evaluated_without_short_circuit(qapp):
    """A field reports every failing rule together."""
    engine = ValidationEngine({"code": {"minLength": 5, "pattern": r"^\d+$"}})
    errors = engine.validate_field({"code": "ab"}, "code")
    assert _rules(errors) == ["minLength", "pattern"]
    engine.teardown()


def test_length_uses_display_form_of_lists(qapp):
    """Lists are measured as their comma-joined text."""
    engine = ValidationEngine({"tags": {"maxLength": 6}})
    assert engine.validate_field({"tags": ["ab", "cd"]}, "tags") == []
    assert _rules(engine.validate_field({"tags": ["abc", "def"]}, "tags")) == ["maxLength"]
    engine.teardown()


def test_nested_paths(qapp):
    """Schema paths address nested fields."""
    engine = ValidationEngine({"address.city": {"required": True}})
    assert not engine.validate_row({"address": {}}).is_valid
    assert engine.validate_row({"address": {"city": "Paris"}}).is_valid
    engine.teardown()


def test_messages_substitute_placeholders_and_fall_back():
    """Overrides replace individual keys; the rest keep their defaults."""
    catalog = MessageCatalog({"minLength": "Mindestens {min} Zeichen"})
    assert catalog.format("minLength", {"min": 3}) == "Mindestens 3 Zeichen"
    assert catalog.format("max", {"max": 10.0}) == "Must be at most 10"
    assert catalog.format("required") == "This field is required"


def test_engine_uses_message_overrides(qapp):
    """Error descriptors carry the localized message."""
    engine = ValidationEngine({"name": {"required": True}}, messages=MessageCatalog({"required": "Pflichtfeld"}))
    errors = engine.validate_field({"name": ""}, "name")
    assert errors[0].message == "Pflichtfeld"
    engine.teardown()


def test_custom_validator_false_and_raise(qapp, recorder):
    """A raising custom rule becomes a field error plus validation_failed."""
    def explode(value):
        raise ValueError("validator exploded")

    engine = ValidationEngine({
        "even": [Custom(lambda v: v % 2 == 0)],
        "broken": [Custom(explode)],
    })
    failures = recorder(engine.validation_failed)

    result = engine.validate_row({"even": 3, "broken": "x"}, index=4)

    assert _rules(result.for_field("even")) == ["custom"]
    assert result.for_field("broken")[0].message == "validator exploded"
    assert len(failures) == 1
    assert failures[0].field == "broken"
    assert failures[0].index == 4
    assert failures[0].message == "validator exploded"
    engine.teardown()


def test_stored_results(qapp):
    """validate_row stores per-row results when given an index."""
    engine = ValidationEngine({"name": {"required": True}})
    engine.validate_row({"name": ""}, index=2)
    assert not engine.results_for(2).is_valid
    assert _rules(engine.errors_for(2, "name")) == ["required"]
    assert list(engine.all_results()) == [2]
    engine.clear_results(2)
    assert engine.results_for(2).is_valid
    engine.teardown()


def test_async_rule_pending_then_resolved(qapp, recorder):
    """An async rule blocks with a pending error until its result arrives."""
    engine = ValidationEngine({"username": [Async(lambda v: v != "taken")]})
    refreshed = recorder(engine.field_validated)

    first = engine.validate_row({"username": "alice"}, index=0)
    assert first.for_field("username")[0].message == "Validation in progress"
    assert engine.has_pending(0)

    assert engine.wait_for_pending(2000) is True
    assert engine.results_for(0).is_valid
    assert (0, "username") in refreshed

    again = engine.validate_row({"username": "alice"}, index=0)
    assert again.is_valid
    engine.teardown()


def test_async_rule_failure_and_coroutines(qapp):
    """Coroutine validators are awaited; a False verdict becomes an async error."""
    async def is_free(value):
        return value != "taken"

    engine = ValidationEngine({"username": [Async(is_free)]})
    engine.validate_row({"username": "taken"}, index=0)
    engine.wait_for_pending(2000)

    assert _rules(engine.errors_for(0, "username")) == ["async"]
    engine.teardown()


def test_async_rule_raising(qapp, recorder):
    """A raising async validator produces an error and validation_failed."""
    def explode(value):
        raise RuntimeError("service down")

    engine = ValidationEngine({"username": [Async(explode)]})
    failures = recorder(engine.validation_failed)
    engine.validate_row({"username": "bob"}, index=1)
    engine.wait_for_pending(2000)

    assert engine.errors_for(1, "username")[0].message == "service down"
    assert [(f.field, f.index) for f in failures] == [("username", 1)]
    engine.teardown()


def test_cancelled_async_result_is_discarded(qapp):
    """A result arriving after cancel_pending never touches stored results."""
    engine = ValidationEngine({"username": [Async(lambda v: False)]})
    engine.validate_row({"username": "alice"}, index=0)
    engine.cancel_pending(0)
    engine.clear_results(0)

    engine.wait_for_pending(2000)
    assert engine.results_for(0).is_valid
    assert not engine.has_pending()
    engine.teardown()


def test_scheduled_validation_coalesces_to_latest_value(qapp, recorder):
    """Rapid field edits validate once, with the final value."""
    seen = []

    def track(value):
        seen.append(value)
        return True

    engine = ValidationEngine({"name": [Custom(track)]})
    for text in ("B", "Bo", "Bob"):
        engine.schedule_field_validation(0, "name", text)
    assert engine.has_pending(0)

    engine.flush()
    assert seen == ["Bob"]
    assert not engine.has_pending(0)
    engine.teardown()


def test_scheduled_validation_fires_on_timer(qapp, process_events_until):
    """Without flush, the batch runs on the next frame."""
    engine = ValidationEngine({"name": {"required": True}}, frame_ms=5)
    engine.schedule_field_validation(0, "name", "")
    assert process_events_until(lambda: not engine.has_pending(0), 2000)
    assert _rules(engine.errors_for(0, "name")) == ["required"]
    engine.teardown()


def test_fields_outside_schema_are_not_scheduled(qapp):
    """Edits to unvalidated fields cost nothing."""
    engine = ValidationEngine({"name": {"required": True}})
    engine.schedule_field_validation(0, "nickname", "x")
    assert not engine.has_pending()
    engine.teardown()
