"""Tests for configuration, signals wiring and performance timing."""

import logging

import pytest

from pyqt_editable_array import (
    EditableArrayConfig,
    EditableArrayManager,
    EditorManagerConfig,
    get_editor_config,
    set_editor_config,
)
from pyqt_editable_array.core.performance_monitor import timed, timer


@pytest.fixture
def restore_config():
    yield
    set_editor_config(None)


def test_default_config():
    """Without an application config the defaults apply."""
    config = get_editor_config()
    assert config.name == "items"
    assert config.max_history_size == 50
    assert config.max_rows_limit is None
    assert config.debug is False


def test_global_config_used_by_new_managers(qapp, restore_config):
    """set_editor_config changes what managers pick up."""
    set_editor_config(EditableArrayConfig(name="people", max_history_size=1))
    manager = EditableArrayManager()
    try:
        assert manager.name == "people"
        assert manager.max_history_size == 1
    finally:
        manager.teardown()


def test_messages_from_config(make_manager):
    """Message overrides in the config reach validation errors."""
    manager = make_manager(rows=[{"name": ""}], schema={"name": {"required": True}},
                           messages={"required": "Pflichtfeld"})
    manager.report_validity()
    assert manager.errors_for(0, "name")[0].message == "Pflichtfeld"


def test_runtime_setters(make_manager):
    """History size, row limit, schema and debug can change after construction."""
    manager = make_manager(rows=[{"name": ""}])
    manager.max_history_size = 2
    manager.max_rows_limit = 1
    manager.debug = True
    manager.schema = {"name": {"required": True}}

    assert manager.max_history_size == 2
    assert manager.max_rows_limit == 1
    assert manager.cloner.debug is True
    assert list(manager.schema) == ["name"]
    assert manager.check_validity() is False


def test_initial_data(qapp):
    """EditorManagerConfig.initial_data is assigned on construction."""
    manager = EditableArrayManager(EditorManagerConfig(initial_data=[{"name": "Alice"}]))
    try:
        assert manager.data == [{"name": "Alice"}]
        assert manager.can_undo is False
    finally:
        manager.teardown()


def test_validation_failures_forwarded(make_manager, recorder):
    """Validator defects reach the manager's signal channel."""
    from pyqt_editable_array.validation import Custom

    def explode(value):
        raise ValueError("bad validator")

    manager = make_manager(rows=[{"name": "x"}], schema={"name": [Custom(explode)]})
    failures = recorder(manager.signals.validation_failed)
    manager.check_validity()
    assert [(f.field, f.index, f.message) for f in failures] == [("name", 0, "bad validator")]


def test_timer_logs_to_performance_logger(caplog):
    """timer() writes elapsed time to the performance logger."""
    with caplog.at_level(logging.DEBUG, logger="pyqt_editable_array.performance"):
        with timer("bulk validate", rows=3, log_args=True):
            pass
    assert "bulk validate" in caplog.text
    assert "rows=3" in caplog.text


def test_timed_respects_threshold(caplog):
    """Calls faster than the threshold are not logged."""
    @timed("slow path", threshold_ms=10_000)
    def quick():
        return 42

    with caplog.at_level(logging.DEBUG, logger="pyqt_editable_array.performance"):
        assert quick() == 42
    assert "slow path" not in caplog.text


def test_set_messages_merges_with_config_messages(make_manager):
    """Runtime overrides add to the configured ones instead of replacing them."""
    manager = make_manager(rows=[{"name": "", "code": "toolong"}],
                           schema={"name": {"required": True}, "code": {"maxLength": 3}},
                           messages={"required": "Pflichtfeld"})
    manager.set_messages({"maxLength": "Höchstens {max} Zeichen"})

    assert manager.messages == {"required": "Pflichtfeld", "maxLength": "Höchstens {max} Zeichen"}
    manager.report_validity()
    assert manager.errors_for(0, "name")[0].message == "Pflichtfeld"
    assert manager.errors_for(0, "code")[0].message == "Höchstens 3 Zeichen"
