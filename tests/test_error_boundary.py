"""Tests for the render error boundary, row limits and diagnostic logging."""

import logging

import pytest

from pyqt_editable_array import Renderer, register_renderer


class RecordingRenderer(Renderer):
    def __init__(self, fail=False):
        self.fail = fail
        self.views = []

    def render(self, view):
        if self.fail:
            raise RuntimeError("template exploded")
        self.views.append(view)


@pytest.fixture
def restore_renderer():
    yield
    register_renderer(None)


def test_renderer_receives_view(make_manager):
    """Every committed change re-renders with cloned rows and session state."""
    renderer = RecordingRenderer()
    manager = make_manager(rows=[{"name": "Alice"}], renderer=renderer)
    manager.select(0)
    manager.begin_edit(0)

    view = renderer.views[-1]
    assert view.rows == [{"name": "Alice"}]
    assert view.editing_index == 0
    assert view.selected_indices == [0]
    assert view.read_only is False

    view.rows[0]["name"] = "Changed"
    assert manager.data == [{"name": "Alice"}]


def test_render_view_carries_errors(make_manager):
    """Failed saves surface their errors in the next view."""
    renderer = RecordingRenderer()
    manager = make_manager(rows=[{"name": ""}], schema={"name": {"required": True}}, renderer=renderer)
    manager.begin_edit(0)
    manager.save()
    assert [e.rule for e in renderer.views[-1].errors[0]["name"]] == ["required"]


def test_render_error_is_contained(make_manager, recorder):
    """A raising renderer sets has_error and emits render_error; state stays usable."""
    renderer = RecordingRenderer(fail=True)
    manager = make_manager(renderer=renderer)
    errors = recorder(manager.signals.render_error)

    manager.set_all([{"name": "Alice"}])

    assert manager.has_error is True
    assert str(manager.last_error) == "template exploded"
    assert errors[-1].context == "render"
    assert isinstance(errors[-1].error, RuntimeError)
    assert manager.data == [{"name": "Alice"}]

    renderer.fail = False
    manager.clear_error()
    assert manager.has_error is False
    assert manager.last_error is None
    assert manager.begin_edit(0) is True


def test_render_error_logged_in_debug_mode(make_manager, caplog):
    """Diagnostic mode logs render failures at error level."""
    manager = make_manager(renderer=RecordingRenderer(fail=True), debug=True)
    with caplog.at_level(logging.ERROR, logger="pyqt_editable_array"):
        manager.set_all([{"name": "Alice"}])
    assert "[editable-array] render error" in caplog.text


def test_registered_renderer_is_default(make_manager, restore_renderer):
    """Managers built without a renderer use the registered one."""
    renderer = RecordingRenderer()
    register_renderer(renderer)
    make_manager(rows=[{"name": "Alice"}])
    assert renderer.views[-1].rows == [{"name": "Alice"}]


def test_row_limit_truncates_and_reports(make_manager, recorder, caplog):
    """Assigning more rows than allowed keeps the first ones and emits an event."""
    manager = make_manager(max_rows_limit=2, debug=True)
    limits = recorder(manager.signals.row_limit_exceeded)

    with caplog.at_level(logging.WARNING, logger="pyqt_editable_array"):
        manager.set_all([{"i": 0}, {"i": 1}, {"i": 2}, {"i": 3}])

    assert manager.data == [{"i": 0}, {"i": 1}]
    assert limits[0].limit == 2
    assert limits[0].attempted == 4
    assert "Row limit of 2 exceeded" in limits[0].message
    assert "[editable-array]" in caplog.text


def test_row_limit_blocks_add_row(make_manager, recorder):
    """add_row at the limit is refused with the same event."""
    manager = make_manager(rows=[{"i": 0}], max_rows_limit=1)
    limits = recorder(manager.signals.row_limit_exceeded)
    assert manager.add_row() is False
    assert len(manager) == 1
    assert limits[0].attempted == 2


def test_no_limit_event_within_limit(make_manager, recorder):
    """Assignments within the limit are silent."""
    manager = make_manager(max_rows_limit=5)
    limits = recorder(manager.signals.row_limit_exceeded)
    manager.set_all([{"i": 0}])
    assert limits == []
