"""pytest configuration and fixtures for pyqt-editable-array tests."""

import time

import pytest
from PyQt6.QtCore import QCoreApplication, QThread


@pytest.fixture(scope="session")
def qapp():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@pytest.fixture
def process_events_until(qapp):
    """Spin the event loop until predicate() is true or the timeout expires."""
    def wait(predicate, timeout_ms=2000):
        deadline = time.monotonic() + timeout_ms / 1000.0
        while not predicate():
            if time.monotonic() >= deadline:
                return False
            QCoreApplication.processEvents()
            QThread.msleep(1)
        return True
    return wait


@pytest.fixture
def make_manager(qapp):
    """Factory for managers; tears every one down after the test."""
    from pyqt_editable_array import EditableArrayManager, EditorManagerConfig, EditableArrayConfig

    created = []

    def factory(rows=None, schema=None, new_item_factory=None, read_only=False, renderer=None, **config):
        manager = EditableArrayManager(EditorManagerConfig(
            config=EditableArrayConfig(**config),
            schema=schema,
            new_item_factory=new_item_factory,
            read_only=read_only,
            renderer=renderer,
        ))
        if rows is not None:
            manager.set_all(rows)
        created.append(manager)
        return manager

    yield factory
    for manager in created:
        manager.teardown()


@pytest.fixture
def recorder():
    """Connect a signal and collect what it emits; assertions stay outside slots."""
    def connect(signal):
        received = []
        signal.connect(lambda *args: received.append(args[0] if len(args) == 1 else args))
        return received
    return connect
