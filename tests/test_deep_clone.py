"""Tests for bounded deep clone."""

import logging
from datetime import date, datetime

from pyqt_editable_array.core import DeepCloner, deep_clone


def test_clone_is_structurally_equal_and_independent():
    """Nested containers are copied, not shared."""
    original = {"name": "Alice", "address": {"city": "Paris"}, "tags": ["a", "b"]}
    copy_ = deep_clone(original)

    assert copy_ == original
    assert copy_ is not original
    assert copy_["address"] is not original["address"]
    assert copy_["tags"] is not original["tags"]

    copy_["address"]["city"] = "Lyon"
    assert original["address"]["city"] == "Paris"


def test_self_reference_terminates_and_keeps_cycle():
    """A dict that contains itself clones to a dict that contains itself."""
    original = {"name": "Test"}
    original["self"] = original

    copy_ = deep_clone(original)

    assert copy_["name"] == "Test"
    assert copy_["self"] is copy_
    assert copy_ is not original


def test_shared_substructure_stays_shared_within_one_call():
    """Two references to the same list map to the same cloned list."""
    shared = [1, 2]
    copy_ = deep_clone({"a": shared, "b": shared})
    assert copy_["a"] is copy_["b"]
    assert copy_["a"] is not shared


def test_dates_become_new_instances_with_same_instant():
    """Date-like values are copied, not aliased."""
    stamp = datetime(2024, 5, 17, 12, 30)
    day = date(2024, 5, 17)
    copy_ = deep_clone({"at": stamp, "on": day})
    assert copy_["at"] == stamp
    assert copy_["on"] == day


def test_tuples_and_sets_are_cloned():
    """Immutable containers keep their type; sets are copied."""
    original = {"pair": (1, [2]), "ids": {1, 2}}
    copy_ = deep_clone(original)
    assert isinstance(copy_["pair"], tuple)
    assert copy_["pair"][1] is not original["pair"][1]
    assert copy_["ids"] == {1, 2}
    assert copy_["ids"] is not original["ids"]


def test_depth_limit_copies_shallowly(caplog):
    """Past max_depth the subtree is copied one level and a warning is logged in debug mode."""
    root = current = {}
    for _ in range(10):
        current["child"] = {}
        current = current["child"]
    current["leaf"] = "x"

    cloner = DeepCloner(max_depth=3, debug=True)
    with caplog.at_level(logging.WARNING, logger="pyqt_editable_array.core.deep_clone"):
        copy_ = cloner.clone(root)

    assert copy_ is not root
    assert "max_depth=3" in caplog.text
    level3 = copy_["child"]["child"]["child"]
    original3 = root["child"]["child"]["child"]
    assert level3 is not original3
    # one level only: the grandchild beyond the limit is shared
    assert level3["child"] is original3["child"]


def test_breadth_limit_omits_remaining_siblings(caplog):
    """Entries beyond max_properties are dropped, with one warning in debug mode."""
    original = {f"k{i}": i for i in range(100)}
    cloner = DeepCloner(max_properties=10, debug=True)
    with caplog.at_level(logging.WARNING, logger="pyqt_editable_array.core.deep_clone"):
        copy_ = cloner.clone(original)

    assert len(copy_) == 10
    assert all(copy_[k] == original[k] for k in copy_)
    assert caplog.text.count("max_properties") == 1


def test_limits_are_quiet_without_debug(caplog):
    """Limit hits are not logged at warning level outside diagnostic mode."""
    cloner = DeepCloner(max_properties=1)
    with caplog.at_level(logging.WARNING, logger="pyqt_editable_array.core.deep_clone"):
        cloner.clone({"a": 1, "b": 2})
    assert caplog.text == ""


def test_arbitrary_objects_are_copied():
    """Plain objects are copied with their attributes cloned."""
    class Point:
        def __init__(self):
            self.coords = [1, 2]

    original = Point()
    copy_ = deep_clone(original)
    assert copy_ is not original
    assert copy_.coords == [1, 2]
    assert copy_.coords is not original.coords


def test_clone_never_raises_for_uncopyable_values():
    """A value whose copy fails comes back as the original reference."""
    class Stubborn:
        def __copy__(self):
            raise RuntimeError("no copies")

    value = Stubborn()
    assert deep_clone({"v": value})["v"] is value
