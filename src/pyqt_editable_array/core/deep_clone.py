"""
Bounded deep clone for row data.

Every value that crosses the manager boundary (assigned data, data read back,
edit snapshots, history entries) goes through DeepCloner so that no caller
ever holds a live alias into internal state.

Guarantees:
- Cycles are preserved: a node seen earlier in the same call maps to its clone
- Depth is bounded: subtrees deeper than max_depth are copied one level only
- Breadth is bounded: after max_properties visited entries, siblings are dropped
- Never raises: falls back to a shallow copy, then to the original reference
"""

import copy
import logging
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50
DEFAULT_MAX_PROPERTIES = 10_000

# Immutable leaves are shared, not copied.
_ATOMIC_TYPES = (type(None), bool, int, float, complex, str, bytes, Decimal, Enum, range, type)


class DeepCloner:
    """
    Identity-memoized recursive cloner with depth and breadth limits.

    One instance can be reused; all per-call state lives in local variables
    of clone(), so the cloner is safe to share between collaborators.

    Usage:
        cloner = DeepCloner(max_depth=50, max_properties=10_000, debug=True)
        copy_of_rows = cloner.clone(rows)
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH,
                 max_properties: int = DEFAULT_MAX_PROPERTIES,
                 debug: bool = False):
        self.max_depth = max_depth
        self.max_properties = max_properties
        self.debug = debug

    def clone(self, value: Any) -> Any:
        """Return a structurally equal copy of value sharing no mutable state."""
        state = _CloneCall(self)
        try:
            return state.clone(value, 0)
        except Exception as e:
            logger.warning(f"Deep clone failed ({type(e).__name__}: {e}), falling back to shallow copy")
            return _shallow_copy(value)


class _CloneCall:
    """Per-call bookkeeping: memo table, visit counter, warnings already issued."""

    def __init__(self, cloner: DeepCloner):
        self.cloner = cloner
        self.memo: Dict[int, Any] = {}
        self.visited = 0
        self.depth_warned = False
        self.breadth_warned = False

    def _warn(self, message: str) -> None:
        if self.cloner.debug:
            logger.warning(message)
        else:
            logger.debug(message)

    def _count(self) -> bool:
        """Count one property; False once the breadth limit is reached."""
        if self.visited >= self.cloner.max_properties:
            if not self.breadth_warned:
                self.breadth_warned = True
                self._warn(f"Deep clone hit max_properties={self.cloner.max_properties}; "
                           f"remaining entries omitted")
            return False
        self.visited += 1
        return True

    def clone(self, value: Any, depth: int) -> Any:
        if isinstance(value, _ATOMIC_TYPES):
            return value

        # datetime is a subclass of date; both carry their instant through replace()
        if isinstance(value, (datetime, date, time)):
            return value.replace()

        key = id(value)
        if key in self.memo:
            return self.memo[key]

        if depth >= self.cloner.max_depth:
            if not self.depth_warned:
                self.depth_warned = True
                self._warn(f"Deep clone hit max_depth={self.cloner.max_depth}; "
                           f"deeper values copied shallowly")
            result = _shallow_copy(value)
            self.memo[key] = result
            return result

        if isinstance(value, Mapping):
            result: Any = {}
            self.memo[key] = result
            for k, v in list(value.items()):
                if not self._count():
                    break
                result[k] = self.clone(v, depth + 1)
            return result

        if isinstance(value, list):
            result = []
            self.memo[key] = result
            for item in list(value):
                if not self._count():
                    break
                result.append(self.clone(item, depth + 1))
            return result

        if isinstance(value, set):
            result = set()
            self.memo[key] = result
            for item in list(value):
                if not self._count():
                    break
                result.add(self.clone(item, depth + 1))
            return result

        if isinstance(value, (tuple, frozenset)):
            # Immutable containers are built after their children, so a cycle
            # through them resolves to the nearest mutable ancestor.
            items = []
            for item in value:
                if not self._count():
                    break
                items.append(self.clone(item, depth + 1))
            if isinstance(value, frozenset):
                result = frozenset(items)
            elif hasattr(value, '_fields'):
                result = type(value)(*items)
            else:
                result = tuple(items)
            self.memo[key] = result
            return result

        return self._clone_object(value, depth)

    def _clone_object(self, value: Any, depth: int) -> Any:
        """Arbitrary objects: shallow copy, then clone instance attributes."""
        result = copy.copy(value)
        self.memo[id(value)] = result
        attrs = getattr(value, '__dict__', None)
        if isinstance(attrs, dict) and result is not value:
            for name, attr in list(attrs.items()):
                if not self._count():
                    break
                setattr(result, name, self.clone(attr, depth + 1))
        return result


def _shallow_copy(value: Any) -> Any:
    """Best-effort one-level copy; the original reference as a last resort."""
    try:
        if isinstance(value, Mapping):
            return dict(value)
        if isinstance(value, list):
            return list(value)
        if isinstance(value, set):
            return set(value)
        return copy.copy(value)
    except Exception as e:
        logger.error(f"Shallow copy failed ({type(e).__name__}: {e}), returning original reference")
        return value


_default_cloner: Optional[DeepCloner] = None


def deep_clone(value: Any, max_depth: Optional[int] = None,
               max_properties: Optional[int] = None, debug: bool = False) -> Any:
    """Clone with the default limits unless overridden."""
    global _default_cloner
    if max_depth is None and max_properties is None and not debug:
        if _default_cloner is None:
            _default_cloner = DeepCloner()
        return _default_cloner.clone(value)
    return DeepCloner(
        max_depth=DEFAULT_MAX_DEPTH if max_depth is None else max_depth,
        max_properties=DEFAULT_MAX_PROPERTIES if max_properties is None else max_properties,
        debug=debug,
    ).clone(value)
