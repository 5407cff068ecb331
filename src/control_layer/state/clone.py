"""Value-level copies of live application state.

Every snapshot, change record and read result passes through ``deep_clone``
so nothing handed out by the state manager shares a mutable reference with
the live state tree.

Values are classified into a closed set of ``NodeKind`` tags first; cloning
and diffing both dispatch on the tag rather than probing types ad hoc.

Cycles are broken, not preserved: when a container is reached again while it
is still being copied (a back-reference to one of its own ancestors), the
clone holds ``CYCLE`` at that position. A container referenced twice from
different branches is not a cycle and is copied twice.
"""

from __future__ import annotations

import copy
import datetime
import enum
import logging
import uuid
from decimal import Decimal
from fractions import Fraction
from typing import Any, Set

logger = logging.getLogger(__name__)


class NodeKind(enum.Enum):
    """Tag for every value that can appear in a state tree."""

    NONE = "none"
    PRIMITIVE = "primitive"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SET = "set"
    OBJECT = "object"


class _CycleMarker:
    """Placeholder left where a self-referential graph loops back."""

    _instance = None

    def __new__(cls) -> "_CycleMarker":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<cycle>"

    def __copy__(self) -> "_CycleMarker":
        return self

    def __deepcopy__(self, memo: dict) -> "_CycleMarker":
        return self

    def __reduce__(self) -> str:
        return "CYCLE"


CYCLE = _CycleMarker()

# Immutable leaf types; returned as-is.
_PRIMITIVE_TYPES = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Decimal,
    Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.timezone,
    uuid.UUID,
    enum.Enum,
    range,
    _CycleMarker,
)


def kind_of(value: Any) -> NodeKind:
    """Classify a state value."""
    if value is None:
        return NodeKind.NONE
    if isinstance(value, _PRIMITIVE_TYPES):
        return NodeKind.PRIMITIVE
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    if isinstance(value, (set, frozenset)):
        return NodeKind.SET
    return NodeKind.OBJECT


def is_composite(value: Any) -> bool:
    """True for values the diff engine recurses into (ordered-key maps)."""
    return kind_of(value) is NodeKind.MAPPING


def deep_clone(value: Any) -> Any:
    """Return a structurally equal copy of ``value`` sharing no mutable state.

    ``None`` and primitives pass through. Dicts keep their key order and
    their subclass (``OrderedDict``, ``defaultdict``). Tuples, named tuples
    and frozensets are rebuilt so nested mutables inside them are copied too.

    Objects outside the tagged kinds go through ``copy.deepcopy``. If that
    fails (locks, sockets, open files) the original reference is returned and
    a warning is logged: such handles stay shared with live state.
    """
    return _clone(value, set())


def _clone(value: Any, ancestors: Set[int]) -> Any:
    kind = kind_of(value)

    if kind is NodeKind.NONE or kind is NodeKind.PRIMITIVE:
        return value

    marker = id(value)
    if marker in ancestors:
        return CYCLE

    ancestors.add(marker)
    try:
        if kind is NodeKind.MAPPING:
            return _clone_mapping(value, ancestors)
        if kind is NodeKind.SEQUENCE:
            return _clone_sequence(value, ancestors)
        if kind is NodeKind.SET:
            return _clone_set(value, ancestors)
        return _clone_object(value)
    finally:
        ancestors.discard(marker)


def _clone_mapping(value: dict, ancestors: Set[int]) -> dict:
    items = [(key, _clone(item, ancestors)) for key, item in value.items()]
    if type(value) is dict:
        return dict(items)
    # dict subclasses: copy the container shell (keeps default_factory etc.)
    # then refill it with cloned values.
    try:
        result = copy.copy(value)
        result.clear()
        result.update(items)
        return result
    except Exception as e:
        logger.warning(f"Cannot rebuild {type(value).__name__}, cloning as dict: {e}")
        return dict(items)


def _clone_sequence(value: Any, ancestors: Set[int]) -> Any:
    items = [_clone(item, ancestors) for item in value]
    if type(value) is list:
        return items
    if type(value) is tuple:
        return tuple(items)
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return type(value)(*items)
    try:
        return type(value)(items)
    except Exception as e:
        logger.warning(f"Cannot rebuild {type(value).__name__}, cloning as list: {e}")
        return items if isinstance(value, list) else tuple(items)


def _clone_set(value: Any, ancestors: Set[int]) -> Any:
    # Set members are hashable and in practice immutable; cloning still
    # rebuilds tuples holding mutables.
    items = [_clone(item, ancestors) for item in value]
    if isinstance(value, frozenset):
        return frozenset(items)
    return set(items)


def _clone_object(value: Any) -> Any:
    try:
        return copy.deepcopy(value)
    except Exception as e:
        logger.warning(
            f"deep_clone: {type(value).__name__} cannot be copied, "
            f"keeping shared reference: {e}"
        )
        return value
