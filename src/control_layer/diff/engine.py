"""Diff engine: computes path-qualified changes between two state trees.

The walk is recursive over ordered-key maps only:
  1. Keys of ``before`` in their own order; a key missing from ``after`` is
     ``removed``.
  2. Keys only in ``after``, in ``after``'s order, are ``added``.
  3. Keys in both recurse when both values are maps; otherwise the values are
     compared and an unequal pair is ``modified``.

Sequences and sets are compared as opaque values. Equality is type-strict so
``1``, ``1.0`` and ``True`` are three different values.
"""

import math
from typing import Any, Iterable, List, Sequence, Tuple

from ..state.clone import NodeKind, deep_clone, is_composite, kind_of
from .models import ChangeDiff, DiffSummary, DiffType

PATH_SEPARATOR = "."


def join_path(segments: Sequence[Any]) -> str:
    """Render a key sequence as a dotted path (``("a", "b") -> "a.b"``)."""
    return PATH_SEPARATOR.join(str(segment) for segment in segments)


def values_equal(left: Any, right: Any) -> bool:
    """Deep, type-strict equality used for leaf comparison.

    Terminates on self-referential lists and maps: a pair of containers met
    again while still being compared counts as equal. Two float NaNs are
    equal, so separately built copies of a state compare the same.
    """
    return _equal(left, right, set())


def _equal(left: Any, right: Any, active: set) -> bool:
    if left is right:
        return True
    left_kind = kind_of(left)
    if left_kind is not kind_of(right):
        return False
    if left_kind is NodeKind.MAPPING or left_kind is NodeKind.SEQUENCE:
        pair = (id(left), id(right))
        if pair in active:
            return True
        if left_kind is NodeKind.MAPPING:
            if left.keys() != right.keys():
                return False
            pairs = [(left[key], right[key]) for key in left]
        else:
            if type(left) is not type(right) or len(left) != len(right):
                return False
            pairs = list(zip(left, right))
        active.add(pair)
        try:
            return all(_equal(a, b, active) for a, b in pairs)
        finally:
            active.discard(pair)
    if type(left) is not type(right):
        return False
    if isinstance(left, float) and math.isnan(left) and math.isnan(right):
        return True
    try:
        return bool(left == right)
    except Exception:
        # objects whose __eq__ raises are treated as distinct
        return False


def calculate_diff(before: Any, after: Any) -> List[ChangeDiff]:
    """Compute the ordered list of changes turning ``before`` into ``after``.

    Identical inputs give ``[]``. When either root is not a map the roots
    are compared as values and a difference is one ``modified`` entry with
    the empty path.
    """
    changes: List[ChangeDiff] = []
    if is_composite(before) and is_composite(after):
        _walk(before, after, (), changes, set())
    elif not values_equal(before, after):
        changes.append(
            ChangeDiff(
                "",
                DiffType.MODIFIED,
                (),
                old_value=deep_clone(before),
                new_value=deep_clone(after),
            )
        )
    return changes


def _walk(
    before: dict,
    after: dict,
    prefix: Tuple[Any, ...],
    changes: List[ChangeDiff],
    active: set,
) -> None:
    pair = (id(before), id(after))
    if pair in active:
        # both sides loop back to a map already being compared
        return
    active.add(pair)

    for key, old in before.items():
        segments = prefix + (key,)
        if key not in after:
            changes.append(
                ChangeDiff(join_path(segments), DiffType.REMOVED, segments, old_value=deep_clone(old))
            )
            continue
        new = after[key]
        if is_composite(old) and is_composite(new):
            _walk(old, new, segments, changes, active)
        elif not values_equal(old, new):
            changes.append(
                ChangeDiff(
                    join_path(segments),
                    DiffType.MODIFIED,
                    segments,
                    old_value=deep_clone(old),
                    new_value=deep_clone(new),
                )
            )

    for key, new in after.items():
        if key in before:
            continue
        segments = prefix + (key,)
        changes.append(
            ChangeDiff(join_path(segments), DiffType.ADDED, segments, new_value=deep_clone(new))
        )

    active.discard(pair)


def reverse_diff(changes: Iterable[ChangeDiff]) -> List[ChangeDiff]:
    """Swap added/removed and old/new so the diff reads ``after -> before``."""
    return [change.reversed() for change in changes]


def apply_diff(base: Any, changes: Iterable[ChangeDiff]) -> Any:
    """Return a copy of ``base`` with ``changes`` applied.

    Changes are addressed by ``segments``, so keys containing dots are set
    exactly. Intermediate maps are created as needed. ``base`` is never
    mutated.
    """
    result = deep_clone(base)
    for change in changes:
        if not change.segments:
            result = deep_clone(change.new_value) if change.type is not DiffType.REMOVED else None
            continue
        if change.type is DiffType.REMOVED:
            _delete_path(result, change.segments)
        else:
            result = _set_path(result, change.segments, deep_clone(change.new_value))
    return result


def _set_path(root: Any, segments: Tuple[Any, ...], value: Any) -> Any:
    if not is_composite(root):
        root = {}
    node = root
    for key in segments[:-1]:
        child = node.get(key)
        if not is_composite(child):
            child = {}
            node[key] = child
        node = child
    node[segments[-1]] = value
    return root


def _delete_path(root: Any, segments: Tuple[Any, ...]) -> None:
    node = root
    for key in segments[:-1]:
        if not is_composite(node):
            return
        node = node.get(key)
    if is_composite(node):
        node.pop(segments[-1], None)


def summarize_diff(changes: Iterable[ChangeDiff]) -> DiffSummary:
    """Group changes by type."""
    summary = DiffSummary()
    for change in changes:
        if change.type is DiffType.ADDED:
            summary.added.append(change)
        elif change.type is DiffType.REMOVED:
            summary.removed.append(change)
        else:
            summary.modified.append(change)
    return summary
