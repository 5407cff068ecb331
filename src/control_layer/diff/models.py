"""Data models for structural diffs between two state trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class DiffType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class ChangeDiff:
    """One path-addressed difference between two state values.

    ``segments`` is the exact key sequence from the root; ``path`` joins it
    with ``.`` for display and lookups. The two only disagree in precision
    when a key itself contains a dot.
    """

    path: str
    type: DiffType
    segments: Tuple[Any, ...] = ()
    old_value: Any = None  # set for removed | modified
    new_value: Any = None  # set for added | modified

    @property
    def before(self) -> Any:
        return self.old_value

    @property
    def after(self) -> Any:
        return self.new_value

    def reversed(self) -> "ChangeDiff":
        """The same change seen from the other side."""
        if self.type is DiffType.ADDED:
            return ChangeDiff(self.path, DiffType.REMOVED, self.segments, old_value=self.new_value)
        if self.type is DiffType.REMOVED:
            return ChangeDiff(self.path, DiffType.ADDED, self.segments, new_value=self.old_value)
        return ChangeDiff(
            self.path,
            DiffType.MODIFIED,
            self.segments,
            old_value=self.new_value,
            new_value=self.old_value,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path, "type": self.type.value}
        if self.type is not DiffType.ADDED:
            data["old_value"] = self.old_value
        if self.type is not DiffType.REMOVED:
            data["new_value"] = self.new_value
        return data


@dataclass
class DiffSummary:
    """Counts of a diff, grouped so renderers can show totals first."""

    added: List[ChangeDiff] = field(default_factory=list)
    removed: List[ChangeDiff] = field(default_factory=list)
    modified: List[ChangeDiff] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    @property
    def identical(self) -> bool:
        return self.change_count == 0

    @property
    def summary(self) -> str:
        if self.identical:
            return "No changes"
        parts = []
        if self.added:
            parts.append(f"{len(self.added)} added")
        if self.removed:
            parts.append(f"{len(self.removed)} removed")
        if self.modified:
            parts.append(f"{len(self.modified)} modified")
        return ", ".join(parts)
