"""Data models for state snapshots and per-control change records."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .clone import deep_clone


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_snapshot_id(timestamp: int) -> str:
    """``snapshot-<epoch ms>-<random>``; unique even for equal timestamps."""
    return f"snapshot-{timestamp}-{uuid.uuid4().hex[:12]}"


def new_change_id(timestamp: int) -> str:
    return f"change-{timestamp}-{uuid.uuid4().hex[:12]}"


class ChangeType(str, Enum):
    """Kind of control change recorded in a StateChange."""

    APPLY = "apply"
    REVERT = "revert"


@dataclass(frozen=True)
class Snapshot:
    """Immutable point-in-time copy of the whole live state.

    ``state`` and ``metadata`` are deep clones taken at capture time.
    """

    snapshot_id: str
    timestamp: int  # epoch ms
    state: Any
    active_controls: FrozenSet[str] = frozenset()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def clone(self) -> "Snapshot":
        """Copy safe to hand to callers; shares no mutable data."""
        return replace(self, state=deep_clone(self.state), metadata=deep_clone(self.metadata))

    def to_dict(self) -> Dict[str, Any]:
        """Export to a plain dict (e.g., for an audit record)."""
        return {
            "snapshot_id": self.snapshot_id,
            "timestamp": self.timestamp,
            "state": deep_clone(self.state),
            "active_controls": sorted(self.active_controls),
            "metadata": deep_clone(self.metadata),
        }


@dataclass(frozen=True)
class StateChange:
    """Append-only record of one apply or revert of a control."""

    change_id: str
    control_id: str
    change_type: ChangeType
    before: Any
    after: Any
    timestamp: int  # epoch ms

    def clone(self) -> "StateChange":
        return replace(self, before=deep_clone(self.before), after=deep_clone(self.after))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "change_id": self.change_id,
            "control_id": self.control_id,
            "change_type": self.change_type.value,
            "before": deep_clone(self.before),
            "after": deep_clone(self.after),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ControlState:
    """Latest before/after pair recorded for a control."""

    before: Any
    after: Any


@dataclass(frozen=True)
class SnapshotFilter:
    """Criteria for ``list_snapshots``; unset fields match everything.

    ``start_time``/``end_time`` are inclusive epoch-ms bounds.
    """

    control_id: Optional[str] = None
    start_time: Optional[int] = None
    end_time: Optional[int] = None

    def matches(self, snapshot: Snapshot) -> bool:
        if self.control_id is not None and self.control_id not in snapshot.active_controls:
            return False
        if self.start_time is not None and snapshot.timestamp < self.start_time:
            return False
        if self.end_time is not None and snapshot.timestamp > self.end_time:
            return False
        return True
