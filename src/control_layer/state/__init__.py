"""Snapshot, control-change and rollback engine for live application state."""

from .clone import CYCLE, NodeKind, deep_clone, kind_of
from .models import ChangeType, ControlState, Snapshot, SnapshotFilter, StateChange
from .store import SnapshotStore
from .tracker import ControlChangeTracker
from .manager import StateCell, StateManager

__all__ = [
    "CYCLE",
    "NodeKind",
    "deep_clone",
    "kind_of",
    "ChangeType",
    "ControlState",
    "Snapshot",
    "SnapshotFilter",
    "StateChange",
    "SnapshotStore",
    "ControlChangeTracker",
    "StateCell",
    "StateManager",
]
