"""
control-layer - snapshot, diff and rollback engine for runtime controls

Controls are named, independently revertible configuration changes applied to
a live application. The StateManager keeps immutable snapshots of the
application state, tracks each control's before/after state, computes
structural diffs, and emits lifecycle events for audit logs and UIs.
"""

__version__ = "0.1.0"

# state must load before diff: diff.engine depends on state.clone
from .state import (
    ChangeType,
    ControlState,
    Snapshot,
    SnapshotFilter,
    StateCell,
    StateChange,
    StateManager,
    deep_clone,
)
from .config import StateManagerConfig, load_config
from .diff import ChangeDiff, DiffType, apply_diff, calculate_diff, reverse_diff
from .events import EventEmitter, SnapshotDeletion, StateEvent
from .exceptions import (
    ControlLayerError,
    ControlNotFoundError,
    NotFoundError,
    SnapshotNotFoundError,
)

__all__ = [
    "StateManager",  # Main entry point
    "StateManagerConfig",
    "load_config",
    "StateCell",
    "Snapshot",
    "SnapshotFilter",
    "StateChange",
    "ChangeType",
    "ControlState",
    "ChangeDiff",
    "DiffType",
    "calculate_diff",
    "reverse_diff",
    "apply_diff",
    "deep_clone",
    "EventEmitter",
    "StateEvent",
    "SnapshotDeletion",
    "ControlLayerError",
    "NotFoundError",
    "SnapshotNotFoundError",
    "ControlNotFoundError",
]
