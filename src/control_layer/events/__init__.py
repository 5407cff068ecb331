"""Lifecycle events for collaborators (audit log, UI) to observe."""

from .emitter import EventEmitter
from .schema import DeletionReason, SnapshotDeletion, StateEvent

__all__ = ["EventEmitter", "StateEvent", "DeletionReason", "SnapshotDeletion"]
