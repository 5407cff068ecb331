"""Lifecycle events emitted by the state manager.

Collaborators (audit log, UI) subscribe by event name. Payloads:

- ``snapshot-created``  -> ``Snapshot`` (a clone)
- ``snapshot-restored`` -> snapshot ID (``str``)
- ``state-changed``     -> ``StateChange`` (a clone)
- ``snapshot-deleted``  -> ``SnapshotDeletion``
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class StateEvent(str, Enum):
    SNAPSHOT_CREATED = "snapshot-created"
    SNAPSHOT_RESTORED = "snapshot-restored"
    STATE_CHANGED = "state-changed"
    SNAPSHOT_DELETED = "snapshot-deleted"


class DeletionReason(str, Enum):
    EVICTED = "evicted"  # max_snapshots exceeded
    CLEANUP = "cleanup"  # older than the retention window
    DELETED = "deleted"  # removed by ID


@dataclass(frozen=True)
class SnapshotDeletion:
    """Payload for ``snapshot-deleted``: which snapshots went, and why."""

    snapshot_ids: Tuple[str, ...]
    reason: DeletionReason
    timestamp: int = 0  # epoch ms
    retention_days: int | None = None

    @property
    def count(self) -> int:
        return len(self.snapshot_ids)
