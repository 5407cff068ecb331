"""In-memory snapshot store with FIFO eviction and age-based retention.

Snapshots are kept in insertion order. Eviction always drops the earliest
inserted snapshot, regardless of timestamps, so collisions or clock skew
between snapshots never change which one goes first.

The store holds its snapshots as-is; cloning on the way in and out is the
state manager's job.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterator, List, Optional

from .models import Snapshot, SnapshotFilter

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Ordered collection of snapshots bounded by ``max_snapshots``."""

    def __init__(self, max_snapshots: int = 100) -> None:
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self._max_snapshots = max_snapshots
        # snapshot_id -> Snapshot, oldest first
        self._snapshots: "OrderedDict[str, Snapshot]" = OrderedDict()

    @property
    def max_snapshots(self) -> int:
        return self._max_snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def __contains__(self, snapshot_id: object) -> bool:
        return snapshot_id in self._snapshots

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots.values()))

    def add(self, snapshot: Snapshot) -> List[str]:
        """Insert ``snapshot`` as the newest entry.

        Returns:
            IDs evicted to get back under ``max_snapshots``, oldest first.
        """
        if snapshot.snapshot_id in self._snapshots:
            raise ValueError(f"Duplicate snapshot id: {snapshot.snapshot_id}")
        self._snapshots[snapshot.snapshot_id] = snapshot

        evicted: List[str] = []
        while len(self._snapshots) > self._max_snapshots:
            snapshot_id, _ = self._snapshots.popitem(last=False)
            evicted.append(snapshot_id)
        if evicted:
            logger.debug(f"Evicted {len(evicted)} snapshot(s) over limit {self._max_snapshots}")
        return evicted

    def get(self, snapshot_id: str) -> Optional[Snapshot]:
        return self._snapshots.get(snapshot_id)

    def list(self, snapshot_filter: Optional[SnapshotFilter] = None) -> List[Snapshot]:
        """Snapshots matching every set criterion, oldest first."""
        if snapshot_filter is None:
            return list(self._snapshots.values())
        return [s for s in self._snapshots.values() if snapshot_filter.matches(s)]

    def remove(self, snapshot_id: str) -> bool:
        return self._snapshots.pop(snapshot_id, None) is not None

    def remove_older_than(self, cutoff_ms: int) -> List[str]:
        """Drop snapshots whose timestamp is strictly before ``cutoff_ms``."""
        expired = [sid for sid, s in self._snapshots.items() if s.timestamp < cutoff_ms]
        for snapshot_id in expired:
            del self._snapshots[snapshot_id]
        return expired

