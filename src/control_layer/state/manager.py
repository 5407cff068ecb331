"""StateManager: snapshot, diff, apply/revert and rollback for live state.

The manager is the only object that touches the live state, the snapshot
store and the control change tracker. Everything it returns is a clone, so
callers (audit log, policy evaluator, UI) can hold on to results or mutate
them freely.

Every mutating call runs under one re-entrant lock and computes all clones
before committing anything: a failed lookup or a raising clone leaves the
live state, the history and the store exactly as they were.

Example:
    >>> manager = StateManager()
    >>> manager.apply_disc_changes("ctrl-1", {"value": 1}).after
    {'value': 1}
    >>> manager.revert_control_changes("ctrl-1").after
    {}
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..config import DEFAULT_CONFIG, MS_PER_DAY, StateManagerConfig
from ..diff.engine import calculate_diff
from ..diff.models import ChangeDiff
from ..events.emitter import EventEmitter, EventName, Handler
from ..events.schema import DeletionReason, SnapshotDeletion, StateEvent
from ..exceptions import SnapshotNotFoundError, UnsupportedBackendError
from .clone import deep_clone
from .models import (
    ChangeType,
    ControlState,
    Snapshot,
    SnapshotFilter,
    StateChange,
    new_change_id,
    new_snapshot_id,
    now_ms,
)
from .store import SnapshotStore
from .tracker import ControlChangeTracker

logger = logging.getLogger(__name__)


Clock = Callable[[], int]


class StateCell:
    """Holder for one application's live state.

    Pass a cell to ``StateManager`` to choose the starting state; each
    manager otherwise gets its own empty cell, so independent managers
    never share state.
    """

    def __init__(self, initial: Any = None) -> None:
        self._value = {} if initial is None else deep_clone(initial)

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value


class StateManager:
    """Facade over the snapshot store and the control change tracker.

    Args:
        config: Limits and behavior; defaults to ``StateManagerConfig()``.
        state: Live state cell; a fresh empty one when omitted.
        clock: Returns "now" in epoch milliseconds (injectable for tests).
        events: Emitter to publish lifecycle events on.

    Raises:
        UnsupportedBackendError: If ``config.storage_backend`` is not "memory".
    """

    def __init__(
        self,
        config: Optional[StateManagerConfig] = None,
        state: Optional[StateCell] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventEmitter] = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        if self._config.storage_backend != "memory":
            raise UnsupportedBackendError(self._config.storage_backend)

        self._state = state if state is not None else StateCell()
        self._clock: Clock = clock or now_ms
        self._events = events if events is not None else EventEmitter()
        self._store = SnapshotStore(self._config.max_snapshots)
        self._tracker = ControlChangeTracker()
        self._lock = threading.RLock()

    @property
    def config(self) -> StateManagerConfig:
        return self._config

    @property
    def events(self) -> EventEmitter:
        return self._events

    # ── Events ────────────────────────────────────────────────────

    def on(self, event: EventName, handler: Optional[Handler] = None) -> Any:
        return self._events.on(event, handler)

    def once(self, event: EventName, handler: Optional[Handler] = None) -> Any:
        return self._events.once(event, handler)

    def off(self, event: EventName, handler: Handler) -> None:
        self._events.off(event, handler)

    # ── Live state ────────────────────────────────────────────────

    def get_current_state(self) -> Any:
        """Clone of the live state."""
        with self._lock:
            return deep_clone(self._state.get())

    # ── Snapshots ─────────────────────────────────────────────────

    def create_snapshot(self, metadata: Optional[Dict[str, Any]] = None) -> Snapshot:
        """Capture the live state and the controls currently in effect.

        The oldest snapshot is evicted when the store goes over
        ``max_snapshots``.
        """
        with self._lock:
            return self._capture(metadata).clone()

    def get_snapshot(self, snapshot_id: str) -> Optional[Snapshot]:
        with self._lock:
            snapshot = self._store.get(snapshot_id)
            return snapshot.clone() if snapshot is not None else None

    def list_snapshots(
        self,
        snapshot_filter: Optional[SnapshotFilter] = None,
        *,
        control_id: Optional[str] = None,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
    ) -> List[Snapshot]:
        """Snapshots matching all given criteria, oldest first.

        Criteria come either as a ``SnapshotFilter`` or as keywords, not both.
        """
        if snapshot_filter is not None and (
            control_id is not None or start_time is not None or end_time is not None
        ):
            raise ValueError("Pass either snapshot_filter or keyword criteria, not both")
        if snapshot_filter is None and (
            control_id is not None or start_time is not None or end_time is not None
        ):
            snapshot_filter = SnapshotFilter(control_id, start_time, end_time)
        with self._lock:
            return [s.clone() for s in self._store.list(snapshot_filter)]

    def rollback_to_snapshot(self, snapshot_id: str) -> None:
        """Replace the live state with a fresh clone of a stored snapshot.

        Raises:
            SnapshotNotFoundError: If ``snapshot_id`` is unknown.
        """
        with self._lock:
            snapshot = self._store.get(snapshot_id)
            if snapshot is None:
                raise SnapshotNotFoundError(snapshot_id)
            self._state.set(deep_clone(snapshot.state))
            logger.info(f"Rolled back live state to {snapshot_id}")
            self._events.emit(StateEvent.SNAPSHOT_RESTORED, snapshot_id)

    def delete_snapshot(self, snapshot_id: str) -> bool:
        """Remove one snapshot; False when it does not exist."""
        with self._lock:
            if not self._store.remove(snapshot_id):
                return False
            logger.debug(f"Deleted snapshot {snapshot_id}")
            self._events.emit(
                StateEvent.SNAPSHOT_DELETED,
                SnapshotDeletion((snapshot_id,), DeletionReason.DELETED, self._clock()),
            )
            return True

    def cleanup(self, retention_days: Optional[int] = None) -> int:
        """Remove snapshots older than the retention window.

        Args:
            retention_days: Whole days to keep; defaults to
                ``config.retention_days``.

        Returns:
            Number of snapshots removed.
        """
        days = self._config.retention_days if retention_days is None else retention_days
        if days < 0:
            raise ValueError("retention_days must be non-negative")
        with self._lock:
            now = self._clock()
            window = self._config.retention_ms if retention_days is None else days * MS_PER_DAY
            removed = self._store.remove_older_than(now - window)
            if removed:
                logger.info(f"Cleanup removed {len(removed)} snapshot(s) older than {days} day(s)")
                self._events.emit(
                    StateEvent.SNAPSHOT_DELETED,
                    SnapshotDeletion(tuple(removed), DeletionReason.CLEANUP, now, days),
                )
            return len(removed)

    # ── Diff ──────────────────────────────────────────────────────

    def diff(self, snapshot_id_a: str, snapshot_id_b: str) -> List[ChangeDiff]:
        """Changes from snapshot A's state to snapshot B's state.

        Raises:
            SnapshotNotFoundError: If either snapshot is unknown.
        """
        with self._lock:
            first = self._store.get(snapshot_id_a)
            if first is None:
                raise SnapshotNotFoundError(snapshot_id_a)
            second = self._store.get(snapshot_id_b)
            if second is None:
                raise SnapshotNotFoundError(snapshot_id_b)
            return calculate_diff(first.state, second.state)

    def calculate_diff(self, before: Any, after: Any) -> List[ChangeDiff]:
        return calculate_diff(before, after)

    # ── Controls ──────────────────────────────────────────────────

    def apply_disc_changes(self, control_id: str, produced_state: Any) -> StateChange:
        """Make ``produced_state`` the live state on behalf of ``control_id``.

        Records the before/after pair, takes an automatic snapshot (unless
        ``snapshot_on_change`` is off) and emits ``state-changed``.
        """
        if not control_id:
            raise ValueError("control_id must be a non-empty string")
        with self._lock:
            timestamp = self._clock()
            before = deep_clone(self._state.get())
            new_state = deep_clone(produced_state)
            change = StateChange(
                change_id=new_change_id(timestamp),
                control_id=control_id,
                change_type=ChangeType.APPLY,
                before=before,
                after=deep_clone(new_state),
                timestamp=timestamp,
            )
            self._commit(change, new_state)
            return change.clone()

    def revert_control_changes(self, control_id: str) -> StateChange:
        """Restore the live state to what it was before the control's last apply.

        Raises:
            ControlNotFoundError: If the control has no applied state (never
                applied, or already reverted).
        """
        with self._lock:
            target = self._tracker.revert_target(control_id)
            timestamp = self._clock()
            restored = deep_clone(target.before)
            change = StateChange(
                change_id=new_change_id(timestamp),
                control_id=control_id,
                change_type=ChangeType.REVERT,
                before=deep_clone(target.after),
                after=deep_clone(restored),
                timestamp=timestamp,
            )
            self._commit(change, restored)
            return change.clone()

    def get_control_state(self, control_id: str) -> Optional[ControlState]:
        with self._lock:
            state = self._tracker.control_state(control_id)
            if state is None:
                return None
            return ControlState(before=deep_clone(state.before), after=deep_clone(state.after))

    def get_control_history(self, control_id: str) -> List[StateChange]:
        with self._lock:
            return [change.clone() for change in self._tracker.history(control_id)]

    def known_controls(self) -> List[str]:
        with self._lock:
            return self._tracker.known_controls()

    def active_controls(self) -> List[str]:
        with self._lock:
            return self._tracker.active_controls()

    # ── Internals ─────────────────────────────────────────────────

    def _commit(self, change: StateChange, new_state: Any) -> None:
        self._state.set(new_state)
        self._tracker.record(change)
        logger.debug(f"{change.change_type.value} control={change.control_id}")
        if self._config.snapshot_on_change:
            self._capture(
                {
                    "control_id": change.control_id,
                    "change_type": change.change_type.value,
                    "change_id": change.change_id,
                }
            )
        self._events.emit(StateEvent.STATE_CHANGED, change.clone())

    def _capture(self, metadata: Optional[Dict[str, Any]]) -> Snapshot:
        timestamp = self._clock()
        snapshot = Snapshot(
            snapshot_id=new_snapshot_id(timestamp),
            timestamp=timestamp,
            state=deep_clone(self._state.get()),
            active_controls=frozenset(self._tracker.active_controls()),
            metadata=deep_clone(metadata or {}),
        )
        evicted = self._store.add(snapshot)
        logger.debug(f"Created snapshot {snapshot.snapshot_id} ({len(self._store)} stored)")

        self._events.emit(StateEvent.SNAPSHOT_CREATED, snapshot.clone())
        if evicted:
            self._events.emit(
                StateEvent.SNAPSHOT_DELETED,
                SnapshotDeletion(tuple(evicted), DeletionReason.EVICTED, timestamp),
            )
        return snapshot
