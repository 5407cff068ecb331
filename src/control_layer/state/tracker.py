"""Per-control change log: what each control did, and how to undo it.

Each control has an append-only list of StateChange records in the order
they were applied. A control is *in effect* while its newest record is an
``apply``; reverting appends a ``revert`` record and takes it out of effect.
Only the last applied state can be reverted (no per-control undo stack).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..exceptions import ControlNotFoundError
from .models import ChangeType, ControlState, StateChange

logger = logging.getLogger(__name__)


class ControlChangeTracker:
    """Owns the change history of every control seen so far."""

    def __init__(self) -> None:
        # control_id -> records, oldest first; dict order = first-seen order
        self._history: Dict[str, List[StateChange]] = {}

    def __contains__(self, control_id: object) -> bool:
        return control_id in self._history

    def record(self, change: StateChange) -> None:
        """Append ``change`` to its control's history."""
        self._history.setdefault(change.control_id, []).append(change)
        logger.debug(
            f"Recorded {change.change_type.value} for control={change.control_id} "
            f"(change_id={change.change_id})"
        )

    def latest(self, control_id: str) -> Optional[StateChange]:
        history = self._history.get(control_id)
        if not history:
            return None
        return history[-1]

    def revert_target(self, control_id: str) -> StateChange:
        """The apply record a revert of ``control_id`` would undo.

        Raises:
            ControlNotFoundError: If the control was never applied, or its
                last change was already reverted.
        """
        latest = self.latest(control_id)
        if latest is None:
            raise ControlNotFoundError(control_id)
        if latest.change_type is not ChangeType.APPLY:
            raise ControlNotFoundError(control_id, reason="already reverted")
        return latest

    def control_state(self, control_id: str) -> Optional[ControlState]:
        latest = self.latest(control_id)
        if latest is None:
            return None
        return ControlState(before=latest.before, after=latest.after)

    def history(self, control_id: str) -> List[StateChange]:
        return list(self._history.get(control_id, []))

    def known_controls(self) -> List[str]:
        """Every control with at least one record, in first-seen order."""
        return list(self._history)

    def active_controls(self) -> List[str]:
        """Controls whose newest record is an apply."""
        return [
            control_id
            for control_id, history in self._history.items()
            if history and history[-1].change_type is ChangeType.APPLY
        ]
