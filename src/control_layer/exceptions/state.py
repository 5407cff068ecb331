"""Lookup failures raised by mutating state operations.

Reads report absence with ``None`` or ``[]``. Mutating calls that reference
an unknown snapshot or control raise one of these instead, before any state
is touched.
"""

from .base import ControlLayerError


class NotFoundError(ControlLayerError):
    """Base class for references to snapshots or controls that do not exist."""

    pass


class SnapshotNotFoundError(NotFoundError):
    """Raised when a snapshot ID is not present in the store."""

    def __init__(self, snapshot_id: str):
        super().__init__("Snapshot not found", details={"snapshot_id": snapshot_id})
        self.snapshot_id = snapshot_id


class ControlNotFoundError(NotFoundError):
    """Raised when a control has no applied state to revert."""

    def __init__(self, control_id: str, reason: str = "no recorded state"):
        super().__init__(
            "Control not found",
            details={"control_id": control_id, "reason": reason},
        )
        self.control_id = control_id
        self.reason = reason
