"""Tests for the per-control change tracker."""

import sys

sys.path.insert(0, "src")

import pytest

from control_layer.exceptions import ControlNotFoundError
from control_layer.state.models import ChangeType, StateChange
from control_layer.state.tracker import ControlChangeTracker


def _change(control_id, change_type=ChangeType.APPLY, before=None, after=None, n=0):
    return StateChange(
        change_id=f"change-{control_id}-{n}",
        control_id=control_id,
        change_type=change_type,
        before=before if before is not None else {},
        after=after if after is not None else {},
        timestamp=n,
    )


class TestControlChangeTracker:
    def test_unknown_control(self):
        tracker = ControlChangeTracker()

        assert tracker.control_state("nope") is None
        assert tracker.history("nope") == []
        assert "nope" not in tracker

    def test_history_in_application_order(self):
        tracker = ControlChangeTracker()
        tracker.record(_change("c1", after={"v": 1}, n=1))
        tracker.record(_change("c2", after={"v": 2}, n=2))
        tracker.record(_change("c1", after={"v": 3}, n=3))

        assert [c.after["v"] for c in tracker.history("c1")] == [1, 3]
        assert tracker.control_state("c1").after == {"v": 3}
        assert tracker.known_controls() == ["c1", "c2"]

    def test_history_copy_is_detached(self):
        tracker = ControlChangeTracker()
        tracker.record(_change("c1"))

        tracker.history("c1").clear()

        assert len(tracker.history("c1")) == 1

    def test_active_controls_drop_reverted(self):
        tracker = ControlChangeTracker()
        tracker.record(_change("c1", n=1))
        tracker.record(_change("c2", n=2))
        tracker.record(_change("c1", ChangeType.REVERT, n=3))

        assert tracker.active_controls() == ["c2"]

    def test_revert_target_is_latest_apply(self):
        tracker = ControlChangeTracker()
        tracker.record(_change("c1", before={"v": 0}, after={"v": 1}, n=1))

        assert tracker.revert_target("c1").before == {"v": 0}

    def test_revert_target_unknown(self):
        with pytest.raises(ControlNotFoundError) as exc_info:
            ControlChangeTracker().revert_target("missing")
        assert exc_info.value.control_id == "missing"

    def test_revert_target_already_reverted(self):
        tracker = ControlChangeTracker()
        tracker.record(_change("c1", n=1))
        tracker.record(_change("c1", ChangeType.REVERT, n=2))

        with pytest.raises(ControlNotFoundError) as exc_info:
            tracker.revert_target("c1")
        assert exc_info.value.reason == "already reverted"
