"""Tests for the lifecycle event emitter."""

import sys

sys.path.insert(0, "src")

import pytest

from control_layer.events import EventEmitter, StateEvent
from control_layer.events.schema import DeletionReason, SnapshotDeletion


class TestSubscription:
    def test_handlers_run_in_registration_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on("state-changed", lambda p: calls.append(("first", p)))
        emitter.on(StateEvent.STATE_CHANGED, lambda p: calls.append(("second", p)))

        delivered = emitter.emit(StateEvent.STATE_CHANGED, 7)

        assert delivered == 2
        assert calls == [("first", 7), ("second", 7)]

    def test_on_as_decorator(self):
        emitter = EventEmitter()
        seen = []

        @emitter.on("snapshot-created")
        def handler(payload):
            seen.append(payload)

        emitter.emit("snapshot-created", "s1")

        assert emitter.listener_count("snapshot-created") == 1
        assert seen == ["s1"]
        assert callable(handler)

    def test_once_as_decorator(self):
        emitter = EventEmitter()
        seen = []

        @emitter.once(StateEvent.STATE_CHANGED)
        def handler(payload):
            seen.append(payload)

        emitter.emit("state-changed", 1)
        emitter.emit("state-changed", 2)

        assert seen == [1]

    def test_decorator_rejects_unknown_event_eagerly(self):
        with pytest.raises(ValueError):
            EventEmitter().on("not-an-event")

    def test_same_handler_registered_once(self):
        emitter = EventEmitter()
        seen = []
        emitter.on("snapshot-created", seen.append)
        emitter.on("snapshot-created", seen.append)

        emitter.emit("snapshot-created", "x")

        assert seen == ["x"]

    def test_off(self):
        emitter = EventEmitter()
        seen = []
        emitter.on("snapshot-restored", seen.append)
        emitter.off("snapshot-restored", seen.append)
        emitter.off("snapshot-restored", seen.append)

        assert emitter.emit("snapshot-restored", "id") == 0
        assert seen == []

    def test_once_fires_a_single_time(self):
        emitter = EventEmitter()
        seen = []
        emitter.once("snapshot-deleted", seen.append)

        emitter.emit("snapshot-deleted", 1)
        emitter.emit("snapshot-deleted", 2)

        assert seen == [1]
        assert emitter.listener_count("snapshot-deleted") == 0

    def test_events_are_independent(self):
        emitter = EventEmitter()
        seen = []
        emitter.on("snapshot-created", seen.append)

        emitter.emit("state-changed", "ignored")

        assert seen == []

    def test_clear(self):
        emitter = EventEmitter()
        emitter.on("snapshot-created", print)
        emitter.clear()
        assert emitter.listener_count("snapshot-created") == 0

    def test_unknown_event_rejected(self):
        emitter = EventEmitter()
        with pytest.raises(ValueError, match="Unknown event"):
            emitter.on("snapshot-exploded", print)
        with pytest.raises(ValueError):
            emitter.emit("nope")


class TestHandlerFailures:
    def test_failing_handler_does_not_stop_others(self, caplog):
        emitter = EventEmitter()
        seen = []

        def boom(payload):
            raise RuntimeError("handler failure")

        emitter.on("state-changed", boom)
        emitter.on("state-changed", seen.append)

        with caplog.at_level("WARNING", logger="control_layer.events.emitter"):
            delivered = emitter.emit("state-changed", "payload")

        assert delivered == 1
        assert seen == ["payload"]
        assert "handler failure" in caplog.text

    def test_handler_may_unsubscribe_itself(self):
        emitter = EventEmitter()
        seen = []

        def handler(payload):
            seen.append(payload)
            emitter.off("snapshot-created", handler)

        emitter.on("snapshot-created", handler)
        emitter.emit("snapshot-created", 1)
        emitter.emit("snapshot-created", 2)

        assert seen == [1]


class TestSchema:
    def test_event_names(self):
        assert [e.value for e in StateEvent] == [
            "snapshot-created",
            "snapshot-restored",
            "state-changed",
            "snapshot-deleted",
        ]
        assert StateEvent.SNAPSHOT_CREATED == "snapshot-created"

    def test_deletion_payload(self):
        deletion = SnapshotDeletion(("a", "b"), DeletionReason.CLEANUP, 10, retention_days=30)

        assert deletion.count == 2
        assert deletion.reason == "cleanup"
