"""Shared fixtures for control layer tests."""

import sys

sys.path.insert(0, "src")

import pytest

from control_layer.config import StateManagerConfig
from control_layer.state.manager import StateManager

DAY_MS = 24 * 60 * 60 * 1000
START_MS = 1_760_000_000_000


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now

    def advance_days(self, days: float) -> int:
        return self.advance(int(days * DAY_MS))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(clock):
    """StateManager with default limits and a controllable clock."""
    return StateManager(clock=clock)


@pytest.fixture
def small_manager(clock):
    """StateManager keeping at most three snapshots."""
    return StateManager(config=StateManagerConfig(max_snapshots=3), clock=clock)


@pytest.fixture
def recorded_events(manager):
    """(event name, payload) pairs emitted by ``manager``, in order."""
    seen = []
    for name in ("snapshot-created", "snapshot-restored", "state-changed", "snapshot-deleted"):
        manager.on(name, lambda payload, name=name: seen.append((name, payload)))
    return seen
