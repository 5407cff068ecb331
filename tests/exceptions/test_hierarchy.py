"""Tests for the control layer exception hierarchy."""

import sys

sys.path.insert(0, "src")

import pytest

from control_layer.exceptions import (
    ConfigurationError,
    ControlLayerError,
    ControlNotFoundError,
    InvalidConfigError,
    NotFoundError,
    SnapshotNotFoundError,
    UnsupportedBackendError,
)


class TestHierarchy:
    """Every error derives from ControlLayerError."""

    @pytest.mark.parametrize(
        "error",
        [
            SnapshotNotFoundError("s1"),
            ControlNotFoundError("c1"),
            InvalidConfigError("max_snapshots", 0, "must be positive"),
            UnsupportedBackendError("file"),
        ],
    )
    def test_base_class(self, error):
        assert isinstance(error, ControlLayerError)

    def test_not_found_family(self):
        """Lookup failures can be caught together."""
        assert issubclass(SnapshotNotFoundError, NotFoundError)
        assert issubclass(ControlNotFoundError, NotFoundError)
        assert not issubclass(UnsupportedBackendError, NotFoundError)

    def test_config_family(self):
        assert issubclass(InvalidConfigError, ConfigurationError)
        assert issubclass(UnsupportedBackendError, ConfigurationError)


class TestMessages:
    def test_plain_message(self):
        assert str(ControlLayerError("boom")) == "boom"

    def test_details_rendered(self):
        error = SnapshotNotFoundError("snapshot-1-abc")

        assert error.message == "Snapshot not found"
        assert error.snapshot_id == "snapshot-1-abc"
        assert str(error) == "Snapshot not found (snapshot_id=snapshot-1-abc)"

    def test_control_not_found_reason(self):
        error = ControlNotFoundError("ctrl-1", reason="already reverted")

        assert error.details == {"control_id": "ctrl-1", "reason": "already reverted"}
        assert str(error).startswith("Control not found")

    def test_unsupported_backend(self):
        error = UnsupportedBackendError("database")

        assert error.backend == "database"
        assert "database" in str(error)
