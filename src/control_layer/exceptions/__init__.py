"""Exception hierarchy for the control layer."""

from .base import ControlLayerError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    UnsupportedBackendError,
)
from .state import (
    ControlNotFoundError,
    NotFoundError,
    SnapshotNotFoundError,
)

__all__ = [
    "ControlLayerError",
    "NotFoundError",
    "SnapshotNotFoundError",
    "ControlNotFoundError",
    "ConfigurationError",
    "InvalidConfigError",
    "UnsupportedBackendError",
]
