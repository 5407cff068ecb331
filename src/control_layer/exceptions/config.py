"""Configuration exceptions: invalid settings, unsupported storage backends."""

from typing import Any

from .base import ControlLayerError


class ConfigurationError(ControlLayerError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class UnsupportedBackendError(ConfigurationError):
    """Raised when a storage backend other than in-memory is requested."""

    def __init__(self, backend: str):
        super().__init__(
            f"Unsupported storage backend: {backend}",
            details={"backend": backend, "supported": "memory"},
        )
        self.backend = backend
