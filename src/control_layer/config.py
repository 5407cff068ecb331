"""Configuration loading and management for the control layer.

Configuration sources are merged in priority order:
    1. Defaults (defined in StateManagerConfig)
    2. Global config (~/.control-layer.toml)
    3. Project config (./control-layer.toml)
    4. Explicit config file
    5. Environment variables (CONTROL_LAYER_* prefix)
    6. Keyword overrides

Example:
    >>> config = load_config(max_snapshots=10)
    >>> config.max_snapshots
    10
    >>> config.storage_backend
    'memory'
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ControlLayerError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
StorageBackend = Literal["memory", "file", "database"]

ENV_PREFIX = "CONTROL_LAYER_"
CONFIG_FILENAME = "control-layer.toml"
MS_PER_DAY = 24 * 60 * 60 * 1000

_BACKENDS = ("memory", "file", "database")
_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class StateManagerConfig:
    """Configuration for a StateManager instance.

    Attributes:
        max_snapshots: Snapshots retained before the oldest is evicted (FIFO)
        storage_backend: Where snapshots live. Only "memory" is implemented;
            the manager refuses the other values at construction.
        retention_days: Default age cutoff used by ``cleanup()``
        snapshot_on_change: Take an automatic snapshot after every apply/revert
        verbosity: Logging verbosity level. The manager does not configure
            logging itself; pass it to ``logging_config.setup_logging_for``.
    """

    max_snapshots: int = 100
    storage_backend: StorageBackend = "memory"
    retention_days: int = 30
    snapshot_on_change: bool = True
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        if self.retention_days < 0:
            raise ValueError("retention_days must be non-negative")
        if self.storage_backend not in _BACKENDS:
            raise ValueError(f"storage_backend must be one of {', '.join(_BACKENDS)}")
        if self.verbosity not in _VERBOSITIES:
            raise ValueError(f"verbosity must be one of {', '.join(_VERBOSITIES)}")

    @property
    def retention_ms(self) -> int:
        """Get the default retention window in milliseconds."""
        return self.retention_days * MS_PER_DAY


DEFAULT_CONFIG = StateManagerConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> StateManagerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (highest priority)

    Returns:
        Validated StateManagerConfig instance

    Raises:
        ControlLayerError: If a config file is invalid or missing, or a value
            fails validation
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ControlLayerError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ControlLayerError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ControlLayerError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ControlLayerError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    try:
        return StateManagerConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ControlLayerError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ControlLayerError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from CONTROL_LAYER_* environment variables.

    Supported environment variables:
        CONTROL_LAYER_MAX_SNAPSHOTS: int
        CONTROL_LAYER_STORAGE_BACKEND: memory/file/database
        CONTROL_LAYER_RETENTION_DAYS: int
        CONTROL_LAYER_SNAPSHOT_ON_CHANGE: bool (true/false/1/0)
        CONTROL_LAYER_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any CONTROL_LAYER_* vars found.
    """
    type_hints = get_type_hints(StateManagerConfig)

    result: dict[str, Any] = {}

    for field_name in StateManagerConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass

    Returns:
        Parsed value or None if can't parse

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[state_manager]`` table is used when present, otherwise the top level.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML as dict

    Raises:
        ControlLayerError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ControlLayerError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)
    section = data.get("state_manager")
    if isinstance(section, dict):
        return section
    return data
