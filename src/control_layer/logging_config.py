"""
Logging configuration for the control layer.

Routes lifecycle logging (snapshots, applies, reverts, rollbacks) through a
rich handler so operators get readable, colored terminal output.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "control_layer"


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging (every snapshot, apply and revert)
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to append an audit-friendly plain log to

    Returns:
        Configured logger instance for control_layer
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    console = Console(stderr=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    return logger


def setup_logging_for(verbosity: str, log_file: Optional[str] = None) -> logging.Logger:
    """Configure logging from a ``StateManagerConfig.verbosity`` value."""
    return setup_logging(
        verbose=verbosity == "verbose", quiet=verbosity == "quiet", log_file=log_file
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'control_layer.state.store')
              If None, returns the root control_layer logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
