"""Tests for logging setup."""

import sys

sys.path.insert(0, "src")

import logging

from rich.logging import RichHandler

from control_layer.config import StateManagerConfig
from control_layer.logging_config import get_logger, setup_logging, setup_logging_for


class TestLogging:
    def test_get_logger_namespaces(self):
        assert get_logger().name == "control_layer"
        assert get_logger("state.store").name == "control_layer.state.store"
        assert get_logger("control_layer.diff").name == "control_layer.diff"

    def test_levels(self):
        assert setup_logging(verbose=True).level == logging.DEBUG
        assert setup_logging(quiet=True).level == logging.ERROR
        assert setup_logging().level == logging.WARNING

    def test_from_verbosity(self):
        assert setup_logging_for("verbose").level == logging.DEBUG
        assert setup_logging_for("normal").level == logging.WARNING

    def test_from_config(self):
        config = StateManagerConfig(verbosity="quiet")
        assert setup_logging_for(config.verbosity).level == logging.ERROR

    def test_rich_handler_installed(self, tmp_path):
        root = logging.getLogger()
        saved = root.handlers[:]
        root.handlers.clear()
        try:
            setup_logging(log_file=str(tmp_path / "audit.log"))
            kinds = {type(h) for h in root.handlers}
            assert RichHandler in kinds
            assert logging.FileHandler in kinds
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved
