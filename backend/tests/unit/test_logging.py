"""
Tests for logging setup.
"""
import logging
import sys

import pytest

from wpaudit.core.logging import QUIET_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test handler, level and third-party logger configuration."""

    def test_single_stderr_handler_at_requested_level(self):
        setup_logging(level="warning", log_format="console")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(level="chatty", log_format="json")

        assert logging.getLogger().level == logging.INFO

    def test_noisy_libraries_are_quieted(self):
        setup_logging(level="DEBUG", log_format="json")

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
