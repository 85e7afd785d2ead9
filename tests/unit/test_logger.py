"""Tests for logging setup."""

import io
import logging

import pytest
from rich.logging import RichHandler

from lambda_workbench.logger import resolve_level, setup_logging


@pytest.fixture
def root_logger(monkeypatch):
    """Detached logger standing in for the root logger."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return logging.Logger("test-root")


class TestResolveLevel:
    def test_names_and_numbers(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(logging.WARNING) == logging.WARNING
        assert resolve_level("nonsense") == logging.INFO

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")

        assert resolve_level(logging.DEBUG) == logging.ERROR


class TestSetupLogging:
    def test_plain_handler_writes_to_stream(self, root_logger):
        stream = io.StringIO()

        setup_logging(logging.INFO, stream=stream, logger=root_logger)
        root_logger.info("manifest saved")

        assert len(root_logger.handlers) == 1
        assert "INFO  | manifest saved" in stream.getvalue()

    def test_debug_format_includes_logger_name(self, root_logger):
        stream = io.StringIO()

        setup_logging("DEBUG", stream=stream, logger=root_logger)
        root_logger.debug("scan started")

        assert "| test-root |" in stream.getvalue()

    def test_second_call_adjusts_level_only(self, root_logger):
        setup_logging(logging.INFO, stream=io.StringIO(), logger=root_logger)

        setup_logging(logging.DEBUG, stream=io.StringIO(), logger=root_logger)

        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.DEBUG

    def test_rich_handler_when_enabled(self, root_logger, monkeypatch):
        monkeypatch.setenv("LWB_RICH_UI", "true")

        setup_logging(logger=root_logger)

        assert isinstance(root_logger.handlers[0], RichHandler)

    def test_defaults_to_the_root_logger(self):
        root = logging.getLogger()
        level = root.level

        try:
            setup_logging(logging.WARNING)
            assert root.level == logging.ERROR
        finally:
            root.setLevel(level)
