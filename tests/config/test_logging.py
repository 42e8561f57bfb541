"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest

from graphkeep.config.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    gk = logging.getLogger("graphkeep")
    gk_level = gk.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    gk.setLevel(gk_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("graphkeep").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("graphkeep").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = get_logger("graphkeep.test")
        log.debug("graph.synced", changed=True)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "graph.synced"
        assert parsed["changed"] is True
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "graphkeep.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("graphkeep.infrastructure.session").info("Opened storage file")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Opened storage file"
        assert parsed["logger"] == "graphkeep.infrastructure.session"

    def test_quiet_mode_drops_debug(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        get_logger("graphkeep.test").debug("hidden")
        assert capfd.readouterr().err == ""

    def test_sqlalchemy_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("sqlalchemy.engine").info("SELECT 1")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1


class TestUnconfigured:
    def test_library_use_is_silent_below_warning(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        logging.getLogger("graphkeep").setLevel(logging.NOTSET)
        get_logger("graphkeep.test").debug("graph.synced")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == ""
