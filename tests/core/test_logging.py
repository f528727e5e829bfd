"""Tests for structlog configuration and run ids."""

import logging
from collections.abc import Generator

import pytest
import structlog

from uptix.config.models import LoggingConfig
from uptix.core.logging import RUN_ID_KEY, clear_run_id, configure_logging, get_logger, set_run_id
from uptix.core.progress import suppress_console_logs


def _bound_run_id() -> str | None:
    return structlog.contextvars.get_contextvars().get(RUN_ID_KEY)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    clear_run_id()
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    clear_run_id()


class TestRunId:
    def test_set_and_clear(self) -> None:
        assert _bound_run_id() is None

        rid = set_run_id("abc123")

        assert rid == "abc123"
        assert _bound_run_id() == "abc123"
        clear_run_id()
        assert _bound_run_id() is None

    def test_generated_when_not_given(self) -> None:
        assert len(set_run_id()) == 12


class TestConfigureLogging:
    def test_given_run_id_when_logged_then_event_carries_it(self, capsys: pytest.CaptureFixture[str]) -> None:
        # Given
        configure_logging(level="DEBUG")
        set_run_id("run42")

        # When
        get_logger("test").debug("lock.saved", path="uptix.lock")

        # Then
        err = capsys.readouterr().err
        assert "lock.saved" in err
        assert "run_id=run42" in err

    def test_given_default_level_when_info_logged_then_dropped(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(config=LoggingConfig())

        get_logger().info("registry.digest_resolved")
        get_logger().warning("extract.syntax_errors")

        err = capsys.readouterr().err
        assert "registry.digest_resolved" not in err
        assert "extract.syntax_errors" in err

    def test_level_argument_overrides_config(self) -> None:
        configure_logging(config=LoggingConfig(level="ERROR"), level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_http_client_loggers_stay_quiet_in_debug(self) -> None:
        configure_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_given_spinner_active_when_logged_then_suppressed(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="DEBUG")

        with suppress_console_logs():
            get_logger().warning("update.resolve_failed")

        assert "update.resolve_failed" not in capsys.readouterr().err
