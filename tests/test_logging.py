"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
from loguru import logger

from github_pr_bot import logging as bot_logging
from github_pr_bot.logging import bind_repo, get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Generator[None, None, None]:
    """Drop every loguru sink before and after each test."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def records() -> Generator[list[dict[str, Any]], None, None]:
    collected: list[dict[str, Any]] = []
    handler_id = logger.add(lambda msg: collected.append(msg.record), level="DEBUG")
    yield collected
    logger.remove(handler_id)


def _console_lines(capsys: pytest.CaptureFixture[str]) -> str:
    return capsys.readouterr().err


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_default_level_hides_debug(self, capsys) -> None:
        setup_logging(level="INFO")

        get_logger("mod").debug("hidden message")
        get_logger("mod").info("shown message")

        err = _console_lines(capsys)
        assert "hidden message" not in err
        assert "shown message" in err

    def test_verbose_overrides_level(self, capsys) -> None:
        """Test that verbose flag sets DEBUG level."""
        setup_logging(level="WARNING", verbose=True)

        get_logger("mod").debug("debug message")

        assert "debug message" in _console_lines(capsys)

    def test_quiet_overrides_level(self, capsys) -> None:
        setup_logging(level="DEBUG", quiet=True)

        get_logger("mod").info("info message")
        get_logger("mod").warning("warning message")

        err = _console_lines(capsys)
        assert "info message" not in err
        assert "warning message" in err

    def test_verbose_takes_precedence(self, capsys) -> None:
        """Test verbose takes precedence over quiet when both set."""
        setup_logging(level="INFO", verbose=True, quiet=True)

        get_logger("mod").debug("debug message")

        assert "debug message" in _console_lines(capsys)

    def test_setup_replaces_existing_sinks(self) -> None:
        records: list[dict[str, Any]] = []
        logger.add(lambda msg: records.append(msg.record), level="DEBUG")
        setup_logging(level="INFO")

        get_logger("mod").info("after setup")

        assert records == []

    def test_setup_logging_with_file(self, tmp_path: Path) -> None:
        """Test file logging setup."""
        log_file = tmp_path / "test.log"
        setup_logging(level="INFO", log_file=log_file)

        get_logger("test").debug("Test file message")

        # Give loguru a moment to flush
        import time

        time.sleep(0.1)

        assert log_file.exists()
        content = log_file.read_text()
        assert "Test file message" in content

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR"])
    def test_log_level_accepted(self, level: str) -> None:
        setup_logging(level=level)  # type: ignore[arg-type]


class TestConsoleFormat:
    """Tests for the console line layout."""

    def test_bound_name_and_repo_shown(self, capsys) -> None:
        setup_logging(level="INFO")

        bind_repo("github_pr_bot.github.client", "elastic", "kibana").info("fetching")

        err = _console_lines(capsys)
        assert "github_pr_bot.github.client" in err
        assert "[elastic/kibana]" in err
        assert "fetching" in err

    def test_unbound_record_uses_module_name(self, capsys) -> None:
        setup_logging(level="INFO")

        logger.info("plain message")

        err = _console_lines(capsys)
        assert __name__ in err
        assert "plain message" in err

    def test_exception_is_rendered(self, capsys) -> None:
        setup_logging(level="INFO")

        try:
            raise ValueError("kaboom")
        except ValueError:
            get_logger("mod").exception("failed")

        err = _console_lines(capsys)
        assert "failed" in err
        assert "ValueError" in err


class TestInterceptHandler:
    """Tests for stdlib logging interception."""

    def test_intercept_stdlib_logging(self) -> None:
        """Test that stdlib logging is routed to loguru."""
        records: list[dict[str, Any]] = []
        setup_logging(level="DEBUG")
        logger.add(lambda msg: records.append(msg.record), level="DEBUG")

        logging.getLogger("test_stdlib_intercept").warning("Hello from stdlib")

        assert any(r["message"] == "Hello from stdlib" for r in records)
        assert isinstance(logging.getLogger().handlers[0], bot_logging.InterceptHandler)

    def test_httpx_logging_controlled(self) -> None:
        """Test httpx request logging is quiet outside DEBUG."""
        setup_logging(level="INFO")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_httpx_logging_verbose(self) -> None:
        setup_logging(level="INFO", verbose=True)

        assert logging.getLogger("httpx").level == logging.DEBUG


class TestBinding:
    """Tests for get_logger / bind_repo and loguru context."""

    def test_get_logger_binds_name(self, records) -> None:
        get_logger("my_test_module").info("Test message")

        assert records[-1]["extra"]["name"] == "my_test_module"

    def test_keyword_fields_land_in_extra(self, records) -> None:
        """Fields passed as keywords are formatted and kept as structured data."""
        get_logger("x").info("rate limit {remaining}/{limit}", remaining=10, limit=60)

        assert records[-1]["message"] == "rate limit 10/60"
        assert records[-1]["extra"]["remaining"] == 10

    def test_bind_repo(self, records) -> None:
        bind_repo("client", "elastic", "kibana").info("Test repo message")

        assert records[-1]["extra"]["repo"] == "elastic/kibana"
        assert records[-1]["extra"]["name"] == "client"

    def test_contextualize_scopes_fields(self, records) -> None:
        """Fields added with contextualize apply only inside the block."""
        with logger.contextualize(pr=123):
            get_logger("cli").info("Inside context")
        get_logger("cli").info("Outside context")

        assert records[0]["extra"]["pr"] == 123
        assert "pr" not in records[1]["extra"]
