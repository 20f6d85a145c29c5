"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from loguru import logger

from post_audit.logging import (
    LogContext,
    _console_format,
    bind_batch,
    bind_item,
    get_logger,
    is_configured,
    reset_logging,
    setup_logging,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Generator[None, None, None]:
    """Start and end every test with no loguru sinks."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def captured() -> Generator[list[str], None, None]:
    """Messages seen by an extra sink that renders the bound context."""
    messages: list[str] = []
    handler_id = logger.add(lambda msg: messages.append(str(msg)), format="{extra} | {message}")
    yield messages
    logger.remove(handler_id)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_marks_configured(self) -> None:
        """setup_logging flips the configured flag."""
        assert not is_configured()
        setup_logging(level="INFO")
        assert is_configured()

    def test_verbose_enables_debug(self) -> None:
        """--verbose lowers the level to DEBUG even if config says WARNING."""
        setup_logging(level="WARNING", verbose=True)

        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_quiet_keeps_httpx_at_warning(self) -> None:
        """Transport request logs stay hidden outside debug mode."""
        setup_logging(level="DEBUG", quiet=True)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_file_sink(self, tmp_path: Path) -> None:
        """A log file receives every message, including DEBUG."""
        log_file = tmp_path / "audit.log"
        setup_logging(level="WARNING", log_file=log_file)

        get_logger("post_audit.test").debug("written to file only")

        assert "written to file only" in log_file.read_text()

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR"])
    def test_levels_accepted(self, level: str) -> None:
        """Every configurable level is accepted."""
        setup_logging(level=level)  # type: ignore[arg-type]
        assert is_configured()


class TestInterceptHandler:
    """Tests for stdlib interception."""

    def test_stdlib_routed_to_loguru(self) -> None:
        """Modules logging through the stdlib end up in the loguru sinks."""
        messages: list[str] = []
        setup_logging(level="DEBUG")
        handler_id = logger.add(lambda msg: messages.append(str(msg)))
        try:
            logging.getLogger("post_audit.quota.ledger").warning("Approaching safety threshold")
            assert any("Approaching safety threshold" in msg for msg in messages)
        finally:
            logger.remove(handler_id)


class TestContextBinding:
    """Tests for the context helpers."""

    def test_get_logger_binds_name(self, captured: list[str]) -> None:
        """get_logger binds the module name as context."""
        get_logger("post_audit.pipeline.scheduler").info("Loaded items")

        assert any("post_audit.pipeline.scheduler" in msg for msg in captured)

    def test_bind_item(self, captured: list[str]) -> None:
        """bind_item adds the post id."""
        bind_item("1050118621198921728").info("Flagged")

        assert any("1050118621198921728" in msg for msg in captured)

    def test_bind_batch(self, captured: list[str]) -> None:
        """bind_batch renders the batch position as n/total."""
        bind_batch(3, 12).info("Processing batch")

        assert any("3/12" in msg for msg in captured)

    def test_log_context(self, captured: list[str]) -> None:
        """LogContext binds values only inside the block."""
        with LogContext(run="resume"):
            logger.info("inside")
        logger.info("outside")

        inside = next(msg for msg in captured if "inside" in msg)
        outside = next(msg for msg in captured if "outside" in msg)
        assert "resume" in inside
        assert "resume" not in outside


class TestResetLogging:
    """Tests for reset_logging."""

    def test_clears_configured(self) -> None:
        """reset_logging undoes setup_logging."""
        setup_logging(level="INFO")
        reset_logging()
        assert not is_configured()


class TestConsoleFormat:
    """Tests for the console template."""

    def test_shows_bound_name_and_context(self) -> None:
        """Bound batch and post context are rendered after the source."""
        template = _console_format({"extra": {"name": "audit", "batch": "3/12", "item": "42"}})  # type: ignore[arg-type]

        assert "{extra[name]}" in template
        assert template.index("[batch {extra[batch]}]") < template.index("[item {extra[item]}]")

    def test_intercepted_records_show_module(self) -> None:
        """Records without a bound name fall back to the module name."""
        template = _console_format({"extra": {}})  # type: ignore[arg-type]

        assert "{name}" in template
        assert "[batch" not in template
