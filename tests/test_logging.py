"""Tests for plugbuild logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from plugbuild.logging import configure_logging, get_logger, log_progress


def test_get_logger_is_scoped_under_plugbuild() -> None:
    assert get_logger("builder").name == "plugbuild.builder"
    assert get_logger().name == "plugbuild"


def test_progress_lines_are_printed_without_prefix(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging()
    logger = get_logger("orchestrator")

    log_progress(logger, "Building %s plugin... Done!", "Alert")
    logger.warning("Source %s is not mapped", "./missing")

    assert capsys.readouterr().err.splitlines() == [
        "Building Alert plugin... Done!",
        "[plugbuild] WARNING Source ./missing is not mapped",
    ]


def test_verbose_enables_debug_and_file_sink(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log_file = tmp_path / "build.log"
    logger = configure_logging(verbose=True, log_file=log_file)

    get_logger("bundler").debug("Wrote %s", "alert.js")
    log_progress(get_logger("orchestrator"), "Building individual plugins...")

    assert logger.level == logging.DEBUG
    assert "[plugbuild] DEBUG Wrote alert.js" in capsys.readouterr().err
    contents = log_file.read_text(encoding="utf-8")
    assert "DEBUG plugbuild.bundler: Wrote alert.js" in contents
    assert "INFO plugbuild.orchestrator: Building individual plugins..." in contents


def test_configure_logging_replaces_previous_handlers() -> None:
    configure_logging()
    logger = configure_logging()

    assert len(logger.handlers) == 1
    assert logger.propagate is False
