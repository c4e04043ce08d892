"""Logging utilities for plugbuild commands.

Progress lines (``Building individual plugins...``, ``Building Alert
plugin... Done!``) are printed bare on the console; everything else carries
the ``[plugbuild] LEVEL`` prefix. The file sink records both uniformly.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "plugbuild"
_PROGRESS_ATTR = "plugbuild_progress"


class ConsoleFormatter(logging.Formatter):
    """Console formatter that leaves progress records unprefixed."""

    def __init__(self) -> None:
        super().__init__(f"[{_LOGGER_NAME}] %(levelname)s %(message)s")
        self._progress = logging.Formatter("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, _PROGRESS_ATTR, False):
            return self._progress.format(record)
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the plugbuild hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def log_progress(logger: logging.Logger, message: str, *args: object) -> None:
    """Log a build progress line at INFO, printed without a level prefix."""
    logger.info(message, *args, extra={_PROGRESS_ATTR: True})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, when requested, a file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)

    return logger


__all__ = ["ConsoleFormatter", "configure_logging", "get_logger", "log_progress"]
