"""Errors raised by the bundling engine."""

from __future__ import annotations

from pathlib import Path


class BundleError(RuntimeError):
    """Raised when a module graph cannot be bundled."""


class BundleSyntaxError(BundleError):
    """Raised when a module fails to parse."""

    def __init__(self, path: Path | str, line: int, column: int, snippet: str = "") -> None:
        self.path = Path(path)
        self.line = line
        self.column = column
        self.snippet = snippet
        message = f"Unexpected syntax in {self.path} ({line}:{column})"
        if snippet:
            message = f"{message}: {snippet}"
        super().__init__(message)
