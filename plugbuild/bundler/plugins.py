"""Source transform plugins applied before a module is parsed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Optional, Sequence

from .parser import directive_ranges


class Plugin(ABC):
    """Contract for per-module source transforms.

    Transforms must keep the line structure of the module intact; source maps
    are emitted line for line against the original file.
    """

    name = "plugin"

    @abstractmethod
    def transform(self, code: str, path: Path) -> Optional[str]:
        """Return the transformed code, or None to leave it unchanged."""


class TranspilePlugin(Plugin):
    """Normalizes project sources for the UMD wrapper.

    Files matching ``exclude`` (relative to ``root`` when given) pass through
    untouched. Everything else has its BOM and CRLF line endings removed and
    any ``'use strict'`` directive prologue blanked, since the wrapper
    already declares strict mode once per bundle.
    """

    name = "transpile"

    def __init__(
        self, exclude: Sequence[str] = ("node_modules/**",), root: Path | None = None
    ) -> None:
        self.exclude = tuple(exclude)
        self.root = root

    def _excluded(self, path: Path) -> bool:
        target = path
        if self.root is not None:
            try:
                target = path.relative_to(self.root)
            except ValueError:
                pass
        posix = target.as_posix()
        for pattern in self.exclude:
            if fnmatchcase(posix, pattern) or fnmatchcase(posix, f"*/{pattern}"):
                return True
        return False

    def transform(self, code: str, path: Path) -> Optional[str]:
        if self._excluded(path):
            return None
        if code.startswith("\ufeff"):
            code = code[1:]
        source = code.replace("\r\n", "\n").encode("utf-8")
        for start, end in reversed(directive_ranges(source)):
            source = source[:start] + b"\n" * source[start:end].count(b"\n") + source[end:]
        return source.decode("utf-8")


def apply_plugins(code: str, path: Path, plugins: Sequence[Plugin]) -> str:
    for plugin in plugins:
        result = plugin.transform(code, path)
        if result is not None:
            code = result
    return code


__all__ = ["Plugin", "TranspilePlugin", "apply_plugins"]
