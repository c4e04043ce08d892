"""Source module discovery."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, List


def _raise(error: OSError) -> None:
    raise error


def _iter_files(root: Path, extension: str) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            if filename.endswith(extension):
                yield current_dir / filename


def discover_modules(root: Path | str, extension: str = ".js") -> List[Path]:
    """Return absolute paths of every ``extension`` file below ``root``."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Source path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Source path is not a directory: {root}")
    return list(_iter_files(root_path, extension))


__all__ = ["discover_modules"]
