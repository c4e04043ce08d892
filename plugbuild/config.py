"""Build settings for plugbuild.

Everything here is a fixed constant derived from the project root. The only
file consulted is the project's ``package.json``, which supplies the banner
metadata stamped onto every artifact.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

SOURCE_EXTENSION = ".js"
SOURCE_SEGMENT = "src"
DIST_SEGMENT = "dist"
SOURCE_SUBDIR = ("js", "src")
PACKAGE_FILE = "package.json"


class ConfigError(RuntimeError):
    """Raised when the project metadata cannot be read."""


@dataclass(frozen=True)
class BannerInfo:
    """Project metadata rendered into the license banner."""

    title: str
    version: str = "0.0.0"
    homepage: Optional[str] = None
    author: Optional[str] = None
    license: Optional[str] = None
    start_year: Optional[int] = None


@dataclass(frozen=True)
class BuildConfig:
    """Resolved locations and constants for a build run."""

    root: Path
    source_dir: Path
    banner: BannerInfo
    extension: str = SOURCE_EXTENSION
    source_segment: str = SOURCE_SEGMENT
    dist_segment: str = DIST_SEGMENT
    sourcemap: bool = True
    exclude: tuple[str, ...] = ("node_modules/**",)


def default_config(project_root: Path | str) -> BuildConfig:
    """Return the fixed build configuration for ``project_root``."""
    root = Path(project_root).expanduser().resolve()
    return BuildConfig(
        root=root,
        source_dir=root.joinpath(*SOURCE_SUBDIR),
        banner=load_banner_info(root),
    )


def load_banner_info(root: Path) -> BannerInfo:
    """Read banner metadata from ``package.json``, falling back to the directory name."""
    package_path = root / PACKAGE_FILE
    if not package_path.exists():
        return BannerInfo(title=root.name or "plugbuild")

    try:
        data = json.loads(package_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {package_path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{package_path.name} must contain an object at the root")

    return BannerInfo(
        title=_title_from_name(_as_str(data.get("name")) or root.name),
        version=_as_str(data.get("version")) or "0.0.0",
        homepage=_as_str(data.get("homepage")),
        author=_author_name(data.get("author")),
        license=_as_str(data.get("license")),
        start_year=_as_int(_as_dict(data.get("config")).get("copyright_start")),
    )


def _title_from_name(name: str) -> str:
    # "@scope/pkg-name" -> "Pkg-name"
    base = name.rsplit("/", 1)[-1]
    return base[:1].upper() + base[1:]


def _author_name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return _as_str(value.get("name"))
    return _as_str(value)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and str(value) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
