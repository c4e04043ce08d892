"""Core data models shared across plugbuild components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List


@dataclass(frozen=True)
class ModuleDescriptor:
    """A discovered source module and where its bundle is written."""

    entity_name: str
    source_path: Path
    destination_path: Path
    display_name: str

    @property
    def source_stem(self) -> str:
        """Absolute source path without its extension, used for import matching."""
        return str(self.source_path.with_suffix(""))


ModuleRegistry = Dict[str, ModuleDescriptor]
GlobalsMap = Dict[str, str]


@dataclass
class BuildResult:
    """Outcome of bundling a single module."""

    entity_name: str
    destination_path: Path
    sourcemap_path: Path
    globals: GlobalsMap = field(default_factory=dict)


@dataclass
class BuildReport:
    """Aggregate outcome of a full build run."""

    results: List[BuildResult]
    elapsed: float
