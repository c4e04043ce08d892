"""Entity name derivation and the module registry."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from .logging import get_logger
from .models import ModuleDescriptor, ModuleRegistry

_ENTITY_BOUNDARY = re.compile(r"(?:^|-)[a-z]")

logger = get_logger("naming")


def derive_entity_name(basename: str) -> str:
    """Convert a hyphenated file stem to UpperCamelCase (``scroll-spy`` -> ``ScrollSpy``)."""
    return _ENTITY_BOUNDARY.sub(lambda match: match.group(0)[-1].upper(), basename)


def derive_destination(
    source: Path,
    source_root: Path,
    source_segment: str = "src",
    dist_segment: str = "dist",
) -> Path:
    """Swap the ``source_segment`` component naming ``source_root`` for ``dist_segment``."""
    if source_root.name != source_segment:
        raise ValueError(f"Source root {source_root} does not end in '{source_segment}'")
    relative = source.relative_to(source_root)
    return source_root.with_name(dist_segment) / relative


def build_registry(
    paths: Iterable[Path],
    source_root: Path,
    *,
    extension: str = ".js",
    source_segment: str = "src",
    dist_segment: str = "dist",
) -> ModuleRegistry:
    """Map entity names to descriptors for every discovered source file."""
    registry: ModuleRegistry = {}
    for path in paths:
        stem = path.name[: -len(extension)] if path.name.endswith(extension) else path.stem
        entity = derive_entity_name(stem)
        previous = registry.get(entity)
        if previous is not None:
            logger.warning(
                "Entity %s from %s replaces %s", entity, path, previous.source_path
            )
        registry[entity] = ModuleDescriptor(
            entity_name=entity,
            source_path=path,
            destination_path=derive_destination(
                path, source_root, source_segment, dist_segment
            ),
            display_name=path.relative_to(source_root).as_posix(),
        )
    return registry


__all__ = ["build_registry", "derive_destination", "derive_entity_name"]
