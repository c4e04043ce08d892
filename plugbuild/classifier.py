"""Decides which import specifiers stay external to a bundle."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, Optional

from .logging import get_logger
from .models import GlobalsMap, ModuleDescriptor, ModuleRegistry

_RELATIVE_PREFIX = re.compile(r"^\.+/")
_DOT_SEGMENTS = re.compile(r"^(?:\.+/)+")

logger = get_logger("classifier")


@dataclass(frozen=True)
class Classification:
    """Verdict for a single import specifier."""

    external: bool
    global_name: Optional[str] = None


def is_relative(specifier: str) -> bool:
    return _RELATIVE_PREFIX.match(specifier) is not None


def find_module(specifier: str, registry: ModuleRegistry) -> Optional[ModuleDescriptor]:
    """Return the first registered module whose source path contains the import suffix."""
    suffix = _DOT_SEGMENTS.sub("", specifier)
    if suffix.endswith(".js"):
        suffix = suffix[: -len(".js")]
    for descriptor in registry.values():
        if suffix in descriptor.source_stem:
            return descriptor
    return None


def classify(
    specifier: str, registry: ModuleRegistry, globals_map: GlobalsMap
) -> Classification:
    """Classify ``specifier`` and record its runtime global name in ``globals_map``.

    Bare specifiers are third-party packages exposed under their own name.
    Relative specifiers that match a registered module are exposed under that
    module's entity name and keyed by its normalized source path. Unmatched
    relative specifiers are left for the bundler to inline.
    """
    if not is_relative(specifier):
        globals_map[specifier] = specifier
        return Classification(external=True, global_name=specifier)

    match = find_module(specifier, registry)
    if match is None:
        logger.warning("Source %s is not mapped", specifier)
        return Classification(external=False)

    globals_map[os.path.normpath(match.source_stem)] = match.entity_name
    return Classification(external=True, global_name=match.entity_name)


def make_external_predicate(
    registry: ModuleRegistry, globals_map: GlobalsMap
) -> Callable[[str], bool]:
    """Bind ``classify`` to one build's registry and globals accumulator."""

    def _external(specifier: str) -> bool:
        return classify(specifier, registry, globals_map).external

    return _external


__all__ = ["Classification", "classify", "find_module", "is_relative", "make_external_predicate"]
