"""Bundles one registered module into its standalone UMD artifact."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .banner import render_banner
from .bundler import ModuleBundler, OutputOptions, Plugin, TranspilePlugin
from .classifier import make_external_predicate
from .config import BuildConfig
from .logging import get_logger, log_progress
from .models import BuildResult, GlobalsMap, ModuleRegistry

logger = get_logger("builder")


def default_plugins(config: BuildConfig) -> List[Plugin]:
    """Return the fixed plugin chain applied to every module."""
    return [TranspilePlugin(exclude=config.exclude, root=config.root)]


def build_module(
    entity_name: str,
    registry: ModuleRegistry,
    config: BuildConfig,
    *,
    plugins: Optional[Sequence[Plugin]] = None,
) -> BuildResult:
    """Bundle ``entity_name`` with every other registered module kept external."""
    descriptor = registry[entity_name]
    globals_map: GlobalsMap = {}
    bundler = ModuleBundler(
        plugins=default_plugins(config) if plugins is None else plugins,
        external=make_external_predicate(registry, globals_map),
    )
    bundle = bundler.bundle(descriptor.source_path)
    chunk = bundle.write(
        OutputOptions(
            file=descriptor.destination_path,
            name=entity_name,
            globals=globals_map,
            banner=render_banner(descriptor.display_name, config.banner),
            sourcemap=config.sourcemap,
        )
    )
    log_progress(logger, "Building %s plugin... Done!", entity_name)
    return BuildResult(
        entity_name=entity_name,
        destination_path=chunk.file,
        sourcemap_path=chunk.map_path,
        globals=dict(globals_map),
    )


__all__ = ["build_module", "default_plugins"]
