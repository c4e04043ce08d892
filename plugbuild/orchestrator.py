"""Concurrent build orchestration for every discovered module."""

from __future__ import annotations

import asyncio
import functools
import time
from typing import Callable, List

from .builder import build_module
from .config import BuildConfig
from .discovery import discover_modules
from .logging import get_logger, log_progress
from .models import BuildReport, BuildResult, ModuleRegistry
from .naming import build_registry

ModuleBuilder = Callable[[str, ModuleRegistry, BuildConfig], BuildResult]


class Orchestrator:
    """Discovers modules and bundles each of them concurrently."""

    def __init__(self, builder: ModuleBuilder | None = None) -> None:
        self.builder = builder or build_module
        self.logger = get_logger("orchestrator")

    def prepare(self, config: BuildConfig) -> ModuleRegistry:
        """Discover source modules and return the registry keyed by entity name."""
        paths = discover_modules(config.source_dir, config.extension)
        self.logger.debug("Discovered %d module(s) under %s", len(paths), config.source_dir)
        return build_registry(
            paths,
            config.source_dir,
            extension=config.extension,
            source_segment=config.source_segment,
            dist_segment=config.dist_segment,
        )

    async def build_all(self, registry: ModuleRegistry, config: BuildConfig) -> List[BuildResult]:
        """Build every registered module; the first failure aborts the whole run.

        Builds execute in the default executor. Sibling builds still in flight
        when one fails are abandoned rather than stopped, so artifacts they
        finish writing stay on disk.
        """
        tasks: List[asyncio.Task[BuildResult]] = []
        try:
            async with asyncio.TaskGroup() as group:
                for entity_name in registry:
                    tasks.append(group.create_task(self._build(entity_name, registry, config)))
        except BaseExceptionGroup as errors:
            raise errors.exceptions[0] from None
        return [task.result() for task in tasks]

    async def _build(
        self, entity_name: str, registry: ModuleRegistry, config: BuildConfig
    ) -> BuildResult:
        loop = asyncio.get_running_loop()
        call = functools.partial(self.builder, entity_name, registry, config)
        # Cancelling the task must not cancel a queued executor job.
        return await asyncio.shield(loop.run_in_executor(None, call))

    def run(self, config: BuildConfig) -> BuildReport:
        """Discover, build and time a full run."""
        registry = self.prepare(config)
        if not registry:
            self.logger.warning("No modules found under %s", config.source_dir)
        log_progress(self.logger, "Building individual plugins...")
        started = time.perf_counter()
        results = asyncio.run(self.build_all(registry, config))
        elapsed = time.perf_counter() - started
        self.logger.debug("Built %d module(s) in %.3fs", len(results), elapsed)
        return BuildReport(results=results, elapsed=elapsed)


__all__ = ["ModuleBuilder", "Orchestrator"]
