"""A small ES module bundler that emits UMD artifacts with source maps."""

from __future__ import annotations

from .engine import Bundle, ExternalPredicate, ModuleBundler, OutputOptions, RenderedChunk
from .errors import BundleError, BundleSyntaxError
from .parser import ModuleInfo, parse_module
from .plugins import Plugin, TranspilePlugin
from .sourcemap import SourceMap

__all__ = [
    "Bundle",
    "BundleError",
    "BundleSyntaxError",
    "ExternalPredicate",
    "ModuleBundler",
    "ModuleInfo",
    "OutputOptions",
    "Plugin",
    "RenderedChunk",
    "SourceMap",
    "TranspilePlugin",
    "parse_module",
]
