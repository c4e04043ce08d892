"""Tests for entity naming and the module registry."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pytest

from plugbuild.naming import build_registry, derive_destination, derive_entity_name


def _to_kebab(entity: str) -> str:
    return re.sub(r"(?<!^)([A-Z])", r"-\1", entity).lower()


@pytest.mark.parametrize(
    ("basename", "expected"),
    [
        ("alert", "Alert"),
        ("scroll-spy", "ScrollSpy"),
        ("base-component", "BaseComponent"),
        ("event-handler", "EventHandler"),
        ("index", "Index"),
        ("ScrollSpy", "ScrollSpy"),
    ],
)
def test_derive_entity_name(basename: str, expected: str) -> None:
    assert derive_entity_name(basename) == expected


@pytest.mark.parametrize("basename", ["alert", "scroll-spy", "selector-engine", "a-b-c"])
def test_derive_entity_name_is_idempotent_on_kebab_form(basename: str) -> None:
    entity = derive_entity_name(basename)
    assert derive_entity_name(_to_kebab(entity)) == entity
    assert derive_entity_name(entity) == entity


def test_derive_entity_name_only_touches_lowercase_boundaries() -> None:
    assert derive_entity_name("x-1y") == "X-1y"
    assert derive_entity_name("tab_list") == "Tab_list"


def test_derive_destination_swaps_only_the_source_segment(tmp_path: Path) -> None:
    source_root = tmp_path / "js" / "src"
    source = source_root / "dom" / "event-handler.js"

    destination = derive_destination(source, source_root)

    assert destination == tmp_path / "js" / "dist" / "dom" / "event-handler.js"
    assert destination.suffix == source.suffix
    changed = [a for a, b in zip(source.parts, destination.parts) if a != b]
    assert changed == ["src"]


def test_derive_destination_requires_matching_segment(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        derive_destination(tmp_path / "lib" / "a.js", tmp_path / "lib")


def test_build_registry_describes_each_module(tmp_path: Path) -> None:
    source_root = tmp_path / "js" / "src"
    paths = [source_root / "alert.js", source_root / "dom" / "event-handler.js"]

    registry = build_registry(paths, source_root)

    assert list(registry) == ["Alert", "EventHandler"]
    handler = registry["EventHandler"]
    assert handler.source_path == paths[1]
    assert handler.destination_path == tmp_path / "js" / "dist" / "dom" / "event-handler.js"
    assert handler.display_name == "dom/event-handler.js"
    assert handler.source_stem == str(source_root / "dom" / "event-handler")


def test_build_registry_warns_on_entity_collision(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    source_root = tmp_path / "js" / "src"
    first = source_root / "a" / "tab.js"
    second = source_root / "b" / "tab.js"

    with caplog.at_level(logging.WARNING, logger="plugbuild"):
        registry = build_registry([first, second], source_root)

    assert list(registry) == ["Tab"]
    assert registry["Tab"].source_path == second
    assert any("replaces" in record.getMessage() for record in caplog.records)
