"""Tests for source map encoding."""

from __future__ import annotations

import json

import pytest

from plugbuild.bundler.sourcemap import SourceMap, encode_mappings, encode_vlq


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, "A"), (1, "C"), (-1, "D"), (15, "e"), (16, "gB"), (-16, "hB"), (1000, "w+B")],
)
def test_encode_vlq(value: int, expected: str) -> None:
    assert encode_vlq(value) == expected


def test_encode_mappings_uses_relative_deltas() -> None:
    mappings = encode_mappings([None, (0, 0, 0), (0, 1, 0), None, (1, 0, 0)])
    assert mappings == ";AAAA;AACA;;ACDA"


def test_source_map_serialises_version_three() -> None:
    source_map = SourceMap(
        file="alert.js",
        sources=["../src/alert.js"],
        sources_content=["export default 1\n"],
        mappings="AAAA",
    )

    payload = json.loads(source_map.to_json())

    assert payload == {
        "version": 3,
        "file": "alert.js",
        "sources": ["../src/alert.js"],
        "sourcesContent": ["export default 1\n"],
        "names": [],
        "mappings": "AAAA",
    }
