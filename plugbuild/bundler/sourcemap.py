"""Source Map v3 generation with line-level mappings."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# (source index, zero-based source line, zero-based source column)
Mapping = Tuple[int, int, int]


def encode_vlq(value: int) -> str:
    """Encode one signed integer as a Base64 VLQ string."""
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    encoded = []
    while True:
        digit = vlq & 0b11111
        vlq >>= 5
        if vlq:
            digit |= 0b100000
        encoded.append(_BASE64[digit])
        if not vlq:
            return "".join(encoded)


def encode_mappings(lines: Sequence[Optional[Mapping]]) -> str:
    """Encode one optional segment per generated line, each at generated column 0."""
    previous = [0, 0, 0]
    groups: List[str] = []
    for mapping in lines:
        if mapping is None:
            groups.append("")
            continue
        deltas = [value - prev for value, prev in zip(mapping, previous)]
        groups.append(encode_vlq(0) + "".join(encode_vlq(delta) for delta in deltas))
        previous = list(mapping)
    return ";".join(groups)


@dataclass
class SourceMap:
    """A version 3 source map for one generated file."""

    file: str
    sources: List[str]
    sources_content: List[Optional[str]]
    mappings: str
    names: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": 3,
            "file": self.file,
            "sources": list(self.sources),
            "sourcesContent": list(self.sources_content),
            "names": list(self.names),
            "mappings": self.mappings,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


__all__ = ["Mapping", "SourceMap", "encode_mappings", "encode_vlq"]
