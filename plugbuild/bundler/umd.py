"""Universal module definition wrapper rendering."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

EXPORT_MODES = ("default", "named", "none")


@dataclass(frozen=True)
class WrapperImport:
    """An external dependency as seen by the wrapper."""

    path: str
    global_name: str
    param: str


def is_identifier(name: str) -> bool:
    return _IDENTIFIER.match(name) is not None


def js_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def member(target: str, name: str) -> str:
    """Render ``target.name``, falling back to bracket access for non-identifiers."""
    if is_identifier(name):
        return f"{target}.{name}"
    return f"{target}[{json.dumps(name)}]"


def property_key(name: str) -> str:
    return name if is_identifier(name) else json.dumps(name)


def render_wrapper(
    name: str, imports: Sequence[WrapperImport], mode: str
) -> Tuple[List[str], List[str]]:
    """Return the header and footer lines that surround the factory body."""
    if mode not in EXPORT_MODES:
        raise ValueError(f"Unknown export mode: {mode}")

    requires = [f"require({js_string(item.path)})" for item in imports]
    amd_deps = [js_string(item.path) for item in imports]
    globals_ = [member("global", item.global_name) for item in imports]
    params = [item.param for item in imports]

    if mode == "named":
        requires.insert(0, "exports")
        amd_deps.insert(0, "'exports'")
        globals_.insert(0, f"{member('global', name)} = {{}}")
        params.insert(0, "exports")

    cjs_call = f"factory({', '.join(requires)})"
    browser_call = f"factory({', '.join(globals_)})"
    if mode == "default":
        cjs_call = f"module.exports = {cjs_call}"
        browser_call = f"{member('global', name)} = {browser_call}"
    amd_call = f"define([{', '.join(amd_deps)}], factory)" if amd_deps else "define(factory)"

    header = [
        "(function (global, factory) {",
        f"  typeof exports === 'object' && typeof module !== 'undefined' ? {cjs_call} :",
        f"  typeof define === 'function' && define.amd ? {amd_call} :",
        "  (global = typeof globalThis !== 'undefined' ? globalThis : global || self, "
        f"{browser_call});",
        f"}})(this, (function ({', '.join(params)}) {{ 'use strict';",
    ]
    footer = ["}));"]
    return header, footer


__all__ = [
    "EXPORT_MODES",
    "WrapperImport",
    "is_identifier",
    "js_string",
    "member",
    "property_key",
    "render_wrapper",
]
