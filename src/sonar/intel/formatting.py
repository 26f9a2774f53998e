"""
Location and symbol formatting.

Renders locations, hierarchy items and symbol kinds to the stable one-line
forms used in every report. Positions are displayed 1-based; paths are shown
relative to a base directory when the file lies beneath it.
"""

import os
from typing import List, Optional, Sequence

from src.lsp.models import LspLocation, LspHierarchyItem, LspPosition
from src.sonar.core.constants import TRUNCATION_MARKER
from src.utils.uris import uri_to_path

SYMBOL_KIND_NAMES = {
    1: "File",
    2: "Module",
    3: "Namespace",
    4: "Package",
    5: "Class",
    6: "Method",
    7: "Property",
    8: "Field",
    9: "Constructor",
    10: "Enum",
    11: "Interface",
    12: "Function",
    13: "Variable",
    14: "Constant",
    15: "String",
    16: "Number",
    17: "Boolean",
    18: "Array",
    19: "Object",
    20: "Key",
    21: "Null",
    22: "EnumMember",
    23: "Struct",
    24: "Event",
    25: "Operator",
    26: "TypeParameter",
}


def symbol_kind_name(kind: int) -> str:
    """Readable name of an LSP SymbolKind, or ``Kind<N>`` when unknown."""
    return SYMBOL_KIND_NAMES.get(kind, f"Kind{kind}")


def display_path(uri: str, base: Optional[str] = None) -> str:
    """Render a document URI as a path, relative to ``base`` when possible."""
    path = uri_to_path(uri)
    if not base or path == uri:
        return path

    base = os.path.abspath(base)
    try:
        if os.path.commonpath([base, os.path.abspath(path)]) != base:
            return path
    except ValueError:
        # Different drives or mixed absolute/relative paths
        return path

    return os.path.relpath(path, base)


def format_position(position: LspPosition) -> str:
    return f"{position.line + 1}:{position.character + 1}"


def format_location(location: LspLocation, base: Optional[str] = None) -> str:
    """``path:line:column`` for the start of a location."""
    return f"{display_path(location.uri, base)}:{format_position(location.range.start)}"


def format_hierarchy_item(
    item: LspHierarchyItem, base: Optional[str] = None, with_kind: bool = False
) -> str:
    """``name - path:line`` (optionally ``name (Kind) - path:line``)."""
    name = f"{item.name} ({symbol_kind_name(item.kind)})" if with_kind else item.name
    return f"{name} - {display_path(item.uri, base)}:{item.range.start.line + 1}"


def numbered(entries: Sequence[str], limit: Optional[int] = None) -> List[str]:
    """Number entries from 1, keeping at most ``limit`` followed by an overflow marker."""
    shown = entries if limit is None else entries[:limit]
    lines = [f"{index}. {entry}" for index, entry in enumerate(shown, start=1)]
    hidden = len(entries) - len(shown)
    if hidden > 0:
        lines.append(TRUNCATION_MARKER.format(count=hidden))
    return lines


def format_locations(
    locations: Sequence[LspLocation], base: Optional[str] = None, limit: Optional[int] = None
) -> str:
    """Numbered ``path:line:column`` lines, one per location."""
    return "\n".join(numbered([format_location(loc, base) for loc in locations], limit))
