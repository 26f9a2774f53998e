#!/usr/bin/env python3
"""
Data models for LSP responses.

This module contains immutable dataclasses representing the results of
language-server queries: positions, locations, document symbols, workspace
symbols, hover text and call/type hierarchy items. All positions are
zero-based, exactly as the protocol transmits them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


@dataclass(frozen=True)
class LspPosition:
    """Position in a document expressed as zero-based line and character offset."""
    line: int
    character: int


@dataclass(frozen=True)
class LspRange:
    """Range in a document expressed as start and end positions."""
    start: LspPosition
    end: LspPosition


@dataclass(frozen=True)
class LspLocation:
    """Location in a document expressed as a URI and a range."""
    uri: str
    range: LspRange


@dataclass(frozen=True)
class LspHover:
    """Result of a hover request, flattened to plain text."""
    contents: str
    range: Optional[LspRange] = None


@dataclass(frozen=True)
class LspSymbol:
    """A node in a document's symbol outline.

    Children are ordered by declaration, lie inside this node's range and do
    not overlap each other.
    """
    name: str
    kind: int
    range: LspRange
    selection_range: LspRange
    detail: Optional[str] = None
    children: List["LspSymbol"] = field(default_factory=list)


@dataclass(frozen=True)
class LspSymbolInformation:
    """A workspace-wide symbol search match."""
    name: str
    kind: int
    location: LspLocation
    container_name: Optional[str] = None


@dataclass(frozen=True)
class LspHierarchyItem:
    """Handle for call or type hierarchy traversal.

    Items are produced by a prepare request and passed back unchanged to fetch
    relations. ``raw`` keeps the server payload so the round trip is exact.
    """
    name: str
    kind: int
    uri: str
    range: LspRange
    selection_range: LspRange
    detail: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class LspIncomingCall:
    """A caller of a call hierarchy item."""
    from_item: LspHierarchyItem
    from_ranges: List[LspRange] = field(default_factory=list)


@dataclass(frozen=True)
class LspOutgoingCall:
    """A callee of a call hierarchy item."""
    to: LspHierarchyItem
    from_ranges: List[LspRange] = field(default_factory=list)
