"""
Document symbol tree resolution.

Locates the most specific symbol enclosing a position in a document's symbol
outline and describes where it sits: its parent, how many symbols share its
level, and its immediate neighbours.

Parent and sibling lookups match nodes structurally (name, kind and start
line) rather than by identity, since outlines fetched by separate requests do
not share objects. Two distinct symbols with the same name and kind starting
on the same line are therefore indistinguishable.
"""

from typing import List, Optional, Sequence

from src.lsp.models import LspPosition, LspSymbol
from src.sonar.intel.formatting import symbol_kind_name


def contains(symbol: LspSymbol, position: LspPosition) -> bool:
    """Whether ``position`` lies within the symbol's full range (inclusive)."""
    start, end = symbol.range.start, symbol.range.end
    if position.line < start.line or position.line > end.line:
        return False
    if position.line == start.line and position.character < start.character:
        return False
    if position.line == end.line and position.character > end.character:
        return False
    return True


def find_enclosing_symbol(tree: Sequence[LspSymbol], position: LspPosition) -> Optional[LspSymbol]:
    """Return the deepest symbol whose range contains ``position``.

    Siblings are visited in declaration order and the first containing one
    wins. Returns None when no symbol contains the position.
    """
    for symbol in tree:
        if not contains(symbol, position):
            continue
        if symbol.children:
            child = find_enclosing_symbol(symbol.children, position)
            if child is not None:
                return child
        return symbol
    return None


def same_symbol(a: LspSymbol, b: LspSymbol) -> bool:
    """Structural equality used for tree lookups: name, kind and start line."""
    return a.name == b.name and a.kind == b.kind and a.range.start.line == b.range.start.line


def find_parent(target: LspSymbol, tree: Sequence[LspSymbol]) -> Optional[LspSymbol]:
    """Return the symbol whose direct children include ``target``."""
    for symbol in tree:
        if not symbol.children:
            continue
        if any(same_symbol(child, target) for child in symbol.children):
            return symbol
        parent = find_parent(target, symbol.children)
        if parent is not None:
            return parent
    return None


def siblings_of(target: LspSymbol, tree: Sequence[LspSymbol]) -> List[LspSymbol]:
    """Symbols at the same level as ``target``, including itself.

    Top-level symbols are siblings of each other.
    """
    parent = find_parent(target, tree)
    if parent is not None:
        return list(parent.children)
    return list(tree)


def format_context(target: LspSymbol, tree: Sequence[LspSymbol]) -> str:
    """Describe the symbol's position in the document structure."""
    lines = [
        f"Symbol: `{target.name}` ({symbol_kind_name(target.kind)}) at line {target.range.start.line + 1}"
    ]

    parent = find_parent(target, tree)
    if parent is not None:
        lines.append(f"Parent: `{parent.name}` ({symbol_kind_name(parent.kind)})")

    siblings = siblings_of(target, tree)
    if siblings:
        lines.append(f"Siblings: {len(siblings)} other symbols at same level")

        index = next(
            (i for i, s in enumerate(siblings) if s.name == target.name and s.kind == target.kind),
            -1,
        )
        if index > 0:
            before = siblings[index - 1]
            lines.append(f"  - Before: `{before.name}` ({symbol_kind_name(before.kind)})")
        if index != -1 and index < len(siblings) - 1:
            after = siblings[index + 1]
            lines.append(f"  - After: `{after.name}` ({symbol_kind_name(after.kind)})")

    return "\n".join(lines)
