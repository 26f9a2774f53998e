"""
Unit tests for document symbol tree resolution.
"""

from dataclasses import dataclass
from typing import Optional

import pytest

from fake_provider import pos, sym
from src.sonar.intel.symbol_tree import (
    contains, find_enclosing_symbol, find_parent, format_context, siblings_of,
)

# class Foo:            (lines 0-10)
#     def __init__      (lines 1-1)
#     def bar           (lines 2-5)
#     def qux           (lines 7-9)
# def baz               (lines 12-14)
INIT = sym("__init__", 9, 1, 1, end_char=30)
BAR = sym("bar", 6, 2, 5, start_char=4, end_char=20)
QUX = sym("qux", 6, 7, 9, start_char=4, end_char=20)
FOO = sym("Foo", 5, 0, 10, children=[INIT, BAR, QUX], end_char=10)
BAZ = sym("baz", 12, 12, 14, end_char=15)
TREE = [FOO, BAZ]


@dataclass
class EnclosingCase:
    name: str
    line: int
    character: int
    expected: Optional[str]


@pytest.mark.parametrize(
    "case",
    [
        EnclosingCase("inside method", 3, 2, "bar"),
        EnclosingCase("method start boundary", 2, 4, "bar"),
        EnclosingCase("before method start column", 2, 3, "Foo"),
        EnclosingCase("method end boundary", 5, 20, "bar"),
        EnclosingCase("class body between methods", 6, 0, "Foo"),
        EnclosingCase("top level function", 13, 0, "baz"),
        EnclosingCase("between top level symbols", 11, 0, None),
        EnclosingCase("past end of document", 40, 0, None),
    ],
    ids=lambda c: c.name,
)
def test_find_enclosing_symbol(case: EnclosingCase):
    result = find_enclosing_symbol(TREE, pos(case.line, case.character))
    if case.expected is None:
        assert result is None
    else:
        assert result is not None
        assert result.name == case.expected


def test_enclosing_symbol_contains_position_and_no_child_does():
    """The result contains the position; none of its children do."""
    for line in range(0, 16):
        for character in (0, 4, 10, 20):
            position = pos(line, character)
            result = find_enclosing_symbol(TREE, position)
            if result is None:
                assert not any(contains(s, position) for s in TREE)
                continue
            assert contains(result, position)
            assert not any(contains(child, position) for child in result.children)


def test_find_enclosing_symbol_empty_tree():
    assert find_enclosing_symbol([], pos(0, 0)) is None


def test_find_parent():
    assert find_parent(BAR, TREE) is FOO
    assert find_parent(FOO, TREE) is None
    assert find_parent(BAZ, TREE) is None


def test_find_parent_matches_structurally():
    """A copy of a node from a separate request still finds its parent."""
    bar_copy = sym("bar", 6, 2, 5, start_char=4, end_char=20)
    assert find_parent(bar_copy, TREE) is FOO


def test_found_parent_has_target_as_direct_child():
    for target in (INIT, BAR, QUX):
        parent = find_parent(target, TREE)
        assert any(
            c.name == target.name and c.kind == target.kind for c in parent.children
        )


def test_siblings_of():
    assert [s.name for s in siblings_of(BAR, TREE)] == ["__init__", "bar", "qux"]
    assert [s.name for s in siblings_of(BAZ, TREE)] == ["Foo", "baz"]


def test_format_context_nested_symbol():
    assert format_context(BAR, TREE) == "\n".join([
        "Symbol: `bar` (Method) at line 3",
        "Parent: `Foo` (Class)",
        "Siblings: 3 other symbols at same level",
        "  - Before: `__init__` (Constructor)",
        "  - After: `qux` (Method)",
    ])


def test_format_context_first_top_level_symbol():
    assert format_context(FOO, TREE) == "\n".join([
        "Symbol: `Foo` (Class) at line 1",
        "Siblings: 2 other symbols at same level",
        "  - After: `baz` (Function)",
    ])


def test_format_context_last_sibling_has_no_after():
    text = format_context(QUX, TREE)
    assert "  - Before: `bar` (Method)" in text
    assert "After" not in text


def test_format_context_unknown_kind():
    odd = sym("thing", 99, 0, 1)
    assert format_context(odd, [odd]).startswith("Symbol: `thing` (Kind99) at line 1")
