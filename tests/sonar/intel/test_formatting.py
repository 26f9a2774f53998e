"""
Unit tests for location and symbol formatting helpers.
"""

from dataclasses import dataclass

import pytest

from fake_provider import WORKSPACE, item, loc, pos
from src.sonar.intel.formatting import (
    display_path, format_hierarchy_item, format_location, format_locations,
    format_position, numbered, symbol_kind_name,
)


@dataclass
class PathCase:
    name: str
    uri: str
    base: str
    expected: str


@pytest.mark.parametrize(
    "case",
    [
        PathCase("inside workspace", "file:///work/src/a.py", "/work", "src/a.py"),
        PathCase("outside workspace", "file:///other/a.py", "/work", "/other/a.py"),
        PathCase("sibling prefix is not inside", "file:///workspace2/a.py", "/work", "/workspace2/a.py"),
        PathCase("no base", "file:///work/a.py", None, "/work/a.py"),
        PathCase("percent encoded", "file:///work/my%20dir/a.py", "/work", "my dir/a.py"),
        PathCase("non-file scheme untouched", "untitled:Untitled-1", "/work", "untitled:Untitled-1"),
    ],
    ids=lambda c: c.name,
)
def test_display_path(case: PathCase):
    assert display_path(case.uri, case.base) == case.expected


def test_positions_are_one_based():
    assert format_position(pos(0, 0)) == "1:1"
    assert format_position(pos(41, 7)) == "42:8"


def test_format_location():
    assert format_location(loc("src/a.py", 9, 4), WORKSPACE) == "src/a.py:10:5"


def test_format_hierarchy_item():
    call = item("handler", 12, "src/app.py", 20)
    assert format_hierarchy_item(call, WORKSPACE) == "handler - src/app.py:21"
    assert format_hierarchy_item(call, WORKSPACE, with_kind=True) == "handler (Function) - src/app.py:21"


def test_symbol_kind_name():
    assert symbol_kind_name(5) == "Class"
    assert symbol_kind_name(26) == "TypeParameter"
    assert symbol_kind_name(0) == "Kind0"


def test_numbered_without_limit():
    assert numbered(["a", "b"]) == ["1. a", "2. b"]


def test_numbered_truncates_with_marker():
    lines = numbered([str(i) for i in range(7)], limit=5)
    assert lines[:5] == ["1. 0", "2. 1", "3. 2", "4. 3", "5. 4"]
    assert lines[5] == "... and 2 more"
    assert len(lines) == 6


def test_numbered_at_limit_has_no_marker():
    assert numbered(["a", "b"], limit=2) == ["1. a", "2. b"]


def test_format_locations():
    text = format_locations([loc("a.py", 0), loc("b.py", 4, 2)], WORKSPACE)
    assert text == "1. a.py:1:1\n2. b.py:5:3"
