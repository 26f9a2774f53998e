"""
Unit tests for the code-intelligence commands, executed through the Shell.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from fake_provider import WORKSPACE, FakeProvider, item, loc, sym, sym_info
from src.lsp.models import LspHover, LspIncomingCall, LspOutgoingCall
from src.sonar.commands import HoverCommand
from src.sonar.core.constants import NOT_READY_MESSAGE
from src.sonar.core.messages import CommandCall
from src.sonar.exceptions import FatalError
from src.sonar.intel.explore_symbol import NO_DATA_MESSAGE
from src.sonar.session import Session


def make_shell(provider: Optional[FakeProvider] = None, workspace: str = WORKSPACE):
    builder = Session.builder().session_id("test_commands_session").workspace(workspace)
    if provider is not None:
        builder = builder.provider(provider)
    return builder.initialize().shell


@dataclass
class CommandCase:
    """A statement run against a scripted provider."""

    name: str
    statement: str
    responses: Dict[str, Any] = field(default_factory=dict)
    expected_success: bool = True
    expected_content: List[str] = field(default_factory=list)
    absent_content: List[str] = field(default_factory=list)


CASES = [
    CommandCase(
        "explore symbol",
        "explore_symbol src/app.py 3 2",
        {"get_hover": LspHover(contents="bar: int")},
        expected_content=["# Symbol Exploration Results", "**Location:** src/app.py:4:3", "bar: int"],
    ),
    CommandCase(
        "explore symbol without data",
        "explore_symbol src/app.py 0 0",
        expected_content=[NO_DATA_MESSAGE],
    ),
    CommandCase(
        "explore symbol skipping hierarchies",
        "explore_symbol src/app.py 3 2 --no-call-hierarchy --no-type-hierarchy",
        {
            "get_hover": LspHover(contents="x"),
            "prepare_call_hierarchy": [item("bar", 6, "src/app.py", 2)],
        },
        absent_content=["CALL HIERARCHY"],
    ),
    CommandCase(
        "explore symbol negative line",
        "explore_symbol src/app.py -1 0",
        expected_success=False,
        expected_content=["non-negative"],
    ),
    CommandCase(
        "explore symbol missing arguments",
        "explore_symbol src/app.py",
        expected_success=False,
    ),
    CommandCase(
        "explore references",
        "explore_references parse_config --max-results 1",
        {
            "get_workspace_symbols": [sym_info("parse_config", 12, "src/config.py", 3)],
            "get_references": [loc("src/config.py", 3), loc("src/main.py", 9)],
        },
        expected_content=[
            "# Reference Exploration: parse_config",
            "... and 1 more references (use maxResults parameter to show more)",
        ],
    ),
    CommandCase(
        "explore references without match",
        "explore_references xyz_missing",
        expected_content=['No symbol found matching "xyz_missing".'],
    ),
    CommandCase(
        "explore references zero limit",
        "explore_references foo --max-results 0",
        expected_success=False,
    ),
    CommandCase(
        "explore references provider failure",
        "explore_references foo",
        {"get_workspace_symbols": RuntimeError("socket closed")},
        expected_success=False,
        expected_content=["Error exploring references: socket closed"],
    ),
    CommandCase(
        "definition",
        "definition src/app.py 11 8",
        {"get_definition": [loc("src/config.py", 3, 4)]},
        expected_content=["Found 1 definition(s):\n\n1. src/config.py:4:5"],
    ),
    CommandCase(
        "definition not found",
        "definition src/app.py 11 8",
        expected_content=["No definition found for symbol at the specified position"],
    ),
    CommandCase(
        "references",
        "references src/config.py 3 4 --exclude-declaration",
        {"get_references": [loc("src/app.py", 11, 8)]},
        expected_content=["Found 1 reference(s):\n\n1. src/app.py:12:9"],
    ),
    CommandCase(
        "hover",
        'hover "src/my app.py" 0 0',
        {"get_hover": LspHover(contents="class Config")},
        expected_content=["Symbol Information:\n\nclass Config"],
    ),
    CommandCase(
        "hover failure",
        "hover src/app.py 0 0",
        {"get_hover": RuntimeError("timed out")},
        expected_success=False,
        expected_content=["Error getting hover info: timed out"],
    ),
    CommandCase(
        "workspace symbols",
        "workspace_symbols Config",
        {"get_workspace_symbols": [sym_info("Config", 5, "src/config.py", 2)]},
        expected_content=['Found 1 symbol(s) matching "Config":\n\n1. Config (Class) - src/config.py:3'],
    ),
    CommandCase(
        "workspace symbols capped at thirty",
        "workspace_symbols item",
        {"get_workspace_symbols": [sym_info(f"item{i}", 13, "src/a.py", i) for i in range(35)]},
        expected_content=["30. item29 (Variable) - src/a.py:30", "... and 5 more"],
        absent_content=["31. "],
    ),
    CommandCase(
        "document symbols",
        "document_symbols src/config.py",
        {"get_document_symbols": [sym("Config", 5, 2, 10, children=[sym("load", 6, 7, 9)])]},
        expected_content=["Found 1 symbol(s) in document:\n\nConfig (Class) - Line 3\n  load (Method) - Line 8"],
    ),
    CommandCase(
        "type definition",
        "type_definition src/app.py 11 4",
        {"get_type_definition": [loc("src/config.py", 2, 6)]},
        expected_content=["Found 1 type definition(s):\n\n1. src/config.py:3:7"],
    ),
    CommandCase(
        "type definition not found",
        "type_definition src/app.py 0 0",
        expected_content=["No type definition found for symbol at the specified position"],
    ),
    CommandCase(
        "declaration",
        "declaration src/app.c 4 2",
        {"get_declaration": [loc("include/app.h", 9, 4), loc("include/compat.h", 1)]},
        expected_content=["Found 2 declaration(s):\n\n1. include/app.h:10:5\n2. include/compat.h:2:1"],
    ),
    CommandCase(
        "implementation",
        "implementation src/base.py 3 10",
        {"get_implementation": [loc("src/impl.py", 1)]},
        expected_content=["Found 1 implementation(s):\n\n1. src/impl.py:2:1"],
    ),
    CommandCase(
        "implementation failure",
        "implementation src/base.py 3 10",
        {"get_implementation": RuntimeError("boom")},
        expected_success=False,
        expected_content=["Error getting implementations: boom"],
    ),
    CommandCase(
        "prepare call hierarchy",
        "prepare_call_hierarchy src/app.py 2 8",
        {"prepare_call_hierarchy": [item("bar", 6, "src/app.py", 2)]},
        expected_content=[
            "Found 1 call hierarchy item(s):\n\n1. bar (Method) - src/app.py:3",
            "call_hierarchy_incoming or call_hierarchy_outgoing",
        ],
    ),
    CommandCase(
        "prepare call hierarchy failure",
        "prepare_call_hierarchy src/app.py 2 8",
        {"prepare_call_hierarchy": RuntimeError("unsupported")},
        expected_success=False,
        expected_content=["Error preparing call hierarchy: unsupported"],
    ),
    CommandCase(
        "incoming calls",
        "call_hierarchy_incoming src/app.py 2 8",
        {
            "prepare_call_hierarchy": [item("bar", 6, "src/app.py", 2)],
            "get_call_hierarchy_incoming_calls": [
                LspIncomingCall(from_item=item("main", 12, "src/main.py", 6)),
            ],
        },
        expected_content=["Found 1 incoming call(s):\n\n1. main (Function) - src/main.py:7"],
    ),
    CommandCase(
        "incoming calls without prepared item",
        "call_hierarchy_incoming src/app.py 0 0",
        expected_content=["No call hierarchy items found at the specified position"],
    ),
    CommandCase(
        "outgoing calls empty",
        "call_hierarchy_outgoing src/app.py 2 8",
        {"prepare_call_hierarchy": [item("bar", 6, "src/app.py", 2)]},
        expected_content=["No outgoing calls found for the specified item"],
    ),
    CommandCase(
        "outgoing calls",
        "call_hierarchy_outgoing src/app.py 2 8",
        {
            "prepare_call_hierarchy": [item("bar", 6, "src/app.py", 2)],
            "get_call_hierarchy_outgoing_calls": [LspOutgoingCall(to=item("helper", 12, "src/util.py", 0))],
        },
        expected_content=["Found 1 outgoing call(s):\n\n1. helper (Function) - src/util.py:1"],
    ),
    CommandCase(
        "prepare type hierarchy",
        "prepare_type_hierarchy src/child.py 4 6",
        {"prepare_type_hierarchy": [item("Child", 5, "src/child.py", 4)]},
        expected_content=[
            "Found 1 type hierarchy item(s):\n\n1. Child (Class) - src/child.py:5",
            "type_hierarchy_supertypes or type_hierarchy_subtypes",
        ],
    ),
    CommandCase(
        "supertypes",
        "type_hierarchy_supertypes src/child.py 4 6",
        {
            "prepare_type_hierarchy": [item("Child", 5, "src/child.py", 4)],
            "get_type_hierarchy_supertypes": [item("Base", 5, "src/base.py", 3)],
        },
        expected_content=["Found 1 supertype(s):\n\n1. Base (Class) - src/base.py:4"],
    ),
    CommandCase(
        "subtypes empty",
        "type_hierarchy_subtypes src/child.py 4 6",
        {"prepare_type_hierarchy": [item("Child", 5, "src/child.py", 4)]},
        expected_content=["No subtypes found for the specified item"],
    ),
    CommandCase(
        "hierarchy item out of range",
        "type_hierarchy_subtypes src/child.py 4 6 --item 3",
        {"prepare_type_hierarchy": [item("Child", 5, "src/child.py", 4)]},
        expected_success=False,
        expected_content=["--item 3 is out of range"],
    ),
    CommandCase(
        "hierarchy item must be positive",
        "call_hierarchy_incoming src/app.py 2 8 --item 0",
        expected_success=False,
        expected_content=["--item must be 1 or greater"],
    ),
    CommandCase(
        "unknown command",
        "frobnicate src/app.py",
        expected_success=False,
        expected_content=["Command 'frobnicate' is not registered"],
    ),
    CommandCase(
        "data input rejected",
        "explore_references foo｜some data",
        expected_success=False,
        expected_content=["does not accept data input"],
    ),
]


@pytest.mark.parametrize("case", CASES, ids=lambda c: c.name)
def test_command(case: CommandCase):
    shell = make_shell(FakeProvider(case.responses))
    result = shell.run(case.statement)

    assert result.success == case.expected_success, result.content
    for expected in case.expected_content:
        assert expected in result.content
    for absent in case.absent_content:
        assert absent not in result.content


@pytest.mark.parametrize(
    "statement",
    [
        "explore_symbol src/app.py 3 2",
        "explore_references foo",
        "definition src/app.py 0 0",
        "references src/app.py 0 0",
        "hover src/app.py 0 0",
        "workspace_symbols foo",
        "document_symbols src/app.py",
        "type_definition src/app.py 0 0",
        "declaration src/app.py 0 0",
        "implementation src/app.py 0 0",
        "prepare_call_hierarchy src/app.py 0 0",
        "call_hierarchy_incoming src/app.py 0 0",
        "call_hierarchy_outgoing src/app.py 0 0",
        "prepare_type_hierarchy src/app.py 0 0",
        "type_hierarchy_supertypes src/app.py 0 0",
        "type_hierarchy_subtypes src/app.py 0 0",
    ],
)
def test_not_ready_provider(statement):
    provider = FakeProvider({"get_hover": LspHover(contents="x")}, ready=False)
    result = make_shell(provider).run(statement)

    assert not result.success
    assert result.content == NOT_READY_MESSAGE
    assert provider.calls == []


def test_relative_path_resolved_against_workspace():
    class RecordingProvider(FakeProvider):
        def get_hover(self, uri, position):
            self.uri = uri
            return super().get_hover(uri, position)

    provider = RecordingProvider()
    make_shell(provider).run("hover src/app.py 1 2")
    assert provider.uri == f"file://{WORKSPACE}/src/app.py"


def test_missing_provider_is_fatal():
    shell = make_shell(provider=None)
    with pytest.raises(FatalError):
        shell.run("hover src/app.py 1 2")


def test_process_commands_strips_markers():
    shell = make_shell(FakeProvider({"get_definition": [loc("src/a.py", 0)]}))
    results = shell.process_commands([
        CommandCall("▶definition src/app.py 0 0■"),
        CommandCall("▶nope■"),
    ])

    assert [r.success for r in results] == [True, False]
    assert results[0].command_call.name == "definition"
    assert results[0].model_text().startswith("✅Found 1 definition(s)")
    assert results[1].model_text().startswith("❌")
    assert results[1].model_text().endswith("■")


def test_model_text_escapes_markers():
    shell = make_shell(FakeProvider({"get_hover": LspHover(contents="a ■ b")}))
    text = shell.run("hover src/app.py 0 0").model_text()
    assert text.count("■") == 1
    assert "\\u25a0" in text


def test_registered_commands():
    shell = make_shell(FakeProvider())
    assert shell.list_commands() == [
        "explore_symbol", "explore_references",
        "definition", "type_definition", "declaration", "implementation", "references",
        "hover", "workspace_symbols", "document_symbols",
        "prepare_call_hierarchy", "call_hierarchy_incoming", "call_hierarchy_outgoing",
        "prepare_type_hierarchy", "type_hierarchy_supertypes", "type_hierarchy_subtypes",
    ]
    for name in shell.list_commands():
        assert name in shell.describe(name)


def test_describe_unknown_command():
    with pytest.raises(ValueError):
        make_shell(FakeProvider()).describe("frobnicate")


def test_hierarchy_commands_prepare_from_position():
    class RecordingProvider(FakeProvider):
        def __init__(self, responses):
            super().__init__(responses)
            self.followed = []

        def get_type_hierarchy_supertypes(self, item):
            self.followed.append(item.name)
            return super().get_type_hierarchy_supertypes(item)

    provider = RecordingProvider({
        "prepare_type_hierarchy": [item("Left", 5, "src/a.py", 1), item("Right", 5, "src/a.py", 9)],
        "get_type_hierarchy_supertypes": [item("Base", 5, "src/base.py", 3)],
    })
    shell = make_shell(provider)

    assert shell.run("type_hierarchy_supertypes src/a.py 1 6").success
    assert shell.run("type_hierarchy_supertypes src/a.py 1 6 --item 2").success

    assert provider.followed == ["Left", "Right"]
    assert provider.calls.count("prepare_type_hierarchy") == 2


def test_duplicate_registration_rejected():
    shell = make_shell(FakeProvider())
    with pytest.raises(ValueError):
        shell.register_command(HoverCommand())


def test_validate_reports_bad_statement():
    shell = make_shell(FakeProvider())
    shell.validate("definition src/app.py 1 2")
    with pytest.raises(ValueError):
        shell.validate("definition src/app.py one 2")
