"""
Single-query language server commands.

Thin commands that forward one request to the capability provider and format
its answer:
- location queries: definition, type definition, declaration, implementation
- references, hover, workspace symbols and document symbols
- call and type hierarchies, one relationship at a time

Hierarchy commands prepare the item at PATH LINE CHARACTER on every call and
then follow one relationship from it.
"""

import argparse
import logging
import textwrap
from abc import abstractmethod
from typing import List, Optional, Sequence

from src.lsp.models import LspHierarchyItem, LspLocation, LspSymbol
from src.sonar.commands.base import (
    Command, CommandArgumentParser, add_position_arguments, position_args,
)
from src.sonar.core.constants import NOT_READY_MESSAGE
from src.sonar.core.messages import CommandResult
from src.sonar.intel.formatting import (
    display_path, format_hierarchy_item, format_locations, numbered, symbol_kind_name,
)
from src.utils.uris import to_uri

# Configure logging
logger = logging.getLogger(__name__)

MAX_WORKSPACE_SYMBOLS = 30


class ProviderQueryCommand(Command):
    """
    Base class for commands answering with a single provider query.

    Subclasses declare their arguments in ``_add_arguments`` and produce the
    result text in ``_run``.
    """

    # Used in error messages, e.g. "Error getting definition: ..."
    action = "getting"
    subject = "result"

    def _add_arguments(self, parser: argparse.ArgumentParser) -> None:
        add_position_arguments(parser)

    @abstractmethod
    def _run(self, session, parsed_args: argparse.Namespace) -> str:
        pass

    def _parse_statement(self, statement: str, data: Optional[str] = None) -> argparse.Namespace:
        if data:
            raise ValueError(f"The {self.name} command does not accept data input")
        parser = CommandArgumentParser(prog=self.name)
        self._add_arguments(parser)
        return parser.parse_statement(statement)

    def validate(self, session, statement: str, data: Optional[str] = None) -> None:
        self._parse_statement(statement, data)

    def execute(
        self, session, statement: str, data: Optional[str] = None
    ) -> CommandResult:
        parsed_args = self._parse_statement(statement, data)

        provider = session.provider
        if not provider.is_ready():
            return CommandResult(content=NOT_READY_MESSAGE, success=False)

        try:
            return CommandResult(content=self._run(session, parsed_args), success=True)
        except ValueError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Error running %s", self.name)
            return CommandResult(
                content=f"Error {self.action} {self.subject}: {e}", success=False, error=e
            )


class LocationQueryCommand(ProviderQueryCommand):
    """
    Base class for position queries answered with a list of locations.

    Subclasses set ``label`` (singular noun used in the result header) and
    ``not_found`` and implement ``_query``.
    """

    label = "location"
    not_found = "No location found for symbol at the specified position"

    @abstractmethod
    def _query(self, provider, uri: str, position) -> List[LspLocation]:
        pass

    def _run(self, session, parsed_args) -> str:
        target = position_args(session, parsed_args)
        locations = self._query(session.provider, target.uri, target.position)
        if not locations:
            return self.not_found
        return f"Found {len(locations)} {self.label}(s):\n\n{format_locations(locations, session.workspace)}"


class DefinitionCommand(LocationQueryCommand):
    """Go to definition."""

    subject = "definition"
    label = "definition"
    not_found = "No definition found for symbol at the specified position"

    @property
    def name(self) -> str:
        return "definition"

    def description(self) -> str:
        return "Find where the symbol at a position is defined."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `definition` command to find the definition of the symbol at a position.

            Usage: ▶definition PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based

            Example:

            ▶definition src/app.py 11 8■
            ✅Found 1 definition(s):

            1. src/config.py:4:5■
            """
        )

    def _query(self, provider, uri, position):
        return provider.get_definition(uri, position)


class TypeDefinitionCommand(LocationQueryCommand):
    """Go to the definition of the symbol's type."""

    subject = "type definition"
    label = "type definition"
    not_found = "No type definition found for symbol at the specified position"

    @property
    def name(self) -> str:
        return "type_definition"

    def description(self) -> str:
        return "Find where the type of the symbol at a position is defined."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `type_definition` command to jump from a variable or expression
            to the definition of its type.

            Usage: ▶type_definition PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based

            Example:

            ▶type_definition src/app.py 11 4■
            ✅Found 1 type definition(s):

            1. src/config.py:3:7■
            """
        )

    def _query(self, provider, uri, position):
        return provider.get_type_definition(uri, position)


class DeclarationCommand(LocationQueryCommand):
    """Go to declaration."""

    subject = "declaration"
    label = "declaration"
    not_found = "No declaration found for symbol at the specified position"

    @property
    def name(self) -> str:
        return "declaration"

    def description(self) -> str:
        return "Find where the symbol at a position is declared."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `declaration` command to find the declaration of the symbol at a
            position, e.g. a prototype in a C header.

            Usage: ▶declaration PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based
            """
        )

    def _query(self, provider, uri, position):
        return provider.get_declaration(uri, position)


class ImplementationCommand(LocationQueryCommand):
    """Find implementations of an interface or abstract member."""

    subject = "implementations"
    label = "implementation"
    not_found = "No implementations found for symbol at the specified position"

    @property
    def name(self) -> str:
        return "implementation"

    def description(self) -> str:
        return "Find implementations of the interface or method at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `implementation` command to list the concrete implementations of
            an interface, abstract class or abstract method.

            Usage: ▶implementation PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based
            """
        )

    def _query(self, provider, uri, position):
        return provider.get_implementation(uri, position)


class ReferencesCommand(ProviderQueryCommand):
    """Find references at a position."""

    subject = "references"

    @property
    def name(self) -> str:
        return "references"

    def _add_arguments(self, parser: argparse.ArgumentParser) -> None:
        add_position_arguments(parser)
        parser.add_argument(
            "--exclude-declaration", action="store_true",
            help="Leave the declaration out of the results",
        )

    def description(self) -> str:
        return "Find all references to the symbol at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `references` command to list references to the symbol at a position.

            Usage: ▶references PATH LINE CHARACTER [--exclude-declaration]■

            - LINE and CHARACTER are 0-based
            - exclude-declaration: Leave the declaration out of the results

            Example:

            ▶references src/config.py 3 4■
            ✅Found 2 reference(s):

            1. src/config.py:4:5
            2. src/app.py:12:9■
            """
        )

    def _run(self, session, parsed_args) -> str:
        target = position_args(session, parsed_args)
        locations = session.provider.get_references(
            target.uri, target.position, not parsed_args.exclude_declaration
        )
        if not locations:
            return "No references found for symbol at the specified position"
        return f"Found {len(locations)} reference(s):\n\n{format_locations(locations, session.workspace)}"


class HoverCommand(ProviderQueryCommand):
    """Hover information at a position."""

    subject = "hover info"

    @property
    def name(self) -> str:
        return "hover"

    def description(self) -> str:
        return "Show type and documentation of the symbol at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `hover` command to show type information and documentation for
            the symbol at a position.

            Usage: ▶hover PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based
            """
        )

    def _run(self, session, parsed_args) -> str:
        target = position_args(session, parsed_args)
        hover = session.provider.get_hover(target.uri, target.position)
        if hover is None or not hover.contents:
            return "No hover information available for symbol at the specified position"
        return f"Symbol Information:\n\n{hover.contents}"


class WorkspaceSymbolsCommand(ProviderQueryCommand):
    """Search symbols across the workspace."""

    subject = "workspace symbols"

    @property
    def name(self) -> str:
        return "workspace_symbols"

    def _add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("query", help="Symbol name or fragment")

    def description(self) -> str:
        return "Search for symbols by name across the workspace."

    def help(self) -> str:
        return textwrap.dedent(
            f"""
            Use the `workspace_symbols` command to search symbols by name. At most
            {MAX_WORKSPACE_SYMBOLS} matches are listed.

            Usage: ▶workspace_symbols QUERY■

            Example:

            ▶workspace_symbols Config■
            ✅Found 1 symbol(s) matching "Config":

            1. Config (Class) - src/config.py:3■
            """
        )

    def _run(self, session, parsed_args) -> str:
        query = parsed_args.query
        symbols = session.provider.get_workspace_symbols(query)
        if not symbols:
            return f'No symbols found matching query: "{query}"'

        entries = [
            f"{s.name} ({symbol_kind_name(s.kind)}) - "
            f"{display_path(s.location.uri, session.workspace)}:{s.location.range.start.line + 1}"
            for s in symbols
        ]
        lines = numbered(entries, MAX_WORKSPACE_SYMBOLS)
        return f'Found {len(symbols)} symbol(s) matching "{query}":\n\n' + "\n".join(lines)


def outline(symbols: Sequence[LspSymbol], depth: int = 0) -> List[str]:
    """Indented ``name (Kind) - Line N`` lines for a symbol forest."""
    lines = []
    for symbol in symbols:
        lines.append(
            f"{'  ' * depth}{symbol.name} ({symbol_kind_name(symbol.kind)}) - Line {symbol.range.start.line + 1}"
        )
        lines.extend(outline(symbol.children, depth + 1))
    return lines


class DocumentSymbolsCommand(ProviderQueryCommand):
    """Outline of one document."""

    subject = "document symbols"

    @property
    def name(self) -> str:
        return "document_symbols"

    def _add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path", help="File path (workspace-relative or absolute) or file:// URI")

    def description(self) -> str:
        return "Show the symbol outline of a file."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `document_symbols` command to show the classes, functions and
            other symbols declared in a file, nested by scope.

            Usage: ▶document_symbols PATH■

            Example:

            ▶document_symbols src/config.py■
            ✅Found 1 symbol(s) in document:

            Config (Class) - Line 3
              load (Method) - Line 8■
            """
        )

    def _run(self, session, parsed_args) -> str:
        uri = to_uri(parsed_args.path, session.workspace)
        symbols = session.provider.get_document_symbols(uri)
        if not symbols:
            return "No symbols found in the document"
        return f"Found {len(symbols)} symbol(s) in document:\n\n" + "\n".join(outline(symbols))


def format_items(items: Sequence[LspHierarchyItem], base: Optional[str] = None) -> str:
    """Numbered ``name (Kind) - path:line`` lines."""
    return "\n".join(numbered([format_hierarchy_item(item, base, with_kind=True) for item in items]))


def prepare_items(session, parsed_args: argparse.Namespace, family: str) -> List[LspHierarchyItem]:
    """Prepare the call or type hierarchy items at the parsed position."""
    target = position_args(session, parsed_args)
    if family == "call":
        return session.provider.prepare_call_hierarchy(target.uri, target.position)
    return session.provider.prepare_type_hierarchy(target.uri, target.position)


class PrepareHierarchyCommand(ProviderQueryCommand):
    """
    Base class for commands listing the hierarchy items at a position.

    Subclasses set ``family`` ("call" or "type"), the two ``follow_ups``
    command names and the ``relationships`` they explore.
    """

    action = "preparing"
    family = "call"
    follow_ups = ("call_hierarchy_incoming", "call_hierarchy_outgoing")
    relationships = "call relationships"

    def _run(self, session, parsed_args) -> str:
        items = prepare_items(session, parsed_args, self.family)
        if not items:
            return f"No {self.family} hierarchy items found at the specified position"

        first, second = self.follow_ups
        return (
            f"Found {len(items)} {self.family} hierarchy item(s):\n\n"
            f"{format_items(items, session.workspace)}\n\n"
            f"Run {first} or {second} at the same position (--item N selects an entry) "
            f"to explore {self.relationships}."
        )


class HierarchyRelationCommand(ProviderQueryCommand):
    """
    Base class for commands following one hierarchy relationship.

    The item is prepared again from PATH LINE CHARACTER and ``--item`` picks
    one when several are prepared. Subclasses set ``family``, ``label`` and
    ``not_found`` and implement ``_related``.
    """

    family = "call"
    label = "item"
    not_found = "No related items found for the specified item"

    def _add_arguments(self, parser: argparse.ArgumentParser) -> None:
        add_position_arguments(parser)
        parser.add_argument(
            "--item", type=int, default=1,
            help="Which prepared item to follow (1-based, default 1)",
        )

    def _parse_statement(self, statement: str, data: Optional[str] = None) -> argparse.Namespace:
        parsed_args = super()._parse_statement(statement, data)
        if parsed_args.item < 1:
            raise ValueError(f"{self.name}: --item must be 1 or greater")
        return parsed_args

    @abstractmethod
    def _related(self, provider, item: LspHierarchyItem) -> List[LspHierarchyItem]:
        pass

    def _run(self, session, parsed_args) -> str:
        items = prepare_items(session, parsed_args, self.family)
        if not items:
            return f"No {self.family} hierarchy items found at the specified position"
        if parsed_args.item > len(items):
            raise ValueError(
                f"{self.name}: --item {parsed_args.item} is out of range, "
                f"{len(items)} {self.family} hierarchy item(s) at the specified position"
            )

        related = self._related(session.provider, items[parsed_args.item - 1])
        if not related:
            return self.not_found
        return f"Found {len(related)} {self.label}(s):\n\n{format_items(related, session.workspace)}"


class PrepareCallHierarchyCommand(PrepareHierarchyCommand):
    """List call hierarchy items at a position."""

    subject = "call hierarchy"

    @property
    def name(self) -> str:
        return "prepare_call_hierarchy"

    def description(self) -> str:
        return "List the functions or methods whose calls can be explored at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `prepare_call_hierarchy` command to see which callable the
            position resolves to before exploring its callers or callees.

            Usage: ▶prepare_call_hierarchy PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based

            Example:

            ▶prepare_call_hierarchy src/app.py 2 8■
            ✅Found 1 call hierarchy item(s):

            1. bar (Method) - src/app.py:3

            Run call_hierarchy_incoming or call_hierarchy_outgoing at the same position (--item N selects an entry) to explore call relationships.■
            """
        )


class CallHierarchyIncomingCommand(HierarchyRelationCommand):
    """Callers of the function at a position."""

    subject = "incoming calls"
    label = "incoming call"
    not_found = "No incoming calls found for the specified item"

    @property
    def name(self) -> str:
        return "call_hierarchy_incoming"

    def description(self) -> str:
        return "List the callers of the function or method at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `call_hierarchy_incoming` command to list who calls the function
            or method at a position.

            Usage: ▶call_hierarchy_incoming PATH LINE CHARACTER [--item N]■

            - LINE and CHARACTER are 0-based
            - item: Which prepared item to follow when the position yields several (default 1)

            Example:

            ▶call_hierarchy_incoming src/app.py 2 8■
            ✅Found 1 incoming call(s):

            1. main (Function) - src/main.py:7■
            """
        )

    def _related(self, provider, item):
        return [call.from_item for call in provider.get_call_hierarchy_incoming_calls(item)]


class CallHierarchyOutgoingCommand(HierarchyRelationCommand):
    """Callees of the function at a position."""

    subject = "outgoing calls"
    label = "outgoing call"
    not_found = "No outgoing calls found for the specified item"

    @property
    def name(self) -> str:
        return "call_hierarchy_outgoing"

    def description(self) -> str:
        return "List the functions called by the function or method at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `call_hierarchy_outgoing` command to list what the function or
            method at a position calls.

            Usage: ▶call_hierarchy_outgoing PATH LINE CHARACTER [--item N]■

            - LINE and CHARACTER are 0-based
            - item: Which prepared item to follow when the position yields several (default 1)
            """
        )

    def _related(self, provider, item):
        return [call.to for call in provider.get_call_hierarchy_outgoing_calls(item)]


class PrepareTypeHierarchyCommand(PrepareHierarchyCommand):
    """List type hierarchy items at a position."""

    subject = "type hierarchy"
    family = "type"
    follow_ups = ("type_hierarchy_supertypes", "type_hierarchy_subtypes")
    relationships = "type relationships"

    @property
    def name(self) -> str:
        return "prepare_type_hierarchy"

    def description(self) -> str:
        return "List the types whose inheritance can be explored at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `prepare_type_hierarchy` command to see which type the position
            resolves to before exploring its supertypes or subtypes.

            Usage: ▶prepare_type_hierarchy PATH LINE CHARACTER■

            - LINE and CHARACTER are 0-based
            """
        )


class TypeHierarchySupertypesCommand(HierarchyRelationCommand):
    """Parents of the type at a position."""

    subject = "supertypes"
    family = "type"
    label = "supertype"
    not_found = "No supertypes found for the specified item"

    @property
    def name(self) -> str:
        return "type_hierarchy_supertypes"

    def description(self) -> str:
        return "List the base classes and interfaces of the type at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `type_hierarchy_supertypes` command to list the direct base
            classes and interfaces of the type at a position.

            Usage: ▶type_hierarchy_supertypes PATH LINE CHARACTER [--item N]■

            - LINE and CHARACTER are 0-based
            - item: Which prepared item to follow when the position yields several (default 1)

            Example:

            ▶type_hierarchy_supertypes src/child.py 4 6■
            ✅Found 1 supertype(s):

            1. Base (Class) - src/base.py:4■
            """
        )

    def _related(self, provider, item):
        return provider.get_type_hierarchy_supertypes(item)


class TypeHierarchySubtypesCommand(HierarchyRelationCommand):
    """Children of the type at a position."""

    subject = "subtypes"
    family = "type"
    label = "subtype"
    not_found = "No subtypes found for the specified item"

    @property
    def name(self) -> str:
        return "type_hierarchy_subtypes"

    def description(self) -> str:
        return "List the classes deriving from the type at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `type_hierarchy_subtypes` command to list the direct subclasses
            and implementors of the type at a position.

            Usage: ▶type_hierarchy_subtypes PATH LINE CHARACTER [--item N]■

            - LINE and CHARACTER are 0-based
            - item: Which prepared item to follow when the position yields several (default 1)
            """
        )

    def _related(self, provider, item):
        return provider.get_type_hierarchy_subtypes(item)
