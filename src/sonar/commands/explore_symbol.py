"""
Explore symbol command implementation.

This module provides the ExploreSymbolCommand class, which gathers everything
the language server knows about the symbol at a position into one report.
"""

import logging
import textwrap
from dataclasses import dataclass
from typing import Optional

from src.sonar.commands.base import (
    Command, CommandArgumentParser, PositionArgs, add_position_arguments, position_args,
)
from src.sonar.core.constants import NOT_READY_MESSAGE
from src.sonar.core.messages import CommandResult
from src.sonar.exceptions import NotReadyError
from src.sonar.intel.explore_symbol import SymbolExplorer

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ExploreSymbolArgs:
    """Structured arguments for explore_symbol command."""
    target: PositionArgs
    include_call_hierarchy: bool = True
    include_type_hierarchy: bool = True


class ExploreSymbolCommand(Command):
    """
    Command for exploring the symbol at a position.

    Features:
    - Document context: enclosing symbol, parent and neighbours
    - Hover information
    - Definition, type definition and declaration locations
    - References (first 10) and implementations
    - Incoming/outgoing calls and super/subtypes
    - Each piece is optional; unavailable information is left out
    """

    @property
    def name(self) -> str:
        return "explore_symbol"

    def _parse_statement(self, session, statement: str, data: Optional[str] = None) -> ExploreSymbolArgs:
        """Parse the command statement using argparse."""
        if data:
            raise ValueError("The explore_symbol command does not accept data input")

        parser = CommandArgumentParser(prog="explore_symbol")
        add_position_arguments(parser)
        parser.add_argument("--no-call-hierarchy", action="store_true", help="Skip incoming/outgoing calls")
        parser.add_argument("--no-type-hierarchy", action="store_true", help="Skip supertypes/subtypes")

        parsed_args = parser.parse_statement(statement)
        return ExploreSymbolArgs(
            target=position_args(session, parsed_args),
            include_call_hierarchy=not parsed_args.no_call_hierarchy,
            include_type_hierarchy=not parsed_args.no_type_hierarchy,
        )

    def validate(self, session, statement: str, data: Optional[str] = None) -> None:
        self._parse_statement(session, statement, data)

    def description(self) -> str:
        return "Explore everything known about the symbol at a position."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `explore_symbol` command to get a comprehensive report about the
            symbol at a position: document context, hover information, definition,
            type definition, declaration, references, implementations, and call and
            type hierarchies. Prefer it over issuing the individual queries.

            Usage: ▶explore_symbol PATH LINE CHARACTER [--no-call-hierarchy] [--no-type-hierarchy]■

            - PATH: File path relative to the workspace, absolute path, or file:// URI
            - LINE: Line number (0-based)
            - CHARACTER: Character offset in line (0-based)
            - no-call-hierarchy: Skip incoming/outgoing calls
            - no-type-hierarchy: Skip supertypes/subtypes

            Example:

            ▶explore_symbol src/app.py 11 8■
            ✅# Symbol Exploration Results

            **Location:** src/app.py:12:9

            ## SYMBOL INFORMATION
            ...■
            """
        )

    def execute(
        self, session, statement: str, data: Optional[str] = None
    ) -> CommandResult:
        """Execute the explore_symbol command."""
        args = self._parse_statement(session, statement, data)

        explorer = SymbolExplorer(session.provider, workspace=session.workspace)
        try:
            report = explorer.explore(
                args.target.uri,
                args.target.position,
                include_call_hierarchy=args.include_call_hierarchy,
                include_type_hierarchy=args.include_type_hierarchy,
            )
        except NotReadyError:
            logger.error("Cannot explore symbol: language client is not ready")
            return CommandResult(content=NOT_READY_MESSAGE, success=False)

        return CommandResult(content=report, success=True)
