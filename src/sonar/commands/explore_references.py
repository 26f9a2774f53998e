"""
Explore references command implementation.

This module provides the ExploreReferencesCommand class, which finds a symbol
by name and lists its references grouped by file.
"""

import logging
import textwrap
from dataclasses import dataclass
from typing import Optional

from src.sonar.commands.base import Command, CommandArgumentParser
from src.sonar.core.constants import NOT_READY_MESSAGE
from src.sonar.core.messages import CommandResult
from src.sonar.exceptions import NotReadyError
from src.sonar.intel.explore_references import DEFAULT_MAX_RESULTS, ReferenceExplorer

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ExploreReferencesArgs:
    """Structured arguments for explore_references command."""
    query: str
    max_results: int = DEFAULT_MAX_RESULTS


class ExploreReferencesCommand(Command):
    """
    Command for finding all references to a symbol by name.

    The first workspace symbol matching the query is used.
    """

    @property
    def name(self) -> str:
        return "explore_references"

    def _parse_statement(self, statement: str, data: Optional[str] = None) -> ExploreReferencesArgs:
        if data:
            raise ValueError("The explore_references command does not accept data input")

        parser = CommandArgumentParser(prog="explore_references")
        parser.add_argument("query", help="Symbol name to search for")
        parser.add_argument(
            "--max-results", type=int, default=DEFAULT_MAX_RESULTS,
            help="Maximum number of references to show",
        )

        parsed_args = parser.parse_statement(statement)
        if parsed_args.max_results < 1:
            raise ValueError("--max-results must be a positive number")

        return ExploreReferencesArgs(query=parsed_args.query, max_results=parsed_args.max_results)

    def validate(self, session, statement: str, data: Optional[str] = None) -> None:
        self._parse_statement(statement, data)

    def description(self) -> str:
        return "Find all references to a symbol by name, grouped by file."

    def help(self) -> str:
        return textwrap.dedent(
            """
            Use the `explore_references` command to find every reference to a symbol
            given by name. No file or position is needed. References are grouped by
            file and sorted by line.

            Usage: ▶explore_references QUERY [--max-results N]■

            - QUERY: Symbol name (a partial name works; the first match is used)
            - max-results: Maximum number of references to show. Default: 100

            Example:

            ▶explore_references parse_config --max-results 20■
            ✅# Reference Exploration: parse_config
            ...
            ## Summary
            - Total references: 4
            - Files with references: 2
            - Symbol: parse_config (Function)■
            """
        )

    def execute(
        self, session, statement: str, data: Optional[str] = None
    ) -> CommandResult:
        """Execute the explore_references command."""
        args = self._parse_statement(statement, data)

        explorer = ReferenceExplorer(session.provider, workspace=session.workspace)
        try:
            report = explorer.explore(args.query, max_results=args.max_results)
        except NotReadyError:
            logger.error("Cannot explore references: language client is not ready")
            return CommandResult(content=NOT_READY_MESSAGE, success=False)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Unexpected error exploring references of %s", args.query)
            return CommandResult(content=f"Error exploring references: {e}", success=False, error=e)

        return CommandResult(content=report, success=True)
