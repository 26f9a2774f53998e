"""
Core command module defining the Command interface.

This module provides the foundation for all callable commands in the system:
- Abstract Command interface that all concrete commands must implement
- An argparse parser that reports bad statements as ValueError
- Shared parsing of document positions
"""

import argparse
import logging
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from src.lsp.models import LspPosition
from src.sonar.core.messages import CommandResult
from src.sonar.session import Session
from src.utils.uris import to_uri

# Configure logging
logger = logging.getLogger(__name__)


class CommandArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ValueError instead of exiting the process."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("add_help", False)
        super().__init__(*args, **kwargs)

    def error(self, message):
        raise ValueError(f"{self.prog}: {message}")

    def parse_statement(self, statement: str) -> argparse.Namespace:
        """Split a statement like a shell would and parse it."""
        arg_list: List[str] = shlex.split(statement) if statement else []
        # The statement starts with the command name
        if arg_list and arg_list[0] == self.prog:
            arg_list = arg_list[1:]
        return self.parse_args(arg_list)


@dataclass
class PositionArgs:
    """A document and a zero-based position within it."""
    uri: str
    position: LspPosition


def add_position_arguments(parser: argparse.ArgumentParser) -> None:
    """Add PATH LINE CHARACTER positional arguments."""
    parser.add_argument("path", help="File path (workspace-relative or absolute) or file:// URI")
    parser.add_argument("line", type=int, help="Line number (0-based)")
    parser.add_argument("character", type=int, help="Character offset in line (0-based)")


def position_args(session: Session, parsed: argparse.Namespace) -> PositionArgs:
    """Build PositionArgs from parsed PATH LINE CHARACTER arguments."""
    if parsed.line < 0 or parsed.character < 0:
        raise ValueError("Line and character must be non-negative (0-based)")
    return PositionArgs(
        uri=to_uri(parsed.path, session.workspace),
        position=LspPosition(line=parsed.line, character=parsed.character),
    )


class Command(ABC):
    """
    Abstract base class for commands callable in a CLI-like fashion.

    Commands can be executed with positional parameters and flags, similar to
    command-line programs. For example:

    ▶<cmd> param1 -f val1 --foo val2■

    Subclasses must implement:
    - name: Property that returns the command name
    - description(): Returns a short description of the command
    - help(): Returns detailed description with examples and parameter lists
    - validate(): Validates that a given command statement is valid
    - execute(): Executes the command and returns a CommandResult
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Returns the name of the command.
        """
        pass

    @abstractmethod
    def description(self) -> str:
        """
        Returns a short description of the command.
        """
        pass

    @abstractmethod
    def help(self) -> str:
        """
        Returns a detailed description of the command with examples and parameter lists.
        """
        pass

    @abstractmethod
    def validate(
        self, session: Session, statement: str, data: Optional[str] = None
    ) -> None:
        """
        Validates that the command statement and data are valid for execution.

        Args:
            session: The current session context
            statement: The full command statement without markers
            data: Optional data string (similar to stdin)

        Raises:
            ValueError: If validation fails
        """
        pass

    @abstractmethod
    def execute(
        self, session: Session, statement: str, data: Optional[str] = None
    ) -> CommandResult:
        """
        Executes the command and returns a result.

        Args:
            session: The current session context
            statement: The full command statement without markers
            data: Optional data string (similar to stdin)

        Returns:
            CommandResult object with result and success status

        Raises:
            FatalError: For unrecoverable errors that should terminate execution
        """
        pass
