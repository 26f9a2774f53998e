"""
Shell module for command execution.

This module provides a Shell class that manages command registration and execution.
It routes ``▶name args｜data■`` statements to the registered code-intelligence
commands.
"""

import logging
import traceback
from typing import Dict, List, Optional, Tuple

from src.sonar.commands.base import Command
from src.sonar.commands.explore_references import ExploreReferencesCommand
from src.sonar.commands.explore_symbol import ExploreSymbolCommand
from src.sonar.commands.lsp_queries import (
    CallHierarchyIncomingCommand,
    CallHierarchyOutgoingCommand,
    DeclarationCommand,
    DefinitionCommand,
    DocumentSymbolsCommand,
    HoverCommand,
    ImplementationCommand,
    PrepareCallHierarchyCommand,
    PrepareTypeHierarchyCommand,
    ReferencesCommand,
    TypeDefinitionCommand,
    TypeHierarchySubtypesCommand,
    TypeHierarchySupertypesCommand,
    WorkspaceSymbolsCommand,
)
from src.sonar.core.constants import COMMAND_END, COMMAND_START, STDIN_SEPARATOR
from src.sonar.core.messages import CommandCall, CommandResult, ParsedCommand
from src.sonar.exceptions import FatalError
from src.sonar.session import Session

# Configure logging
logger = logging.getLogger(__name__)


class Shell:
    """
    Shell for registering and executing commands.
    """

    def __init__(self, session: Session):
        self._commands: Dict[str, Command] = {}
        self._session = session

        # Register built-in commands
        self._register_builtin_commands()

    def register_command(self, command: Command) -> None:
        """
        Register a command with the shell.

        Raises:
            ValueError: If a command with the same name is already registered
        """
        name = command.name
        if name in self._commands:
            raise ValueError(f"Command '{name}' is already registered")

        self._commands[name] = command
        logger.debug(f"Registered command: {name}")

    def _get_command(self, command_name: str) -> Command:
        """
        Get a registered command by name.

        Raises:
            ValueError: If the command is not registered
        """
        if command_name not in self._commands:
            raise ValueError(f"Command '{command_name}' is not registered")

        return self._commands[command_name]

    def list_commands(self) -> List[str]:
        """
        Get a list of all registered command names.
        """
        return list(self._commands.keys())

    def summaries(self) -> List[Tuple[str, str]]:
        """
        Get (name, short description) pairs for all registered commands.
        """
        return [(name, command.description()) for name, command in self._commands.items()]

    def describe(self, command_name: str) -> str:
        """
        Get the manual of a command, as shown by ``sonar commands NAME``.

        Raises:
            ValueError: If the command is not registered
        """
        return self._get_command(command_name).help()

    def _parse(self, command_input: str) -> ParsedCommand:
        """
        Parse a command input string in the format "command_name [args] [｜data]"

        Returns:
            ParsedCommand containing command name, statement, and data

        Raises:
            ValueError: If the input is empty or the command is not registered
        """
        data = None
        statement_part = command_input
        if STDIN_SEPARATOR in command_input:
            statement_part, data = command_input.split(STDIN_SEPARATOR, 1)
            data = data.strip() or None
        statement_part = statement_part.strip()

        if not statement_part:
            raise ValueError("Empty command input")

        command_name = statement_part.split()[0]
        if command_name not in self._commands:
            raise ValueError(f"Command '{command_name}' is not registered")

        return ParsedCommand(command_name, statement_part, data)

    def validate(self, command_input: str) -> None:
        """Validate a command input string."""
        parsed_cmd = self._parse(command_input)
        command = self._get_command(parsed_cmd.name)
        command.validate(self._session, parsed_cmd.parameters, parsed_cmd.data)

    def execute(
        self, command_name: str, statement: str, data: Optional[str] = None
    ) -> CommandResult:
        """
        Execute a command with the given statement and data.
        """
        try:
            command = self._get_command(command_name)
            return command.execute(self._session, statement, data)
        except FatalError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            logger.error(f"Error executing command {command_name}: {str(e)}")
            return CommandResult(content=str(e), success=False, error=e)

    def run(self, command_input: str) -> CommandResult:
        """
        Parse and execute a single statement without markers.
        """
        try:
            parsed_cmd = self._parse(command_input)
        except ValueError as e:
            return CommandResult(content=str(e), success=False, error=e)

        result = self.execute(parsed_cmd.name, parsed_cmd.parameters, parsed_cmd.data)
        result.command_call = parsed_cmd
        return result

    def process_commands(self, commands: List[CommandCall]) -> List[CommandResult]:
        """
        Process a list of command calls and return the results.

        Args:
            commands: List of command calls to process

        Returns:
            List of CommandResult objects with the results of each command
        """
        assert (
            len(commands) > 0
        ), f"Expected at least one command call, got {len(commands)}"

        result_blocks = []
        for cmd_call in commands:
            statement = cmd_call.content
            if statement.startswith(COMMAND_START):
                statement = statement[len(COMMAND_START):]
            if statement.endswith(COMMAND_END):
                statement = statement[:-len(COMMAND_END)]

            result_blocks.append(self.run(statement))

        for result in result_blocks:
            if result.success:
                logger.info(f"Command result: {result.content}")
            else:
                error_message = result.content + (
                    f"\n{''.join(traceback.format_exception(result.error))}" if result.error else ""
                )
                logger.error(f"Command failed: {error_message}")

        return result_blocks

    def _register_builtin_commands(self) -> None:
        """
        Register built-in commands with the shell.
        """
        # Composite explorations
        self.register_command(ExploreSymbolCommand())
        self.register_command(ExploreReferencesCommand())

        # Single queries
        self.register_command(DefinitionCommand())
        self.register_command(TypeDefinitionCommand())
        self.register_command(DeclarationCommand())
        self.register_command(ImplementationCommand())
        self.register_command(ReferencesCommand())
        self.register_command(HoverCommand())
        self.register_command(WorkspaceSymbolsCommand())
        self.register_command(DocumentSymbolsCommand())

        # Hierarchies, one relationship per command
        self.register_command(PrepareCallHierarchyCommand())
        self.register_command(CallHierarchyIncomingCommand())
        self.register_command(CallHierarchyOutgoingCommand())
        self.register_command(PrepareTypeHierarchyCommand())
        self.register_command(TypeHierarchySupertypesCommand())
        self.register_command(TypeHierarchySubtypesCommand())

        logger.debug(f"Registered built-in commands: {', '.join(self.list_commands())}")
