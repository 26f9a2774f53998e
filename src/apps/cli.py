"""
Command Line Interface module for Sonar.

This module provides the main entry point for the sonar CLI, handling
command-line arguments, connecting to a language server, and running
code-intelligence commands against a workspace.
"""

import argparse
import logging
import os
import shlex
import sys
from typing import List, Optional

# Logging is configured in src/__init__.py when imported
from src import setup_logging
from src.apps.display import print_commands, print_manual, print_result
from src.lsp import LSPClient, create_lsp_client
from src.sonar.core.messages import CommandResult
from src.sonar.session import Session
from src.utils.uris import path_to_uri

# Configure logger for this module
logger = logging.getLogger(__name__)


class CLI:
    """
    Encapsulates the CLI application logic.

    This class is responsible for:
    - Parsing command-line arguments
    - Connecting to (or launching) a language server
    - Building the session and running the requested command
    """

    @classmethod
    def start(cls, argv: Optional[List[str]] = None) -> int:
        """
        Start the CLI application and return the process exit code.
        """
        args = cls._parse_args(argv)
        if args.verbose:
            setup_logging(level="DEBUG", console=True)

        workspace = os.path.abspath(args.workspace)
        provider = None
        try:
            if args.subcommand == "commands":
                shell = Session.builder().workspace(workspace).initialize().shell
                if args.name is None:
                    print_commands(shell.summaries())
                    return 0
                try:
                    print_manual(args.name, shell.describe(args.name))
                except ValueError as e:
                    print(f"Error: {e}")
                    return 1
                return 0

            provider = cls._connect(args, workspace)
            session = Session.builder().workspace(workspace).provider(provider).initialize()

            statement = cls._statement(args)
            logger.info(f"Running '{statement}' in workspace {workspace}")
            result: CommandResult = session.shell.run(statement)
            print_result(result)
            return 0 if result.success else 1

        except KeyboardInterrupt:
            logger.info("Application interrupted by user")
            print("\nExiting sonar...")
            return 130

        except Exception as e:  # pylint: disable=broad-except
            logger.critical(f"Unhandled exception: {e}", exc_info=True)
            print(f"\nError: {str(e)}")
            return 1

        finally:
            if provider is not None:
                provider.shutdown()

    @staticmethod
    def _connect(args: argparse.Namespace, workspace: str) -> LSPClient:
        """
        Attach to a running server when a port is given, otherwise launch one.
        """
        if args.port:
            client = LSPClient(root_uri=path_to_uri(workspace))
            if not client.connect(args.host, args.port):
                logger.error(f"Could not attach to language server at {args.host}:{args.port}")
            return client

        return create_lsp_client(language=args.language, workspace=workspace)

    @staticmethod
    def _statement(args: argparse.Namespace) -> str:
        """Translate a subcommand into a shell statement."""
        if args.subcommand == "run":
            return args.statement

        if args.subcommand == "explore-symbol":
            parts = ["explore_symbol", args.path, str(args.line), str(args.character)]
            if args.no_call_hierarchy:
                parts.append("--no-call-hierarchy")
            if args.no_type_hierarchy:
                parts.append("--no-type-hierarchy")
            return shlex.join(parts)

        if args.subcommand == "explore-references":
            return shlex.join(
                ["explore_references", args.query, "--max-results", str(args.max_results)]
            )

        raise ValueError(f"Unknown subcommand: {args.subcommand}")

    @staticmethod
    def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Returns:
            Parsed argument namespace
        """
        parser = argparse.ArgumentParser(
            description="Sonar - code intelligence reports from a language server",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        )
        parser.add_argument("--workspace", "-w", default=os.getcwd(), help="Path to the code workspace")
        parser.add_argument("--language", "-l", default="python", help="Language of the server to launch")
        parser.add_argument(
            "--host", default=os.environ.get("SONAR_LSP_HOST", "127.0.0.1"),
            help="Host of an already running language server",
        )
        parser.add_argument(
            "--port", type=int, default=os.environ.get("SONAR_LSP_PORT") or None,
            help="Port of an already running language server (launches one when omitted)",
        )
        parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

        subparsers = parser.add_subparsers(
            dest="subcommand", help="Subcommand to run", required=True
        )

        # 1. Explore the symbol at a position
        symbol_parser = subparsers.add_parser(
            "explore-symbol", help="Report everything known about the symbol at a position"
        )
        symbol_parser.add_argument("path", help="File path (workspace-relative or absolute)")
        symbol_parser.add_argument("line", type=int, help="Line number (0-based)")
        symbol_parser.add_argument("character", type=int, help="Character offset (0-based)")
        symbol_parser.add_argument("--no-call-hierarchy", action="store_true", help="Skip call hierarchy")
        symbol_parser.add_argument("--no-type-hierarchy", action="store_true", help="Skip type hierarchy")

        # 2. Explore references of a symbol by name
        references_parser = subparsers.add_parser(
            "explore-references", help="List references of a symbol found by name"
        )
        references_parser.add_argument("query", help="Symbol name")
        references_parser.add_argument("--max-results", type=int, default=100, help="Maximum references to show")

        # 3. Run any shell statement
        run_parser = subparsers.add_parser("run", help="Run a command statement, e.g. 'hover app.py 3 4'")
        run_parser.add_argument("statement", help="Command statement")

        # 4. List commands, or show the manual of one
        commands_parser = subparsers.add_parser("commands", help="List available commands")
        commands_parser.add_argument("name", nargs="?", help="Show the manual of this command")

        return parser.parse_args(argv)


def main() -> None:
    """
    Main entry point for the application.

    This function simply delegates to the CLI class to start the application.
    It's kept separate to facilitate testing and to provide a clean entry point.
    """
    sys.exit(CLI.start())


if __name__ == "__main__":
    main()
