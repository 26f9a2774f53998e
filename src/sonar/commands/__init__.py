"""
Commands exposed through the shell.
"""

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

__all__ = [
    "CallHierarchyIncomingCommand",
    "CallHierarchyOutgoingCommand",
    "Command",
    "DeclarationCommand",
    "DefinitionCommand",
    "DocumentSymbolsCommand",
    "ExploreReferencesCommand",
    "ExploreSymbolCommand",
    "HoverCommand",
    "ImplementationCommand",
    "PrepareCallHierarchyCommand",
    "PrepareTypeHierarchyCommand",
    "ReferencesCommand",
    "TypeDefinitionCommand",
    "TypeHierarchySubtypesCommand",
    "TypeHierarchySupertypesCommand",
    "WorkspaceSymbolsCommand",
]
