"""
Language Server Protocol (LSP) implementation.

Provides client and server components for language navigation features
like go-to-definition, find references, symbols and call/type hierarchies.
"""

from src.lsp.client import LSPClient, create_lsp_client
from src.lsp.provider import CapabilityProvider, LSPRequestError
from src.lsp.server import LSPServer, create_lsp_server

__all__ = [
    'CapabilityProvider',
    'LSPClient',
    'LSPRequestError',
    'LSPServer',
    'create_lsp_client',
    'create_lsp_server',
]
