"""
Capability provider interface.

Defines the atomic code-intelligence queries consumed by the exploration
orchestrators. Implementations return empty lists (or None for hover) when a
query has no result, and raise only for genuine failures such as timeouts,
transport errors or a server-side error response.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.lsp.models import (
    LspPosition, LspLocation, LspHover, LspSymbol, LspSymbolInformation,
    LspHierarchyItem, LspIncomingCall, LspOutgoingCall,
)


class LSPRequestError(Exception):
    """A provider request failed, timed out or returned an error response."""
    pass


class CapabilityProvider(ABC):
    """
    Abstract source of code-intelligence queries.

    Subclasses must implement every query below. ``is_ready`` is checked by
    callers before issuing queries.
    """

    @abstractmethod
    def is_ready(self) -> bool:
        """Returns True once the provider can answer queries."""
        pass

    @abstractmethod
    def get_hover(self, uri: str, position: LspPosition) -> Optional[LspHover]:
        pass

    @abstractmethod
    def get_definition(self, uri: str, position: LspPosition) -> List[LspLocation]:
        pass

    @abstractmethod
    def get_type_definition(self, uri: str, position: LspPosition) -> List[LspLocation]:
        pass

    @abstractmethod
    def get_declaration(self, uri: str, position: LspPosition) -> List[LspLocation]:
        pass

    @abstractmethod
    def get_implementation(self, uri: str, position: LspPosition) -> List[LspLocation]:
        pass

    @abstractmethod
    def get_references(
        self, uri: str, position: LspPosition, include_declaration: bool = True
    ) -> List[LspLocation]:
        pass

    @abstractmethod
    def get_document_symbols(self, uri: str) -> List[LspSymbol]:
        """Returns the symbol outline of a document as a forest."""
        pass

    @abstractmethod
    def get_workspace_symbols(self, query: str) -> List[LspSymbolInformation]:
        pass

    @abstractmethod
    def prepare_call_hierarchy(self, uri: str, position: LspPosition) -> List[LspHierarchyItem]:
        pass

    @abstractmethod
    def get_call_hierarchy_incoming_calls(self, item: LspHierarchyItem) -> List[LspIncomingCall]:
        pass

    @abstractmethod
    def get_call_hierarchy_outgoing_calls(self, item: LspHierarchyItem) -> List[LspOutgoingCall]:
        pass

    @abstractmethod
    def prepare_type_hierarchy(self, uri: str, position: LspPosition) -> List[LspHierarchyItem]:
        pass

    @abstractmethod
    def get_type_hierarchy_supertypes(self, item: LspHierarchyItem) -> List[LspHierarchyItem]:
        pass

    @abstractmethod
    def get_type_hierarchy_subtypes(self, item: LspHierarchyItem) -> List[LspHierarchyItem]:
        pass
