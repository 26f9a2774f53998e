"""
Symbol exploration.

Builds a single composite report for one position in a document by querying
the capability provider for every facet it can answer: document context,
hover, definition/type definition/declaration, references, implementations,
call hierarchy and type hierarchy. Facets are queried one after another in
report order; each one is fault-isolated, so a failing or empty query only
leaves its own block out of the report.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from src.lsp.models import LspPosition, LspLocation
from src.lsp.provider import CapabilityProvider
from src.sonar.exceptions import NotReadyError
from src.sonar.intel.formatting import (
    display_path, format_hierarchy_item, format_locations, format_position, numbered,
)
from src.sonar.intel.isolation import isolated_query
from src.sonar.intel.symbol_tree import find_enclosing_symbol, format_context

# Configure logging
logger = logging.getLogger(__name__)

# Display limits
MAX_REFERENCES = 10
MAX_CALLS = 5
MAX_SUBTYPES = 5

NO_DATA_MESSAGE = """\
⚠️ **No symbol information available at this position.**

This can happen when:
- The cursor is positioned on whitespace, comments, or an empty line
- The language server hasn't finished indexing the file
- The language server doesn't support this file type
- The position is outside of any symbol definition

**Suggestions:**
- Try positioning the cursor on a function name, variable, or class
- Ensure the language server is running and has indexed the file
- Check that the file parses without errors"""

CALL_HIERARCHY_UNAVAILABLE = (
    "⚠️ **Call hierarchy not available** - The language server prepared the call "
    "hierarchy but returned no incoming or outgoing calls."
)

CALL_HIERARCHY_TIP = (
    "💡 **Tip:** See the USAGE section above for references to this symbol, "
    "which may indicate potential callers."
)

CANCELLED_MESSAGE = "_Exploration cancelled; remaining sections were skipped._"


@dataclass
class ReportSection:
    """A titled group of blocks in an exploration report.

    ``has_data`` is only set by blocks carrying provider results, not by
    notices, so a section holding only a notice does not count as data.
    """
    title: str
    blocks: List[str] = field(default_factory=list)
    has_data: bool = False

    def add(self, block: str, data: bool = True) -> None:
        self.blocks.append(block)
        self.has_data = self.has_data or data

    @property
    def populated(self) -> bool:
        return bool(self.blocks)

    def render(self) -> str:
        return "\n\n".join([f"## {self.title}"] + self.blocks)


@dataclass
class SymbolReport:
    """Sections of one exploration, in presentation order."""
    location: str
    sections: List[ReportSection] = field(default_factory=list)
    cancelled: bool = False

    def section(self, title: str) -> ReportSection:
        section = ReportSection(title)
        self.sections.append(section)
        return section

    @property
    def has_any_data(self) -> bool:
        return any(section.has_data for section in self.sections)

    def render(self) -> str:
        parts = ["# Symbol Exploration Results", f"**Location:** {self.location}"]

        if not self.has_any_data and not self.cancelled:
            parts.append(NO_DATA_MESSAGE)
            # Without data every remaining block is a notice
            parts.extend(block for section in self.sections for block in section.blocks)
            return "\n\n".join(parts)

        parts.extend(section.render() for section in self.sections if section.populated)
        if self.cancelled:
            parts.append(CANCELLED_MESSAGE)
        return "\n\n".join(parts)


class _Cancelled(Exception):
    """Raised internally to stop collecting sections."""


class SymbolExplorer:
    """
    Aggregates every available facet of the symbol at a position.

    The provider is injected at construction; ``workspace`` is the base used to
    shorten displayed paths.
    """

    def __init__(self, provider: CapabilityProvider, workspace: Optional[str] = None):
        self._provider = provider
        self._workspace = workspace

    def explore(
        self,
        uri: str,
        position: LspPosition,
        include_call_hierarchy: bool = True,
        include_type_hierarchy: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Return the composite report for ``position`` in ``uri``.

        Raises:
            NotReadyError: If the provider cannot answer queries
        """
        if not self._provider.is_ready():
            raise NotReadyError("Language client is not ready")

        report = SymbolReport(
            location=f"{display_path(uri, self._workspace)}:{format_position(position)}"
        )

        def checkpoint() -> None:
            if cancel_event is not None and cancel_event.is_set():
                raise _Cancelled()

        try:
            checkpoint()
            self._collect_symbol_information(report.section("SYMBOL INFORMATION"), uri, position, checkpoint)
            checkpoint()
            self._collect_locations(report.section("LOCATIONS"), uri, position, checkpoint)
            checkpoint()
            usage = report.section("USAGE")
            references = self._collect_references(usage, uri, position)
            checkpoint()
            self._collect_implementations(usage, uri, position)
            if include_call_hierarchy:
                checkpoint()
                self._collect_call_hierarchy(
                    report.section("CALL HIERARCHY"), uri, position, bool(references)
                )
            if include_type_hierarchy:
                checkpoint()
                self._collect_type_hierarchy(report.section("TYPE HIERARCHY"), uri, position)
        except _Cancelled:
            logger.info(f"Symbol exploration of {report.location} cancelled")
            report.cancelled = True

        logger.info(
            f"Explored {report.location}: "
            f"{sum(1 for s in report.sections if s.has_data)} section(s) with data"
        )
        return report.render()

    def _collect_symbol_information(self, section: ReportSection, uri, position, checkpoint) -> None:
        symbols = isolated_query("document symbols", self._provider.get_document_symbols, uri)
        if symbols:
            symbol = find_enclosing_symbol(symbols, position)
            if symbol is not None:
                section.add(f"**Document Context:**\n{format_context(symbol, symbols)}")

        checkpoint()
        hover = isolated_query("hover", self._provider.get_hover, uri, position)
        if hover is not None and hover.contents:
            section.add(f"**Hover Info:**\n{hover.contents}")

    def _collect_locations(self, section: ReportSection, uri, position, checkpoint) -> None:
        queries = [
            ("Definition", "definition", self._provider.get_definition),
            ("Type Definition", "type definition", self._provider.get_type_definition),
            ("Declaration", "declaration", self._provider.get_declaration),
        ]
        for index, (label, facet, query) in enumerate(queries):
            if index:
                checkpoint()
            locations = isolated_query(facet, query, uri, position)
            if locations:
                section.add(f"**{label}:**\n{format_locations(locations, self._workspace)}")

    def _collect_references(self, section: ReportSection, uri, position) -> List[LspLocation]:
        references = isolated_query(
            "references", self._provider.get_references, uri, position, True
        ) or []
        if references:
            section.add(
                f"**References:** {len(references)} locations found\n"
                f"{format_locations(references, self._workspace, limit=MAX_REFERENCES)}"
            )
        return references

    def _collect_implementations(self, section: ReportSection, uri, position) -> None:
        implementations = isolated_query(
            "implementations", self._provider.get_implementation, uri, position
        )
        if implementations:
            section.add(
                f"**Implementations:** {len(implementations)} found\n"
                f"{format_locations(implementations, self._workspace)}"
            )

    def _collect_call_hierarchy(
        self, section: ReportSection, uri, position, has_references: bool
    ) -> None:
        items = isolated_query("call hierarchy", self._provider.prepare_call_hierarchy, uri, position)
        if not items:
            return
        item = items[0]

        incoming = isolated_query(
            "incoming calls", self._provider.get_call_hierarchy_incoming_calls, item
        )
        if incoming:
            entries = [format_hierarchy_item(call.from_item, self._workspace) for call in incoming]
            section.add(
                "\n".join([f"**Incoming Calls ({len(incoming)}):**"] + numbered(entries, MAX_CALLS))
            )

        outgoing = isolated_query(
            "outgoing calls", self._provider.get_call_hierarchy_outgoing_calls, item
        )
        if outgoing:
            entries = [format_hierarchy_item(call.to, self._workspace) for call in outgoing]
            section.add(
                "\n".join([f"**Outgoing Calls ({len(outgoing)}):**"] + numbered(entries, MAX_CALLS))
            )

        if not incoming and not outgoing:
            section.add(CALL_HIERARCHY_UNAVAILABLE, data=False)
            if has_references:
                section.add(CALL_HIERARCHY_TIP, data=False)

    def _collect_type_hierarchy(self, section: ReportSection, uri, position) -> None:
        items = isolated_query("type hierarchy", self._provider.prepare_type_hierarchy, uri, position)
        if not items:
            return
        item = items[0]

        supertypes = isolated_query(
            "supertypes", self._provider.get_type_hierarchy_supertypes, item
        )
        if supertypes:
            entries = [format_hierarchy_item(t, self._workspace, with_kind=True) for t in supertypes]
            section.add("\n".join([f"**Supertypes ({len(supertypes)}):**"] + numbered(entries)))

        subtypes = isolated_query(
            "subtypes", self._provider.get_type_hierarchy_subtypes, item
        )
        if subtypes:
            entries = [format_hierarchy_item(t, self._workspace, with_kind=True) for t in subtypes]
            section.add(
                "\n".join([f"**Subtypes ({len(subtypes)}):**"] + numbered(entries, MAX_SUBTYPES))
            )
