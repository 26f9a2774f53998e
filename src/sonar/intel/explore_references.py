"""
Reference exploration.

Resolves a free-text symbol name through workspace symbol search, then lists
every reference to it grouped by file. When the search returns several
matches the first one is used; there is no disambiguation between homonyms.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from src.lsp.models import LspLocation, LspPosition
from src.lsp.provider import CapabilityProvider
from src.sonar.exceptions import NotReadyError
from src.sonar.intel.formatting import display_path, format_position, symbol_kind_name

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100


@dataclass(frozen=True)
class ReferenceGroup:
    """References within one file, ascending by line."""
    file_path: str
    positions: List[LspPosition] = field(default_factory=list)


def group_references(
    references: Sequence[LspLocation], base: Optional[str] = None
) -> List[ReferenceGroup]:
    """Group references by displayed file path.

    Files are sorted lexicographically. Within a file references are sorted by
    line only; references on the same line keep the provider's order.
    """
    by_file: Dict[str, List[LspPosition]] = {}
    for ref in references:
        by_file.setdefault(display_path(ref.uri, base), []).append(ref.range.start)

    return [
        ReferenceGroup(file_path=path, positions=sorted(by_file[path], key=lambda p: p.line))
        for path in sorted(by_file)
    ]


def no_symbol_message(query: str) -> str:
    return (
        f'No symbol found matching "{query}".\n\n'
        "Suggestions:\n"
        "- Check the symbol name spelling\n"
        '- Try a partial name (e.g., "connect" instead of "Client::connect")\n'
        "- Ensure the file is indexed by the language server"
    )


def no_references_message(name: str) -> str:
    return (
        f'Found symbol "{name}" but no references found.\n\n'
        "This might mean:\n"
        "- The symbol is defined but never used\n"
        "- The language server hasn't finished indexing\n"
        "- The symbol is in a different compilation unit"
    )


class ReferenceExplorer:
    """
    Finds and presents all references to a symbol given by name.
    """

    def __init__(self, provider: CapabilityProvider, workspace: Optional[str] = None):
        self._provider = provider
        self._workspace = workspace

    def explore(self, query: str, max_results: int = DEFAULT_MAX_RESULTS) -> str:
        """Return the grouped reference report for the symbol matching ``query``.

        At most ``max_results`` reference lines are shown across all files.

        Raises:
            NotReadyError: If the provider cannot answer queries
            ValueError: If max_results is not positive
        """
        if max_results < 1:
            raise ValueError(f"max_results must be positive, got {max_results}")
        if not self._provider.is_ready():
            raise NotReadyError("Language client is not ready")

        symbols = self._provider.get_workspace_symbols(query)
        if not symbols:
            logger.info(f"No workspace symbol matches {query!r}")
            return no_symbol_message(query)

        symbol = symbols[0]
        if len(symbols) > 1:
            logger.debug(f"{len(symbols)} symbols match {query!r}; using {symbol.name}")

        declaration = symbol.location
        references = self._provider.get_references(declaration.uri, declaration.range.start, True)
        if not references:
            return no_references_message(symbol.name)

        kind = symbol_kind_name(symbol.kind)
        groups = group_references(references, self._workspace)

        lines = [
            f"# Reference Exploration: {symbol.name}",
            "",
            f"**Symbol Type:** {kind}",
            f"**Definition:** {display_path(declaration.uri, self._workspace)}:"
            f"{format_position(declaration.range.start)}",
            "",
            f"**Found {len(references)} reference(s):**",
        ]

        displayed = 0
        for group in groups:
            if displayed >= max_results:
                break
            count = len(group.positions)
            lines.append("")
            lines.append(f"**{group.file_path}** ({count} reference{'s' if count > 1 else ''}):")
            for position in group.positions:
                if displayed >= max_results:
                    break
                lines.append(f"  Line {format_position(position)}")
                displayed += 1

        if displayed < len(references):
            lines.append("")
            lines.append(
                f"... and {len(references) - displayed} more references "
                "(use maxResults parameter to show more)"
            )

        lines.extend([
            "",
            "## Summary",
            f"- Total references: {len(references)}",
            f"- Files with references: {len(groups)}",
            f"- Symbol: {symbol.name} ({kind})",
        ])

        logger.info(
            f"Explored references of {symbol.name}: {len(references)} in {len(groups)} file(s), "
            f"{displayed} shown"
        )
        return "\n".join(lines)
