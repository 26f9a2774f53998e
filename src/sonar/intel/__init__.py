"""
Exploration orchestrators and their helpers.
"""

from src.sonar.intel.explore_references import ReferenceExplorer
from src.sonar.intel.explore_symbol import SymbolExplorer

__all__ = [
    'ReferenceExplorer',
    'SymbolExplorer',
]
