"""Cross-reference resolution engine."""

from .attributes import AttributeMatcher
from .dependencies import DependencyAnalyzer
from .hierarchy import HierarchyWalker
from .locator import SymbolLocator
from .matching import symbols_match
from .references import ReferenceScanner
from .structure import StructureInspector

__all__ = [
    "AttributeMatcher",
    "DependencyAnalyzer",
    "HierarchyWalker",
    "ReferenceScanner",
    "StructureInspector",
    "SymbolLocator",
    "symbols_match",
]
