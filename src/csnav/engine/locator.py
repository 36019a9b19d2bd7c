"""Find declarations by name."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from tree_sitter import Node

from ..errors import InvalidQueryError, SymbolNotFoundError
from ..frontend import syntax
from ..frontend.parser import SyntaxTree
from ..frontend.symbols import Symbol
from ..models import SymbolLocation, SymbolSearchResult
from ..workspace.models import Project
from .base import WorkspaceQuery
from .matching import same_name

logger = logging.getLogger(__name__)

# Declaration node types that a locate() kind accepts
LOCATE_KINDS = {
    "method": ("method_declaration",),
    "property": ("property_declaration",),
    "class": ("class_declaration",),
    "type": tuple(sorted(syntax.MEMBERED_TYPE_DECLARATIONS)),
    "interface": ("interface_declaration",),
}

# find_symbol kinds in reporting order
SEARCH_KINDS = {
    "class": ("class_declaration",),
    "struct": ("struct_declaration",),
    "interface": ("interface_declaration",),
    "record": ("record_declaration", "record_struct_declaration"),
    "enum": ("enum_declaration",),
    "method": ("method_declaration",),
    "property": ("property_declaration",),
    "field": ("field_declaration",),
}


@dataclass(frozen=True)
class Located:
    """A resolved query target and where it is declared."""

    symbol: Symbol
    node: Node
    tree: SyntaxTree
    project: Project

    @property
    def name(self) -> str:
        return syntax.name_of(self.node) or self.symbol.name


class SymbolLocator(WorkspaceQuery):
    """Resolve a query name to the first matching declared symbol.

    Projects are scanned in workspace order, trees in document order and
    declarations in document order. For each tree the kinds are tried in
    the order given, so the first kind with a match in the earliest tree
    wins. Overloads and partial declarations collapse to the first one
    found.
    """

    def locate(
        self,
        name: str,
        containing_type: Optional[str] = None,
        kinds: Sequence[str] = ("method",),
    ) -> Optional[Located]:
        for bound in self.bound_trees():
            for kind in kinds:
                node = self._first_declaration(bound.tree, LOCATE_KINDS[kind], name, containing_type)
                if node is None:
                    continue
                symbol = bound.model.declared_symbol(node)
                if symbol is not None:
                    logger.debug("Located %s as %s in %s", name, kind, bound.tree.path)
                    return Located(symbol, node, bound.tree, bound.project)
        return None

    def require(
        self,
        query: str,
        name: str,
        containing_type: Optional[str] = None,
        kinds: Sequence[str] = ("method",),
        label: str = "Symbol",
    ) -> Located:
        """Like locate(), raising SymbolNotFoundError with the literal query on a miss."""
        located = self.locate(name, containing_type, kinds)
        if located is None:
            raise SymbolNotFoundError(f"{label} '{query}' not found in solution", query=query)
        return located

    @staticmethod
    def _first_declaration(
        tree: SyntaxTree, node_types: Iterable[str], name: str, containing_type: Optional[str]
    ) -> Optional[Node]:
        for node in syntax.descendants_of_type(tree.root, node_types):
            if not same_name(syntax.name_of(node), name):
                continue
            if containing_type is not None:
                owner = syntax.enclosing_type_declaration(node)
                if owner is None or not same_name(syntax.name_of(owner), containing_type):
                    continue
            return node
        return None

    def find_symbol(self, name: str, kind: Optional[str] = None) -> SymbolSearchResult:
        """Every declaration named ``name``, optionally restricted to one kind."""
        if kind is not None and kind.lower() not in SEARCH_KINDS and kind.lower() != "any":
            raise InvalidQueryError(
                f"Unknown symbol kind '{kind}'. Expected one of: {', '.join(SEARCH_KINDS)}", query=kind
            )
        wanted = [kind.lower()] if kind is not None and kind.lower() != "any" else list(SEARCH_KINDS)

        results: List[SymbolLocation] = []
        for document, tree in self.document_trees():
            file_path = self.relative(document.path)
            for search_kind in wanted:
                for node in syntax.descendants_of_type(tree.root, SEARCH_KINDS[search_kind]):
                    results.extend(self._locations(node, search_kind, name, file_path))

        return SymbolSearchResult(symbol_name=name, kind=kind or "any", results=results)

    @staticmethod
    def _locations(node: Node, kind: str, name: str, file_path: str) -> List[SymbolLocation]:
        namespace = syntax.namespace_of(node)
        if kind == "field":
            variables = syntax.variable_declaration(node)
            names = [syntax.declarator_name(d) for d in syntax.variable_declarators(variables)] if variables else []
        else:
            names = [syntax.name_of(node) or ""]

        locations = []
        for declared in names:
            if not same_name(declared, name):
                continue
            if kind in ("method", "property", "field"):
                owner = syntax.containing_class_name(node) or ""
                full_name = ".".join(part for part in (namespace, owner, declared) if part)
                line_range = syntax.line_range(node) if kind == "method" else [syntax.line_of(node)] * 2
            else:
                full_name = ".".join(part for part in (namespace, declared) if part)
                line_range = syntax.line_range(node)
            locations.append(
                SymbolLocation(file_path=file_path, line_range=line_range, namespace=namespace, full_name=full_name)
            )
        return locations
