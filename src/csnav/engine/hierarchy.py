"""Type hierarchy: base chains, implemented interfaces, derived types and implementations."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..frontend import syntax
from ..frontend.symbols import Symbol
from ..models import DerivedTypeInfo, HierarchyResult, ImplementationInfo, ImplementationResult
from ..workspace.models import Workspace
from .base import BoundTree, WorkspaceQuery
from .locator import SymbolLocator
from .matching import symbols_match

logger = logging.getLogger(__name__)

# Per-tree scan order for derived types
DERIVABLE_DECLARATIONS = (
    ("class", ("class_declaration",)),
    ("record", ("record_declaration", "record_struct_declaration")),
)

# Per-tree scan order for implementations
IMPLEMENTING_DECLARATIONS = (
    ("class", ("class_declaration",)),
    ("struct", ("struct_declaration",)),
    ("record", ("record_declaration", "record_struct_declaration")),
)


def inherits_from(candidate: Optional[Symbol], base: Symbol) -> bool:
    """True when ``base`` appears in the candidate's base chain. A type never derives from itself."""
    if candidate is None or symbols_match(candidate, base):
        return False
    return any(symbols_match(ancestor, base) for ancestor in candidate.base_chain())


def implements(candidate: Optional[Symbol], interface: Symbol) -> bool:
    if candidate is None:
        return False
    return any(symbols_match(implemented, interface) for implemented in candidate.all_interfaces())


class HierarchyWalker(WorkspaceQuery):
    """Walks inheritance up from a class and searches the workspace for types below it."""

    def __init__(self, workspace: Workspace):
        super().__init__(workspace)
        self.locator = SymbolLocator(workspace)

    def get_hierarchy(self, class_name: str) -> HierarchyResult:
        located = self.locator.require(class_name, class_name, None, ["type"], label="Class")
        target = located.symbol

        base_types = []
        for base in target.base_chain():
            if base.kind == "special" and base.name == "object":
                break
            base_types.append(base.name)
        base_types.append("object")

        interfaces = list(dict.fromkeys(interface.name for interface in target.all_interfaces()))

        derived: List[DerivedTypeInfo] = []
        for bound in self.bound_trees():
            for kind, node_types in DERIVABLE_DECLARATIONS:
                for node in syntax.descendants_of_type(bound.tree.root, node_types):
                    if inherits_from(bound.model.declared_symbol(node), target):
                        derived.append(DerivedTypeInfo(**self._type_entry(bound, node, kind)))

        logger.debug("get_hierarchy %s: %d bases, %d derived", class_name, len(base_types), len(derived))
        return HierarchyResult(
            class_name=located.name,
            file_path=self.relative(located.tree.path),
            namespace=syntax.namespace_of(located.node),
            base_types=base_types,
            interfaces=interfaces,
            derived_types=derived,
        )

    def find_implementations(self, interface_name: str) -> ImplementationResult:
        """Classes, structs and records whose transitive interface set contains the located interface."""
        located = self.locator.require(interface_name, interface_name, None, ["interface"], label="Interface")
        implementations = self.implementations_of(located.symbol)
        return ImplementationResult(
            interface=interface_name, implementations=implementations, total_count=len(implementations)
        )

    def implementations_of(self, interface: Symbol) -> List[ImplementationInfo]:
        implementations = []
        for bound in self.bound_trees():
            for kind, node_types in IMPLEMENTING_DECLARATIONS:
                for node in syntax.descendants_of_type(bound.tree.root, node_types):
                    if implements(bound.model.declared_symbol(node), interface):
                        implementations.append(ImplementationInfo(**self._type_entry(bound, node, kind)))
        return implementations

    def _type_entry(self, bound: BoundTree, node, kind: str) -> dict:
        return {
            "name": syntax.name_of(node) or "",
            "kind": kind,
            "file_path": self.relative(bound.tree.path),
            "line": syntax.line_of(node),
            "namespace": syntax.namespace_of(node),
        }
