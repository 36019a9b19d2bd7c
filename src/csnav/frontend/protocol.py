"""Protocol definitions for the compiler frontend.

The engine only talks to these seams:
- a Compilation owns a project's syntax trees and hands out semantic models
- a SemanticBinder maps declaration nodes to declared symbols and
  reference nodes to resolved (or candidate) symbols and types

CSharpCompilation / SemanticModel in ``binder.py`` are the tree-sitter
implementation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node
    from .parser import SyntaxTree
    from .symbols import Symbol


@dataclass(frozen=True)
class SymbolInfo:
    """Result of binding a reference: a resolved symbol or a set of candidates."""

    symbol: Symbol | None = None
    candidates: tuple[Symbol, ...] = field(default_factory=tuple)

    def first(self) -> Symbol | None:
        """The resolved symbol, else the first candidate."""
        if self.symbol is not None:
            return self.symbol
        return self.candidates[0] if self.candidates else None


@runtime_checkable
class SemanticBinder(Protocol):
    """Per-tree semantic queries."""

    def declared_symbol(self, node: Node) -> Symbol | None:
        """Symbol declared by a declaration node, or None."""
        ...

    def symbol_info(self, node: Node) -> SymbolInfo:
        """Resolved or candidate symbols for a reference node."""
        ...

    def type_info(self, node: Node) -> Symbol | None:
        """Type of an expression or type-syntax node, or None when unknown."""
        ...


@runtime_checkable
class Compilation(Protocol):
    """A project's trees plus a binder factory."""

    @property
    def syntax_trees(self) -> list[SyntaxTree]:
        ...

    def semantic_model(self, tree: SyntaxTree) -> SemanticBinder:
        """Binder for one of this compilation's trees.

        Raises:
            KeyError: If the tree does not belong to this compilation.
        """
        ...
