"""Cross-reference scanning: usages, callers and instantiations."""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from tree_sitter import Node

from ..frontend import syntax
from ..frontend.symbols import Symbol
from ..models import (
    CallerInfo,
    CallersResult,
    InstantiationInfo,
    InstantiationResult,
    UsageInfo,
    UsageResult,
)
from ..workspace.models import Workspace
from .base import BoundTree, WorkspaceQuery
from .locator import SymbolLocator
from .matching import contains_ignore_case, split_member_query, symbols_match

logger = logging.getLogger(__name__)

TOP_LEVEL = "(top-level)"
GLOBAL = "(global)"

# Declarations whose body can contain a call to the method being declared
_CALLER_DECLARATIONS = ("method_declaration", "constructor_declaration", "property_declaration")

_CREATIONS = ("object_creation_expression", "implicit_object_creation_expression")


class ReferenceScanner(WorkspaceQuery):
    """Finds where a located symbol is referenced.

    Each tree is first checked for the target's simple name in its raw
    text. Trees that fail the check cannot contain a reference and are not
    bound. Set ``prefilter=False`` to bind every tree.
    """

    def __init__(self, workspace: Workspace, prefilter: bool = True):
        super().__init__(workspace)
        self.prefilter = prefilter
        self.locator = SymbolLocator(workspace)

    def _skip(self, bound: BoundTree, name: str) -> bool:
        return self.prefilter and not bound.tree.contains_text(name)

    # Usages

    def find_usages(self, query: str, pattern: Optional[str] = None) -> UsageResult:
        """Identifier references to a method, property or class.

        ``Type.Member`` restricts the lookup to members of that type; a
        bare name also considers classes. For a type target, object
        creations are reported too unless an identifier on the same line
        was already recorded. ``pattern`` keeps only usages whose source
        line contains it.
        """
        name, containing = split_member_query(query)
        kinds = ["method", "property"] + (["class"] if containing is None else [])
        target = self.locator.require(query, name, containing, kinds).symbol

        usages: List[UsageInfo] = []
        seen: Set[Tuple[str, int]] = set()
        for bound in self.bound_trees():
            if self._skip(bound, name):
                continue
            file_path = self.relative(bound.tree.path)

            for node in syntax.descendants_of_type(bound.tree.root, "identifier"):
                if syntax.text(node).lower() != name.lower() or syntax.is_declaration_name(node):
                    continue
                if symbols_match(target, bound.model.symbol_info(node).first()):
                    usages.append(self._usage(bound, node, file_path))
                    seen.add((file_path, syntax.line_of(node)))

            if target.is_type:
                for creation in syntax.descendants_of_type(bound.tree.root, "object_creation_expression"):
                    type_text = syntax.normalized_text(creation.child_by_field_name("type"))
                    if not contains_ignore_case(type_text, name):
                        continue
                    if not symbols_match(target, bound.model.type_info(creation)):
                        continue
                    key = (file_path, syntax.line_of(creation))
                    if key in seen:
                        continue
                    usages.append(self._usage(bound, creation, file_path))
                    seen.add(key)

        if pattern:
            usages = [usage for usage in usages if contains_ignore_case(usage.context_code, pattern)]
        logger.debug("find_usages %s: %d usages", query, len(usages))
        return UsageResult(symbol_name=query, total_usages=len(usages), usages=usages)

    @staticmethod
    def _usage(bound: BoundTree, node: Node, file_path: str) -> UsageInfo:
        return UsageInfo(
            file_path=file_path,
            line=syntax.line_of(node),
            column=syntax.column_of(bound.tree, node),
            context_code=syntax.context_line(bound.tree, node),
            method_context=syntax.containing_member_name(node) or TOP_LEVEL,
        )

    # Callers

    def find_callers(self, query: str) -> CallersResult:
        """Invocations that bind to the located method."""
        name, containing = split_member_query(query)
        target = self.locator.require(query, name, containing, ["method"], label="Method").symbol

        callers: List[CallerInfo] = []
        for bound in self.bound_trees():
            if self._skip(bound, name):
                continue
            file_path = self.relative(bound.tree.path)
            for invocation in syntax.descendants_of_type(bound.tree.root, "invocation_expression"):
                invoked = bound.model.symbol_info(invocation).first()
                if invoked is None or invoked.kind != "method" or not symbols_match(target, invoked):
                    continue
                if self._is_self_reference(bound, invocation, target):
                    continue
                callers.append(
                    CallerInfo(
                        caller_class=syntax.containing_class_name(invocation) or GLOBAL,
                        caller_method=syntax.containing_member_name(invocation) or TOP_LEVEL,
                        file_path=file_path,
                        line=syntax.line_of(invocation),
                        context_code=syntax.context_line(bound.tree, invocation),
                    )
                )

        logger.debug("find_callers %s: %d callers", query, len(callers))
        return CallersResult(symbol=query, callers=callers, total_count=len(callers))

    @staticmethod
    def _is_self_reference(bound: BoundTree, invocation: Node, target: Symbol) -> bool:
        """An invocation inside the target's own declaration and not nested in another call."""
        declaration = syntax.enclosing(invocation, _CALLER_DECLARATIONS)
        if declaration is None:
            return False
        if not symbols_match(target, bound.model.declared_symbol(declaration)):
            return False
        current = invocation.parent
        while current is not None and not syntax.same_node(current, declaration):
            if current.type == "invocation_expression":
                return False
            current = current.parent
        return True

    # Instantiations

    def find_instantiations(self, class_name: str) -> InstantiationResult:
        """``new T(...)`` and target-typed ``new(...)`` expressions creating the located type."""
        target = self.locator.require(class_name, class_name, None, ["type"], label="Class").symbol

        instantiations: List[InstantiationInfo] = []
        for bound in self.bound_trees():
            if self._skip(bound, class_name):
                continue
            file_path = self.relative(bound.tree.path)
            for creation_type in _CREATIONS:
                for creation in syntax.descendants_of_type(bound.tree.root, creation_type):
                    if not symbols_match(target, bound.model.type_info(creation)):
                        continue
                    instantiations.append(
                        InstantiationInfo(
                            file_path=file_path,
                            line=syntax.line_of(creation),
                            containing_method=syntax.containing_member_name(creation) or TOP_LEVEL,
                            containing_class=syntax.containing_class_name(creation) or GLOBAL,
                            context_code=syntax.context_line(bound.tree, creation),
                        )
                    )

        logger.debug("find_instantiations %s: %d sites", class_name, len(instantiations))
        return InstantiationResult(
            class_name=class_name, instantiations=instantiations, total_count=len(instantiations)
        )
