"""Dependency surface: constructor parameters, injected members and interface consumers."""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from ..errors import SymbolNotFoundError
from ..frontend import syntax
from ..frontend.binder import SemanticModel
from ..frontend.symbols import Symbol
from ..models import (
    ConstructorDepsResult,
    ConstructorInfo,
    ConstructorParameterInfo,
    InjectionInfo,
    InterfaceConsumersResult,
    MemberDependencyInfo,
)
from ..workspace.models import Workspace
from .base import BoundTree, WorkspaceQuery
from .hierarchy import HierarchyWalker
from .locator import SymbolLocator
from .matching import same_name, symbols_match

logger = logging.getLogger(__name__)

# Kinds of bound types that can stand for an injected service
_NAMED_TYPE_KINDS = frozenset({"class", "struct", "interface", "record", "enum", "delegate", "error"})


def full_type_name(model: SemanticModel, type_node: Optional[Node]) -> str:
    """Fully qualified name of a written type, falling back to the text as written."""
    if type_node is None:
        return "var"
    bound = model.type_info(type_node)
    if bound is None:
        return syntax.normalized_text(type_node)
    return bound.fully_qualified_name().replace("global::", "")


def _declared_type(model: SemanticModel, declaration: Node) -> Optional[Symbol]:
    type_node = declaration.child_by_field_name("type")
    return model.type_info(type_node) if type_node is not None else None


def matches_interface(bound: Optional[Symbol], interface: Symbol) -> bool:
    """Direct match, or one of a generic type's own type arguments matches."""
    if bound is None:
        return False
    if bound.kind == "nullable" and bound.element_type is not None:
        bound = bound.element_type
    if bound.kind not in _NAMED_TYPE_KINDS:
        return False
    if symbols_match(bound, interface):
        return True
    return any(symbols_match(argument, interface) for argument in bound.type_arguments)


class DependencyAnalyzer(WorkspaceQuery):
    """Reports what a class depends on and who depends on an interface."""

    def __init__(self, workspace: Workspace):
        super().__init__(workspace)
        self.locator = SymbolLocator(workspace)
        self.hierarchy = HierarchyWalker(workspace)

    def constructor_deps(self, class_name: str) -> ConstructorDepsResult:
        """Constructors of the first matching type with their parameter types.

        Documents are searched in workspace order. A type with no explicit
        constructor is only reported when it is a class; for other types the
        search moves on to the next document.
        """
        for document, bound in self.bound_documents():
            node = next(
                (
                    candidate
                    for candidate in syntax.descendants_of_type(bound.tree.root, syntax.MEMBERED_TYPE_DECLARATIONS)
                    if same_name(syntax.name_of(candidate), class_name)
                ),
                None,
            )
            if node is None:
                continue

            constructors = self._constructors(bound.model, node)
            if constructors or node.type == "class_declaration":
                return ConstructorDepsResult(
                    class_name=syntax.name_of(node) or class_name,
                    file_path=self.relative(document.path),
                    namespace=syntax.namespace_of(node),
                    constructors=constructors,
                    members=self._members(bound.model, node),
                )

        raise SymbolNotFoundError(f"Class '{class_name}' not found in solution", query=class_name)

    def _constructors(self, model: SemanticModel, type_node: Node) -> List[ConstructorInfo]:
        constructors = []
        if syntax.first_child_of_type(type_node, "parameter_list") is not None:
            mods = syntax.modifiers(type_node)
            constructors.append(
                ConstructorInfo(
                    parameters=self._parameters(model, type_node),
                    line_range=syntax.line_range(type_node),
                    signature=(
                        f"{syntax.accessibility(mods)} {syntax.name_of(type_node)}"
                        f"{syntax.parameter_list_text(type_node)}"
                    ),
                )
            )
        for member in syntax.member_declarations(type_node):
            if member.type != "constructor_declaration":
                continue
            constructors.append(
                ConstructorInfo(
                    parameters=self._parameters(model, member),
                    line_range=syntax.line_range(member),
                    signature=syntax.constructor_signature(member),
                )
            )
        return constructors

    @staticmethod
    def _parameters(model: SemanticModel, declaration: Node) -> List[ConstructorParameterInfo]:
        return [
            ConstructorParameterInfo(
                name=syntax.name_of(parameter) or "",
                type=syntax.parameter_type_text(parameter),
                full_type_name=full_type_name(model, parameter.child_by_field_name("type")),
            )
            for parameter in syntax.parameter_nodes(declaration)
        ]

    @staticmethod
    def _members(model: SemanticModel, type_node: Node) -> List[MemberDependencyInfo]:
        members = []
        for member in syntax.member_declarations(type_node):
            if member.type == "field_declaration":
                variables = syntax.variable_declaration(member)
                if variables is None:
                    continue
                written = variables.child_by_field_name("type")
                for declarator in syntax.variable_declarators(variables):
                    members.append(
                        MemberDependencyInfo(
                            kind="field",
                            name=syntax.declarator_name(declarator),
                            type=syntax.normalized_text(written),
                            full_type_name=full_type_name(model, written),
                            line=syntax.line_of(member),
                        )
                    )
            elif member.type == "property_declaration":
                written = member.child_by_field_name("type")
                members.append(
                    MemberDependencyInfo(
                        kind="property",
                        name=syntax.name_of(member) or "",
                        type=syntax.normalized_text(written),
                        full_type_name=full_type_name(model, written),
                        line=syntax.line_of(member),
                    )
                )
        return members

    def interface_consumers(self, interface_name: str) -> InterfaceConsumersResult:
        """Implementations of an interface plus every constructor parameter, field and property typed by it."""
        located = self.locator.require(interface_name, interface_name, None, ["interface"], label="Interface")
        interface = located.symbol

        injections: List[InjectionInfo] = []
        for bound in self.bound_trees():
            injections.extend(self._injections(bound, interface))

        return InterfaceConsumersResult(
            interface=interface_name,
            defined_in=self.relative(located.tree.path),
            definition_line=syntax.line_of(located.node),
            implementations=self.hierarchy.implementations_of(interface),
            injections=injections,
        )

    def _injections(self, bound: BoundTree, interface: Symbol) -> List[InjectionInfo]:
        file_path = self.relative(bound.tree.path)
        root = bound.tree.root
        model = bound.model
        found: List[InjectionInfo] = []

        def _add(class_name: str, member_name: str, member_type: str, node: Node) -> None:
            found.append(
                InjectionInfo(
                    class_name=class_name,
                    member_name=member_name,
                    member_type=member_type,
                    file_path=file_path,
                    line=syntax.line_of(node),
                )
            )

        # Primary constructors count as constructors
        for owner in syntax.descendants_of_type(root, ("class_declaration", "struct_declaration")):
            if syntax.first_child_of_type(owner, "parameter_list") is None:
                continue
            for parameter in syntax.parameter_nodes(owner):
                if matches_interface(_declared_type(model, parameter), interface):
                    _add(syntax.name_of(owner) or "", syntax.name_of(parameter) or "", "constructor-parameter", parameter)

        for ctor in syntax.descendants_of_type(root, "constructor_declaration"):
            class_name = syntax.containing_class_name(ctor)
            if class_name is None:
                continue
            for parameter in syntax.parameter_nodes(ctor):
                if matches_interface(_declared_type(model, parameter), interface):
                    _add(class_name, syntax.name_of(parameter) or "", "constructor-parameter", parameter)

        for field in syntax.descendants_of_type(root, "field_declaration"):
            class_name = syntax.containing_class_name(field)
            variables = syntax.variable_declaration(field)
            if class_name is None or variables is None:
                continue
            if matches_interface(_declared_type(model, variables), interface):
                for declarator in syntax.variable_declarators(variables):
                    _add(class_name, syntax.declarator_name(declarator), "field", field)

        for prop in syntax.descendants_of_type(root, "property_declaration"):
            class_name = syntax.containing_class_name(prop)
            if class_name is None:
                continue
            if matches_interface(_declared_type(model, prop), interface):
                _add(class_name, syntax.name_of(prop) or "", "property", prop)

        return found
