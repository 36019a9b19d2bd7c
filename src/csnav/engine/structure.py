"""Structural queries over declarations: members, methods, namespaces, overridability."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from tree_sitter import Node

from ..errors import SymbolNotFoundError
from ..frontend import syntax
from ..frontend.parser import SyntaxTree
from ..models import (
    ClassInfo,
    ClassListResult,
    ClassStructure,
    MemberInfo,
    MethodInfo,
    MethodResult,
    MethodsResult,
    NamespaceInfo,
    NamespaceStructureResult,
    OverridableResult,
    ParameterInfo,
)
from ..workspace.loader import find_project_by_name, resolve_document_path
from ..workspace.models import Document
from .base import WorkspaceQuery
from .matching import same_name

logger = logging.getLogger(__name__)

GLOBAL_NAMESPACE = "(global)"


def name_sort_key(name: str) -> tuple:
    return (name.lower(), name)


def parameters_of(declaration: Node) -> List[ParameterInfo]:
    return [
        ParameterInfo(name=syntax.name_of(parameter) or "", type=syntax.parameter_type_text(parameter))
        for parameter in syntax.parameter_nodes(declaration)
    ]


def first_type_named(tree: SyntaxTree, name: str) -> Optional[Node]:
    """First type declaration with members named ``name``, in document order."""
    for node in syntax.descendants_of_type(tree.root, syntax.MEMBERED_TYPE_DECLARATIONS):
        if same_name(syntax.name_of(node), name):
            return node
    return None


def methods_named(type_node: Node, name: str) -> List[Node]:
    return [
        member
        for member in syntax.member_declarations(type_node)
        if member.type == "method_declaration" and same_name(syntax.name_of(member), name)
    ]


class StructureInspector(WorkspaceQuery):
    """Member listings, method source and namespace layout."""

    def list_class(self, file_path: str, class_name: str) -> ClassStructure:
        """Members of a type declared in one file: fields, properties, constructors, then methods."""
        document = self._require_document(file_path)
        tree = document.syntax_tree
        type_node = first_type_named(tree, class_name) if tree is not None else None
        if type_node is None:
            raise SymbolNotFoundError(f"Class '{class_name}' not found in file {file_path}", query=class_name)

        members = syntax.member_declarations(type_node)
        listed: List[MemberInfo] = []
        for member in members:
            if member.type == "field_declaration":
                listed.extend(self._fields(member))
        for member in members:
            if member.type == "property_declaration":
                listed.append(self._property(member))
        for member in members:
            if member.type == "constructor_declaration":
                mods = syntax.modifiers(member)
                listed.append(
                    MemberInfo(
                        kind="constructor",
                        name=syntax.name_of(member) or "",
                        line_range=syntax.line_range(member),
                        signature=syntax.constructor_signature(member),
                        accessibility=syntax.accessibility(mods),
                        is_static="static" in mods,
                        parameters=parameters_of(member),
                    )
                )
        for member in members:
            if member.type == "method_declaration":
                mods = syntax.modifiers(member)
                listed.append(
                    MemberInfo(
                        kind="method",
                        name=syntax.name_of(member) or "",
                        line_range=syntax.line_range(member),
                        signature=syntax.method_signature(member),
                        accessibility=syntax.accessibility(mods),
                        is_async="async" in mods,
                        is_static="static" in mods,
                        return_type=syntax.normalized_text(syntax.declaration_type(member)),
                        parameters=parameters_of(member),
                    )
                )

        return ClassStructure(
            class_name=syntax.name_of(type_node) or class_name,
            namespace=syntax.namespace_of(type_node),
            line_range=syntax.line_range(type_node),
            file_path=self.relative(document.path),
            members=listed,
        )

    @staticmethod
    def _fields(field: Node) -> List[MemberInfo]:
        variables = syntax.variable_declaration(field)
        if variables is None:
            return []
        mods = syntax.modifiers(field)
        field_type = syntax.normalized_text(variables.child_by_field_name("type"))
        return [
            MemberInfo(
                kind="field",
                name=syntax.declarator_name(declarator),
                type=field_type,
                line=syntax.line_of(field),
                accessibility=syntax.accessibility(mods),
                is_readonly="readonly" in mods,
                is_static="static" in mods,
            )
            for declarator in syntax.variable_declarators(variables)
        ]

    @staticmethod
    def _property(prop: Node) -> MemberInfo:
        mods = syntax.modifiers(prop)
        accessors = syntax.accessor_kinds(prop)
        has_accessor_list = prop.child_by_field_name("accessors") is not None or (
            syntax.first_child_of_type(prop, "accessor_list") is not None
        )
        if has_accessor_list:
            has_getter = "get" in accessors
        else:
            has_getter = syntax.has_expression_body(prop)
        return MemberInfo(
            kind="property",
            name=syntax.name_of(prop) or "",
            type=syntax.normalized_text(prop.child_by_field_name("type")),
            line=syntax.line_of(prop),
            accessibility=syntax.accessibility(mods),
            has_getter=has_getter,
            has_setter=bool(accessors & {"set", "init"}),
            is_static="static" in mods,
        )

    def get_method(
        self, method_name: str, class_name: Optional[str] = None, file_path: Optional[str] = None
    ) -> MethodResult:
        """First method named ``method_name``, optionally inside ``class_name`` and ``file_path``."""
        if file_path:
            document = self._require_document(file_path)
            result = self._method_in(document, method_name, class_name)
            if result is None:
                raise SymbolNotFoundError(
                    f"Method '{method_name}' not found in file {file_path}", query=method_name
                )
            return result

        for _, document in self.workspace.documents():
            result = self._method_in(document, method_name, class_name)
            if result is not None:
                return result
        raise SymbolNotFoundError(f"Method '{method_name}' not found in solution", query=method_name)

    def _method_in(self, document: Document, method_name: str, class_name: Optional[str]) -> Optional[MethodResult]:
        tree = document.syntax_tree
        if tree is None:
            return None
        for method in syntax.descendants_of_type(tree.root, "method_declaration"):
            if not same_name(syntax.name_of(method), method_name):
                continue
            containing = syntax.containing_class_name(method)
            if class_name and not same_name(containing, class_name):
                continue
            mods = syntax.modifiers(method)
            return MethodResult(
                method_name=syntax.name_of(method) or "",
                class_name=containing or "",
                line_range=syntax.line_range(method),
                file_path=self.relative(document.path),
                signature=syntax.method_signature(method),
                accessibility=syntax.accessibility(mods),
                is_async="async" in mods,
                return_type=syntax.normalized_text(syntax.declaration_type(method)),
                parameters=parameters_of(method),
                source_code=syntax.source_with_comments(tree, method),
            )
        return None

    def get_methods(self, class_name: str, method_names: str) -> MethodsResult:
        """Several methods of the first type that declares any of the comma-separated names."""
        wanted = [name.strip() for name in method_names.split(",") if name.strip()]
        for document, tree in self.document_trees():
            type_node = first_type_named(tree, class_name)
            if type_node is None:
                continue
            found = []
            for name in wanted:
                candidates = methods_named(type_node, name)
                if not candidates:
                    continue
                method = candidates[0]
                mods = syntax.modifiers(method)
                found.append(
                    MethodInfo(
                        name=syntax.name_of(method) or "",
                        signature=syntax.method_signature(method),
                        line_range=syntax.line_range(method),
                        source_code=syntax.source_with_comments(tree, method),
                        return_type=syntax.normalized_text(syntax.declaration_type(method)),
                        parameters=parameters_of(method),
                        accessibility=syntax.accessibility(mods),
                        is_async="async" in mods,
                    )
                )
            if found:
                return MethodsResult(
                    class_name=syntax.name_of(type_node) or class_name,
                    file_path=self.relative(document.path),
                    methods=found,
                )
        raise SymbolNotFoundError(
            f"Class '{class_name}' not found in solution or no matching methods found", query=class_name
        )

    def list_classes(self, namespace: str) -> ClassListResult:
        """Types in a namespace or any namespace nested under it, one entry per name."""
        prefix = namespace.lower()
        by_name: Dict[str, ClassInfo] = {}
        for document, tree in self.document_trees():
            for node in syntax.descendants_of_type(tree.root, syntax.MEMBERED_TYPE_DECLARATIONS):
                declared_in = syntax.namespace_of(node).lower()
                if declared_in != prefix and not declared_in.startswith(prefix + "."):
                    continue
                name = syntax.name_of(node) or ""
                if name in by_name:
                    continue
                mods = syntax.modifiers(node)
                by_name[name] = ClassInfo(
                    name=name,
                    file_path=self.relative(document.path),
                    line_range=syntax.line_range(node),
                    accessibility=syntax.accessibility(mods),
                    is_static="static" in mods,
                )

        classes = [by_name[name] for name in sorted(by_name, key=name_sort_key)]
        return ClassListResult(namespace=namespace, total_classes=len(classes), classes=classes)

    def get_namespace_structure(self, project_name: str) -> NamespaceStructureResult:
        project = find_project_by_name(self.workspace, project_name)
        if project is None:
            raise SymbolNotFoundError(f"Project '{project_name}' not found in solution", query=project_name)

        namespaces: Dict[str, List[str]] = {}
        for document in project.documents:
            tree = document.syntax_tree
            if tree is None:
                continue
            for node in syntax.descendants_of_type(tree.root, syntax.MEMBERED_TYPE_DECLARATIONS):
                names = namespaces.setdefault(syntax.namespace_of(node) or GLOBAL_NAMESPACE, [])
                name = syntax.name_of(node) or ""
                if name not in names:
                    names.append(name)

        return NamespaceStructureResult(
            project_name=project_name,
            namespaces=[
                NamespaceInfo(name=name, class_count=len(classes), classes=sorted(classes, key=name_sort_key))
                for name, classes in sorted(namespaces.items(), key=lambda item: name_sort_key(item[0]))
            ],
        )

    def check_overridable(self, class_name: str, method_name: str) -> OverridableResult:
        """Override modifiers of a method and, for an override, the method it overrides."""
        for document, bound in self.bound_documents():
            type_node = first_type_named(bound.tree, class_name)
            if type_node is None:
                continue
            candidates = methods_named(type_node, method_name)
            if not candidates:
                continue
            method = candidates[0]
            mods = syntax.modifiers(method)
            is_virtual = "virtual" in mods
            is_override = "override" in mods
            is_abstract = "abstract" in mods
            is_sealed = "sealed" in mods

            base_method = None
            declared = bound.model.declared_symbol(method)
            if is_override and declared is not None and declared.overridden_method is not None:
                overridden = declared.overridden_method
                owner = overridden.containing_type.name if overridden.containing_type else ""
                base_method = f"{owner}.{overridden.name}"

            return OverridableResult(
                class_name=syntax.name_of(type_node) or class_name,
                method_name=syntax.name_of(method) or method_name,
                is_virtual=is_virtual,
                is_override=is_override,
                is_abstract=is_abstract,
                is_sealed=is_sealed,
                can_be_overridden="static" not in mods and not is_sealed and (is_virtual or is_abstract or is_override),
                base_method=base_method,
                file_path=self.relative(document.path),
                line=syntax.line_of(method),
            )
        raise SymbolNotFoundError(
            f"Method '{method_name}' not found in class '{class_name}'", query=f"{class_name}.{method_name}"
        )

    def _require_document(self, file_path: str) -> Document:
        document = resolve_document_path(self.workspace, file_path)
        if document is None:
            raise SymbolNotFoundError(f"File not found: {file_path}", query=file_path)
        return document
