"""Best-effort semantic binding over tree-sitter C# trees.

A CSharpCompilation builds a declaration table for one project (its own
trees plus the trees of projects it references) and resolves base
lists, member types and overrides. A SemanticModel answers per-node
questions for one tree: what a declaration declares, what a reference
resolves to, and what type an expression has.

Binding is name based. Lookup follows C# scoping closely enough for
navigation (locals, parameters, members along the base chain, nested
types, enclosing namespaces, ``using`` imports), narrows overloads by
argument count and simple argument types, and reports whatever it
cannot narrow as candidates. It is not a type checker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from tree_sitter import Node

from . import syntax
from .parser import SyntaxTree
from .protocol import SymbolInfo
from .symbols import (
    ENUM,
    OBJECT,
    SPECIAL_ALIASES,
    SPECIAL_TYPES,
    VALUE_TYPE,
    VALUE_TYPE_KINDS,
    WELL_KNOWN_GENERIC,
    Declaration,
    Symbol,
    array_of,
    construct,
    nullable_of,
    unresolved,
)

logger = logging.getLogger(__name__)

NodeKey = tuple[str, int, int, str]

_EMPTY = SymbolInfo()

_MAX_DEPTH = 24

# Node types that are always type syntax
_TYPE_SYNTAX = frozenset(
    {
        "predefined_type",
        "generic_name",
        "qualified_name",
        "array_type",
        "nullable_type",
        "pointer_type",
        "tuple_type",
        "alias_qualified_name",
        "implicit_type",
        "ref_type",
        "scoped_type",
    }
)

# Containers whose named children are types
_TYPE_CONTAINERS = frozenset(
    {
        "type_argument_list",
        "base_list",
        "array_type",
        "nullable_type",
        "typeof_expression",
        "type_parameter_constraint",
        "type_constraint",
        "primary_constructor_base_type",
        "explicit_interface_specifier",
        "default_expression",
        "sizeof_expression",
        "ref_type",
        "pointer_type",
        "type_pattern",
    }
)

# Nodes whose ``type`` or ``returns`` field holds a type
_TYPED_PARENTS = frozenset(
    {
        "parameter",
        "variable_declaration",
        "property_declaration",
        "indexer_declaration",
        "event_declaration",
        "object_creation_expression",
        "array_creation_expression",
        "cast_expression",
        "method_declaration",
        "local_function_statement",
        "delegate_declaration",
        "operator_declaration",
        "conversion_operator_declaration",
        "foreach_statement",
        "catch_declaration",
        "declaration_pattern",
        "declaration_expression",
        "recursive_pattern",
        "tuple_element",
    }
)

_FUNCTION_LIKE = frozenset(
    {
        "method_declaration",
        "constructor_declaration",
        "destructor_declaration",
        "local_function_statement",
        "lambda_expression",
        "anonymous_method_expression",
        "operator_declaration",
        "conversion_operator_declaration",
        "indexer_declaration",
        "delegate_declaration",
    }
)

_LITERAL_TYPES = {
    "string_literal": "string",
    "verbatim_string_literal": "string",
    "raw_string_literal": "string",
    "interpolated_string_expression": "string",
    "integer_literal": "int",
    "real_literal": "double",
    "boolean_literal": "bool",
    "character_literal": "char",
}

_BOOLEAN_OPERATORS = frozenset({"==", "!=", "<", ">", "<=", ">=", "&&", "||"})

_NUMERIC = frozenset({"byte", "sbyte", "short", "ushort", "int", "uint", "long", "ulong", "float", "double", "decimal"})

_PARAMETER_MODIFIERS = frozenset({"this", "params", "ref", "out", "in", "scoped", "readonly"})

# Scopes whose children are declarations, not statements
_MEMBER_CONTAINERS = frozenset(
    {"declaration_list", "namespace_declaration", "file_scoped_namespace_declaration", "enum_member_declaration_list"}
)

_DECLARATION_NODES = frozenset(
    {"namespace_declaration", "file_scoped_namespace_declaration", "using_directive", "attribute_list"}
    | set(syntax.TYPE_DECLARATIONS)
)


def node_key(tree: SyntaxTree, node: Node) -> NodeKey:
    return (tree.path, node.start_byte, node.end_byte, node.type)


def _simple_name(node: Node) -> str:
    """Identifier text of an identifier or generic name."""
    if node.type == "generic_name":
        return syntax.text(syntax.first_child_of_type(node, "identifier"))
    return syntax.text(node)


def _type_arguments(node: Node) -> list[Node]:
    targs = syntax.first_child_of_type(node, "type_argument_list")
    return list(targs.named_children) if targs is not None else []


def _looks_like_interface(name: str) -> bool:
    return len(name) > 1 and name[0] == "I" and name[1].isupper()


def _accepts(method: Symbol, argc: int) -> bool:
    total = len(method.parameters)
    required = total - method.optional_parameters - (1 if method.has_params_array else 0)
    if argc < required:
        return False
    return argc <= total or method.has_params_array


@dataclass
class Scope:
    """Lookup context for a node: its tree, namespace, enclosing type and type parameters."""

    tree: SyntaxTree
    namespace: str
    type_symbol: Symbol | None = None
    type_parameters: list[Symbol] = field(default_factory=list)


class CSharpCompilation:
    """Declaration table and type resolution for one project."""

    def __init__(self, name: str, trees: list[SyntaxTree], references: list[SyntaxTree] | None = None):
        self.name = name
        self._trees = list(trees)
        own_paths = {tree.path for tree in self._trees}
        self._reference_trees = [tree for tree in (references or []) if tree.path not in own_paths]
        self._declared: dict[NodeKey, Symbol] = {}
        self._types: list[Symbol] = []
        self._types_by_full_name: dict[str, list[Symbol]] = {}
        self._types_by_name: dict[str, list[Symbol]] = {}
        self._usings: dict[str, list[str]] = {}
        self._models: dict[str, SemanticModel] = {}
        self._build()

    @property
    def syntax_trees(self) -> list[SyntaxTree]:
        return list(self._trees)

    @property
    def types(self) -> list[Symbol]:
        """All declared types visible to this compilation, in declaration order."""
        return list(self._types)

    def semantic_model(self, tree: SyntaxTree) -> SemanticModel:
        model = self._models.get(tree.path)
        if model is None:
            if tree.path not in self._usings:
                raise KeyError(tree.path)
            model = SemanticModel(self, tree)
            self._models[tree.path] = model
        return model

    def declared(self, tree: SyntaxTree, node: Node) -> Symbol | None:
        return self._declared.get(node_key(tree, node))

    def type_by_full_name(self, full_name: str, arity: int = 0) -> Symbol | None:
        full_name = full_name.replace("global::", "").replace(" ", "")
        return self._pick(self._types_by_full_name.get(full_name, []), arity)

    # Building

    def _all_trees(self) -> Iterator[SyntaxTree]:
        yield from self._trees
        yield from self._reference_trees

    def _build(self) -> None:
        for tree in self._all_trees():
            self._usings[tree.path] = syntax.using_namespaces(tree.root)
            self._declare_types(tree)
        for symbol in list(self._types):
            for declaration in symbol.declarations:
                self._declare_members(symbol, declaration)
        for symbol in self._types:
            self._resolve_bases(symbol)
        for symbol in self._types:
            for member in symbol.members:
                self._resolve_member(member)
        for symbol in self._types:
            for member in symbol.members:
                if member.kind == "method" and "override" in member.modifiers:
                    member.overridden_method = self._find_overridden(member)
        logger.debug("Compilation %s: %d types declared", self.name, len(self._types))

    def _declare_types(self, tree: SyntaxTree) -> None:
        for node in syntax.walk(tree.root):
            if node.type in syntax.TYPE_DECLARATIONS:
                kind = syntax.TYPE_DECLARATIONS[node.type]
            elif node.type == "delegate_declaration":
                kind = "delegate"
            else:
                continue
            name = syntax.name_of(node)
            if not name:
                continue

            outer_node = syntax.enclosing_type_declaration(node)
            outer = self.declared(tree, outer_node) if outer_node is not None else None
            namespace = outer.namespace if outer is not None else syntax.namespace_of(node)
            type_parameters = self._type_parameter_names(node)
            full_name = self._full_name(namespace, outer, name)
            mods = syntax.modifiers(node)

            if "partial" in mods:
                existing = next(
                    (
                        candidate for candidate in self._types_by_full_name.get(full_name, [])
                        if candidate.kind == kind and len(candidate.type_parameters) == len(type_parameters)
                    ),
                    None,
                )
                if existing is not None:
                    existing.declarations.append(Declaration(tree, node))
                    existing.modifiers = existing.modifiers | frozenset(mods)
                    self._declared[node_key(tree, node)] = existing
                    continue

            is_value_type = kind in VALUE_TYPE_KINDS or node.type == "record_struct_declaration" or (
                kind == "record" and any(child.type == "struct" for child in node.children)
            )
            symbol = Symbol(
                name=name,
                kind=kind,
                namespace=namespace,
                containing_type=outer,
                declarations=[Declaration(tree, node)],
                modifiers=frozenset(mods),
                is_value_type=is_value_type,
            )
            symbol.type_parameters = [Symbol(name=tp, kind="type_parameter") for tp in type_parameters]
            self._declared[node_key(tree, node)] = symbol
            self._types.append(symbol)
            self._types_by_full_name.setdefault(full_name, []).append(symbol)
            self._types_by_name.setdefault(name, []).append(symbol)
            if outer is not None:
                outer.members.append(symbol)

    def _full_name(self, namespace: str, outer: Symbol | None, name: str) -> str:
        if outer is not None:
            return f"{self._full_name(outer.namespace, outer.containing_type, outer.name)}.{name}"
        return f"{namespace}.{name}" if namespace else name

    @staticmethod
    def _type_parameter_names(node: Node) -> list[str]:
        tparams = node.child_by_field_name("type_parameters") or syntax.first_child_of_type(
            node, "type_parameter_list"
        )
        if tparams is None:
            return []
        names = []
        for tparam in syntax.children_of_type(tparams, "type_parameter"):
            names.append(syntax.name_of(tparam) or syntax.text(syntax.first_child_of_type(tparam, "identifier")))
        return names

    def _declare_members(self, owner: Symbol, declaration: Declaration) -> None:
        tree, node = declaration.tree, declaration.node
        if node.type == "enum_declaration":
            body = node.child_by_field_name("body") or syntax.first_child_of_type(
                node, "enum_member_declaration_list"
            )
            for member in syntax.children_of_type(body, "enum_member_declaration") if body else []:
                field_symbol = Symbol(
                    name=syntax.name_of(member) or syntax.text(syntax.first_child_of_type(member, "identifier")),
                    kind="field",
                    containing_type=owner,
                    declarations=[Declaration(tree, member)],
                    modifiers=frozenset({"public", "static", "const"}),
                    type=owner,
                    type_text=owner.name,
                )
                self._declared[node_key(tree, member)] = field_symbol
                owner.members.append(field_symbol)
            return

        primary = syntax.first_child_of_type(node, "parameter_list")
        if primary is not None:
            ctor = Symbol(name=owner.name, kind="constructor", containing_type=owner, modifiers=frozenset({"public"}))
            ctor.parameters = self._declare_parameters(tree, node)
            owner.members.append(ctor)
            if owner.kind == "record":
                for parameter in ctor.parameters:
                    owner.members.append(
                        Symbol(
                            name=parameter.name,
                            kind="property",
                            containing_type=owner,
                            declarations=list(parameter.declarations),
                            modifiers=frozenset({"public"}),
                            type_text=parameter.type_text,
                        )
                    )

        for member in syntax.member_declarations(node):
            if member.type in ("method_declaration", "constructor_declaration"):
                symbol = Symbol(
                    name=syntax.name_of(member) or "",
                    kind="method" if member.type == "method_declaration" else "constructor",
                    containing_type=owner,
                    declarations=[Declaration(tree, member)],
                    modifiers=frozenset(syntax.modifiers(member)),
                    type_text=syntax.normalized_text(syntax.declaration_type(member)),
                )
                symbol.type_parameters = [
                    Symbol(name=tp, kind="type_parameter") for tp in self._type_parameter_names(member)
                ]
                symbol.parameters = self._declare_parameters(tree, member)
                symbol.optional_parameters = sum(
                    1 for p in symbol.parameters if "optional" in p.modifiers
                )
                symbol.has_params_array = any("params" in p.modifiers for p in symbol.parameters)
                self._register(tree, member, symbol, owner)
            elif member.type in ("property_declaration", "event_declaration"):
                symbol = Symbol(
                    name=syntax.name_of(member) or "",
                    kind="property",
                    containing_type=owner,
                    declarations=[Declaration(tree, member)],
                    modifiers=frozenset(syntax.modifiers(member)),
                    type_text=syntax.normalized_text(syntax.declaration_type(member)),
                )
                self._register(tree, member, symbol, owner)
            elif member.type in ("field_declaration", "event_field_declaration"):
                variables = syntax.variable_declaration(member)
                if variables is None:
                    continue
                type_text = syntax.normalized_text(variables.child_by_field_name("type"))
                mods = frozenset(syntax.modifiers(member))
                for index, declarator in enumerate(syntax.variable_declarators(variables)):
                    symbol = Symbol(
                        name=syntax.declarator_name(declarator),
                        kind="field",
                        containing_type=owner,
                        declarations=[Declaration(tree, declarator)],
                        modifiers=mods,
                        type_text=type_text,
                    )
                    self._register(tree, declarator, symbol, owner)
                    if index == 0:
                        self._declared[node_key(tree, member)] = symbol

    def _register(self, tree: SyntaxTree, node: Node, symbol: Symbol, owner: Symbol) -> None:
        self._declared[node_key(tree, node)] = symbol
        owner.members.append(symbol)

    def _declare_parameters(self, tree: SyntaxTree, node: Node) -> list[Symbol]:
        parameters = []
        for pnode in syntax.parameter_nodes(node):
            symbol = Symbol(
                name=syntax.name_of(pnode) or "",
                kind="parameter",
                declarations=[Declaration(tree, pnode)],
                modifiers=frozenset(self._parameter_modifiers(pnode)),
                type_text=syntax.parameter_type_text(pnode),
            )
            self._declared[node_key(tree, pnode)] = symbol
            parameters.append(symbol)
        return parameters

    @staticmethod
    def _parameter_modifiers(pnode: Node) -> set[str]:
        type_node = pnode.child_by_field_name("type")
        name_node = pnode.child_by_field_name("name")
        found = set()
        for child in pnode.children:
            if syntax.same_node(child, type_node) or syntax.same_node(child, name_node):
                continue
            if child.type == "attribute_list":
                continue
            if child.type in ("equals_value_clause", "="):
                found.add("optional")
                continue
            for word in syntax.text(child).split():
                if word in _PARAMETER_MODIFIERS:
                    found.add(word)
        return found

    def _resolve_bases(self, symbol: Symbol) -> None:
        base: Symbol | None = None
        interfaces: list[Symbol] = []
        for declaration in symbol.declarations:
            base_list = syntax.first_child_of_type(declaration.node, "base_list")
            if base_list is None:
                continue
            scope = self.scope_for(declaration.tree, declaration.node)
            for entry in base_list.named_children:
                type_node = entry
                if entry.type == "primary_constructor_base_type":
                    type_node = entry.child_by_field_name("type") or (
                        entry.named_children[0] if entry.named_children else None
                    )
                if type_node is None or type_node.type == "argument_list":
                    continue
                resolved = self.resolve_type(type_node, scope)
                if resolved is None:
                    continue
                if (
                    symbol.kind in ("class", "record")
                    and not symbol.is_value_type
                    and base is None
                    and not interfaces
                    and self._is_class_like(resolved)
                ):
                    base = resolved
                else:
                    interfaces.append(resolved)

        if symbol.kind == "interface":
            symbol.base_type = None
        elif symbol.kind == "enum":
            symbol.base_type = ENUM
            interfaces = []
        elif symbol.is_value_type:
            symbol.base_type = VALUE_TYPE
        else:
            symbol.base_type = base if base is not None and base is not symbol else OBJECT

        unique: dict[str, Symbol] = {}
        for interface in interfaces:
            unique.setdefault(interface.display_string(), interface)
        symbol.interfaces = list(unique.values())

    @staticmethod
    def _is_class_like(resolved: Symbol) -> bool:
        if resolved is OBJECT:
            return True
        if resolved.kind in ("class", "record"):
            return True
        return resolved.kind == "error" and not _looks_like_interface(resolved.name)

    def _resolve_member(self, member: Symbol) -> None:
        if member.is_type or member.declaration is None:
            if member.kind == "constructor":
                for parameter in member.parameters:
                    self._resolve_parameter(parameter)
            return
        tree, node = member.declaration.tree, member.declaration.node
        scope = self.scope_for(tree, node)
        if member.kind == "method":
            member.type = self.resolve_type(syntax.declaration_type(node), scope)
        elif member.kind == "property" and member.type is None:
            if node.type == "parameter":
                member.type = self.resolve_type(node.child_by_field_name("type"), scope)
            else:
                member.type = self.resolve_type(syntax.declaration_type(node), scope)
        elif member.kind == "field" and member.type is None and node.type == "variable_declarator":
            member.type = self.resolve_type(node.parent.child_by_field_name("type"), scope)
        for parameter in member.parameters:
            self._resolve_parameter(parameter)

    def _resolve_parameter(self, parameter: Symbol) -> None:
        if parameter.declaration is None or parameter.type is not None:
            return
        tree, node = parameter.declaration.tree, parameter.declaration.node
        parameter.type = self.resolve_type(node.child_by_field_name("type"), self.scope_for(tree, node))

    def _find_overridden(self, method: Symbol) -> Symbol | None:
        owner = method.containing_type
        if owner is None:
            return None
        for base in owner.base_chain():
            for candidate in base.members_named(method.name, {"method"}):
                if len(candidate.parameters) == len(method.parameters):
                    return candidate
        return None

    # Lookup

    def scope_for(self, tree: SyntaxTree, node: Node) -> Scope:
        """Lookup scope at a node."""
        type_node = node if syntax.is_type_declaration(node) else syntax.enclosing_type_declaration(node)
        type_symbol = self.declared(tree, type_node) if type_node is not None else None
        namespace = type_symbol.namespace if type_symbol is not None else syntax.namespace_of(node)

        type_parameters: list[Symbol] = []
        method_node = node if node.type in ("method_declaration", "local_function_statement") else syntax.enclosing(
            node, ("method_declaration", "local_function_statement")
        )
        if method_node is not None:
            method_symbol = self.declared(tree, method_node)
            if method_symbol is not None:
                type_parameters = method_symbol.type_parameters
            else:
                type_parameters = [
                    Symbol(name=tp, kind="type_parameter") for tp in self._type_parameter_names(method_node)
                ]
        return Scope(tree=tree, namespace=namespace, type_symbol=type_symbol, type_parameters=type_parameters)

    def lookup_type(self, name: str, arity: int, scope: Scope) -> Symbol | None:
        """Resolve a simple type name the way C# name lookup would, leniently."""
        if arity == 0:
            for tparam in scope.type_parameters:
                if tparam.name == name:
                    return tparam
            owner = scope.type_symbol
            while owner is not None:
                for tparam in owner.type_parameters:
                    if tparam.name == name:
                        return tparam
                owner = owner.containing_type

        owner = scope.type_symbol
        while owner is not None:
            for candidate_owner in (owner, *owner.base_chain()):
                nested = [
                    member for member in candidate_owner.original_definition.members
                    if member.is_type and member.name == name
                ]
                found = self._pick(nested, arity)
                if found is not None:
                    return found
            owner = owner.containing_type

        namespace = scope.namespace
        while True:
            full_name = f"{namespace}.{name}" if namespace else name
            found = self._pick(self._types_by_full_name.get(full_name, []), arity)
            if found is not None:
                return found
            if not namespace:
                break
            namespace = namespace.rpartition(".")[0]

        for imported in self._usings.get(scope.tree.path, []):
            found = self._pick(self._types_by_full_name.get(f"{imported}.{name}", []), arity)
            if found is not None:
                return found

        if arity == 0 and name in SPECIAL_ALIASES:
            return SPECIAL_TYPES[SPECIAL_ALIASES[name]]
        known = WELL_KNOWN_GENERIC.get((name, arity))
        if known is not None:
            return known
        return self._pick(self._types_by_name.get(name, []), arity)

    @staticmethod
    def _pick(candidates: list[Symbol], arity: int) -> Symbol | None:
        for candidate in candidates:
            if len(candidate.type_parameters) == arity:
                return candidate
        return None

    def resolve_type(self, node: Node | None, scope: Scope) -> Symbol | None:
        """Resolve a type-syntax node. Returns None for ``var`` and non-type syntax."""
        if node is None:
            return None
        kind = node.type
        if kind == "predefined_type":
            keyword = syntax.text(node)
            return SPECIAL_TYPES.get(keyword) or unresolved(keyword)
        if kind == "implicit_type":
            return None
        if kind == "identifier":
            name = syntax.text(node)
            found = self.lookup_type(name, 0, scope)
            if found is None and name == "var":
                return None
            return found or unresolved(name)
        if kind == "generic_name":
            name = _simple_name(node)
            arguments = [self._resolve_or_unresolved(arg, scope) for arg in _type_arguments(node)]
            definition = self.lookup_type(name, len(arguments), scope)
            if definition is None or not definition.type_parameters:
                return unresolved(name, arguments)
            return construct(definition, arguments)
        if kind == "qualified_name":
            return self._resolve_qualified(node, scope)
        if kind == "alias_qualified_name":
            right = node.child_by_field_name("name") or (node.named_children[-1] if node.named_children else None)
            return self.resolve_type(right, Scope(tree=scope.tree, namespace=""))
        if kind == "nullable_type":
            inner = self.resolve_type(node.child_by_field_name("type") or node.named_children[0], scope)
            if inner is not None and inner.is_value_type:
                return nullable_of(inner)
            return inner
        if kind == "array_type":
            element_node = node.child_by_field_name("type") or (node.named_children[0] if node.named_children else None)
            element = self.resolve_type(element_node, scope)
            return array_of(element) if element is not None else None
        if kind in ("pointer_type", "ref_type", "scoped_type"):
            inner = node.child_by_field_name("type") or (node.named_children[-1] if node.named_children else None)
            return self.resolve_type(inner, scope)
        if kind == "tuple_type":
            return unresolved(syntax.normalized_text(node))
        return None

    def _resolve_or_unresolved(self, node: Node, scope: Scope) -> Symbol:
        return self.resolve_type(node, scope) or unresolved(syntax.normalized_text(node))

    def _resolve_qualified(self, node: Node, scope: Scope) -> Symbol | None:
        qualifier = node.child_by_field_name("qualifier")
        right = node.child_by_field_name("name")
        if qualifier is None or right is None:
            named = node.named_children
            if len(named) < 2:
                return None
            qualifier, right = named[0], named[-1]

        name = _simple_name(right)
        arguments = [self._resolve_or_unresolved(arg, scope) for arg in _type_arguments(right)]
        prefix = syntax.normalized_text(qualifier).replace("global::", "").replace(" ", "")

        definition = self._pick(self._types_by_full_name.get(f"{prefix}.{name}", []), len(arguments))
        if definition is None:
            for imported in self._usings.get(scope.tree.path, []):
                definition = self._pick(
                    self._types_by_full_name.get(f"{imported}.{prefix}.{name}", []), len(arguments)
                )
                if definition is not None:
                    break
        if definition is None:
            namespace = scope.namespace
            while namespace and definition is None:
                definition = self._pick(
                    self._types_by_full_name.get(f"{namespace}.{prefix}.{name}", []), len(arguments)
                )
                namespace = namespace.rpartition(".")[0]
        if definition is None:
            known = WELL_KNOWN_GENERIC.get((name, len(arguments)))
            if known is not None and known.namespace == prefix:
                definition = known
        if definition is None:
            return unresolved(name, arguments)
        if arguments and definition.type_parameters:
            return construct(definition, arguments)
        return definition


class SemanticModel:
    """Semantic queries for one tree of a compilation."""

    def __init__(self, compilation: CSharpCompilation, tree: SyntaxTree):
        self.compilation = compilation
        self.tree = tree
        self._locals: dict[NodeKey, Symbol] = {}

    # Public surface

    def declared_symbol(self, node: Node) -> Symbol | None:
        symbol = self.compilation.declared(self.tree, node)
        if symbol is not None:
            return symbol
        if node.type == "variable_declarator":
            return self._local_for_declarator(node)
        if node.type == "local_function_statement":
            return self._local_function(node)
        if node.type == "parameter":
            return self._lambda_parameter(node)
        return None

    def symbol_info(self, node: Node) -> SymbolInfo:
        kind = node.type
        if kind == "invocation_expression":
            return self._bind_invocation(node)
        if kind == "member_access_expression":
            return self._bind_member_access(node, node.child_by_field_name("name"), node.child_by_field_name("expression"))
        if kind in ("object_creation_expression", "implicit_object_creation_expression"):
            return self._bind_creation(node)
        if kind in ("identifier", "generic_name"):
            return self._bind_name(node)
        if kind == "attribute":
            return self._bind_attribute(node)
        if kind in _TYPE_SYNTAX or self._is_keyword(node, "this") or self._is_keyword(node, "base"):
            resolved = self.type_info(node)
            return SymbolInfo(resolved) if resolved is not None else _EMPTY
        return _EMPTY

    def type_info(self, node: Node) -> Symbol | None:
        kind = node.type
        if kind in _TYPE_SYNTAX or (kind == "identifier" and self._in_type_position(node)):
            return self.compilation.resolve_type(node, self._scope(node))
        if kind == "object_creation_expression":
            return self.compilation.resolve_type(node.child_by_field_name("type"), self._scope(node))
        if kind == "implicit_object_creation_expression":
            return self._target_type(node)
        return self._expression_type(node)

    # Names

    def _scope(self, node: Node) -> Scope:
        return self.compilation.scope_for(self.tree, node)

    @staticmethod
    def _is_keyword(node: Node, keyword: str) -> bool:
        return node.type in (f"{keyword}_expression", keyword) or (
            node.type != "identifier" and syntax.text(node) == keyword
        )

    def _bind_name(self, node: Node) -> SymbolInfo:
        parent = node.parent
        if parent is None or syntax.is_declaration_name(node):
            return _EMPTY
        if node.type == "identifier" and parent.type == "generic_name":
            return self._bind_name(parent)
        name = _simple_name(node)
        ptype = parent.type

        if ptype == "member_access_expression":
            if syntax.same_node(parent.child_by_field_name("name"), node):
                return self._bind_member_access(parent, node, parent.child_by_field_name("expression"))
            return self._bind_simple_name(node, name)
        if ptype == "member_binding_expression":
            return self._bind_member_binding(parent, node)
        if ptype == "invocation_expression" and syntax.same_node(parent.child_by_field_name("function"), node):
            return self._bind_invocation(parent)
        if ptype in ("qualified_name", "alias_qualified_name"):
            return self._bind_qualified_part(node)
        if ptype in ("name_colon", "name_equals"):
            return _EMPTY
        if ptype == "attribute":
            return self._bind_attribute(parent)
        if node.type == "generic_name" or self._in_type_position(node):
            resolved = self.compilation.resolve_type(node, self._scope(node))
            return SymbolInfo(resolved) if resolved is not None else _EMPTY
        return self._bind_simple_name(node, name)

    def _in_type_position(self, node: Node) -> bool:
        parent = node.parent
        if parent is None:
            return False
        if parent.type in _TYPE_CONTAINERS:
            return True
        if parent.type in _TYPED_PARENTS:
            return syntax.same_node(parent.child_by_field_name("type"), node) or syntax.same_node(
                parent.child_by_field_name("returns"), node
            )
        if parent.type in ("as_expression", "is_expression"):
            return syntax.same_node(parent.child_by_field_name("right"), node)
        return False

    def _bind_qualified_part(self, node: Node) -> SymbolInfo:
        outer = node.parent
        while outer.parent is not None and outer.parent.type in ("qualified_name", "alias_qualified_name"):
            outer = outer.parent
        if node.end_byte == outer.end_byte:
            resolved = self.compilation.resolve_type(outer, self._scope(node))
            return SymbolInfo(resolved) if resolved is not None else _EMPTY
        prefix = self.tree.text.encode("utf-8")[outer.start_byte:node.end_byte].decode("utf-8", errors="replace")
        resolved = self.compilation.type_by_full_name(prefix)
        return SymbolInfo(resolved) if resolved is not None else _EMPTY

    def _bind_simple_name(self, node: Node, name: str) -> SymbolInfo:
        local = self._lookup_local(name, node)
        if local is not None:
            return SymbolInfo(local)
        scope = self._scope(node)
        owner = scope.type_symbol
        while owner is not None:
            found = self._lookup_members(owner, name)
            if found:
                return self._choose(found, None)
            owner = owner.containing_type
        resolved = self.compilation.lookup_type(name, 0, scope)
        return SymbolInfo(resolved) if resolved is not None else _EMPTY

    def _bind_attribute(self, attribute: Node) -> SymbolInfo:
        name = syntax.attribute_name(attribute).rpartition(".")[2]
        scope = self._scope(attribute)
        resolved = self.compilation.lookup_type(f"{name}Attribute", 0, scope) or self.compilation.lookup_type(
            name, 0, scope
        )
        return SymbolInfo(resolved) if resolved is not None else _EMPTY

    # Members and invocations

    def _owners(self, type_symbol: Symbol) -> list[Symbol]:
        definition = type_symbol.original_definition
        if definition.kind in ("array", "nullable"):
            definition = definition.base_type or OBJECT
        owners = [definition, *definition.base_chain()]
        if definition.kind == "interface":
            owners.extend(definition.all_interfaces())
        return owners

    def _lookup_members(self, type_symbol: Symbol, name: str) -> list[Symbol]:
        for owner in self._owners(type_symbol):
            found = owner.members_named(name)
            if found:
                return found
        return []

    def _find_methods(self, type_symbol: Symbol, name: str, argc: int) -> list[Symbol]:
        first_found: list[Symbol] = []
        for owner in self._owners(type_symbol):
            found = owner.members_named(name, {"method"})
            if not found:
                continue
            if not first_found:
                first_found = found
            fitting = [method for method in found if _accepts(method, argc)]
            if fitting:
                return fitting
        return first_found

    def _arguments(self, node: Node) -> list[Node]:
        arguments = node.child_by_field_name("arguments") or syntax.first_child_of_type(node, "argument_list")
        if arguments is None:
            return []
        expressions = []
        for argument in syntax.children_of_type(arguments, "argument"):
            expression = syntax.argument_expression(argument)
            if expression is not None:
                expressions.append(expression)
        return expressions

    def _invocation_of(self, node: Node) -> Node | None:
        """The invocation node when ``node`` is the callee of a call."""
        parent = node.parent
        if parent is not None and parent.type == "invocation_expression":
            if syntax.same_node(parent.child_by_field_name("function"), node):
                return parent
        return None

    def _bind_member_access(self, access: Node, name_node: Node | None, receiver: Node | None) -> SymbolInfo:
        if name_node is None or receiver is None:
            return _EMPTY
        name = _simple_name(name_node)
        receiver_type = self._receiver_type(receiver)
        if receiver_type is None:
            resolved = self.compilation.type_by_full_name(syntax.normalized_text(access))
            return SymbolInfo(resolved) if resolved is not None else _EMPTY
        return self._bind_member_of(receiver_type, name, self._invocation_of(access))

    def _bind_member_binding(self, binding: Node, name_node: Node) -> SymbolInfo:
        conditional = syntax.enclosing(binding, ("conditional_access_expression",))
        if conditional is None:
            return _EMPTY
        receiver = conditional.child_by_field_name("condition") or (
            conditional.named_children[0] if conditional.named_children else None
        )
        if receiver is None:
            return _EMPTY
        receiver_type = self._receiver_type(receiver)
        if receiver_type is None:
            return _EMPTY
        return self._bind_member_of(receiver_type, _simple_name(name_node), self._invocation_of(binding))

    def _bind_member_of(self, receiver_type: Symbol, name: str, invocation: Node | None) -> SymbolInfo:
        if invocation is not None:
            arguments = self._arguments(invocation)
            methods = self._find_methods(receiver_type, name, len(arguments))
            if not methods:
                methods = self._extension_methods(receiver_type, name, len(arguments))
            return self._choose(methods, arguments) if methods else _EMPTY
        found = self._lookup_members(receiver_type, name)
        return self._choose(found, None) if found else _EMPTY

    def _receiver_type(self, receiver: Node) -> Symbol | None:
        if receiver.type == "identifier":
            symbol = self._bind_simple_name(receiver, syntax.text(receiver)).first()
            if symbol is None:
                return None
            return symbol if symbol.is_type else self._type_of_symbol(symbol)
        return self._expression_type(receiver)

    def _extension_methods(self, receiver_type: Symbol, name: str, argc: int) -> list[Symbol]:
        found = []
        for owner in self.compilation.types:
            if "static" not in owner.modifiers:
                continue
            for method in owner.members_named(name, {"method"}):
                if not method.parameters or "this" not in method.parameters[0].modifiers:
                    continue
                if _accepts(method, argc + 1) and self._assignable(receiver_type, method.parameters[0].type):
                    found.append(method)
        return found

    def _bind_invocation(self, invocation: Node) -> SymbolInfo:
        function = invocation.child_by_field_name("function")
        if function is None:
            return _EMPTY
        if function.type == "member_access_expression":
            return self._bind_member_access(
                function, function.child_by_field_name("name"), function.child_by_field_name("expression")
            )
        if function.type == "member_binding_expression":
            name_node = function.child_by_field_name("name") or (
                function.named_children[-1] if function.named_children else None
            )
            return self._bind_member_binding(function, name_node) if name_node is not None else _EMPTY
        if function.type not in ("identifier", "generic_name"):
            return _EMPTY

        name = _simple_name(function)
        arguments = self._arguments(invocation)
        local_function = self._lookup_local_function(name, invocation)
        if local_function is not None:
            return SymbolInfo(local_function)
        owner = self._scope(invocation).type_symbol
        while owner is not None:
            methods = self._find_methods(owner, name, len(arguments))
            if methods:
                return self._choose(methods, arguments)
            owner = owner.containing_type
        local = self._lookup_local(name, invocation)
        return SymbolInfo(local) if local is not None else _EMPTY

    def _bind_creation(self, creation: Node) -> SymbolInfo:
        created = self.type_info(creation)
        if created is None:
            return _EMPTY
        constructors = created.original_definition.members_named(created.name, {"constructor"})
        if not constructors:
            return _EMPTY
        arguments = self._arguments(creation)
        fitting = [ctor for ctor in constructors if _accepts(ctor, len(arguments))]
        return self._choose(fitting or constructors, arguments)

    def _choose(self, symbols: list[Symbol], arguments: list[Node] | None) -> SymbolInfo:
        if len(symbols) == 1:
            return SymbolInfo(symbols[0])
        if not symbols:
            return _EMPTY
        methods = [symbol for symbol in symbols if symbol.kind in ("method", "constructor")]
        if len(methods) != len(symbols):
            non_methods = [symbol for symbol in symbols if symbol not in methods]
            return SymbolInfo(non_methods[0])
        if arguments is not None:
            fitting = [method for method in methods if _accepts(method, len(arguments))]
            if len(fitting) == 1:
                return SymbolInfo(fitting[0])
            best = self._best_by_argument_types(fitting, arguments)
            if best is not None:
                return SymbolInfo(best)
            return SymbolInfo(candidates=tuple(fitting or methods))
        return SymbolInfo(candidates=tuple(methods))

    def _best_by_argument_types(self, methods: list[Symbol], arguments: list[Node]) -> Symbol | None:
        if len(methods) < 2:
            return None
        argument_types = [self._expression_type(argument) for argument in arguments]
        scored = []
        for method in methods:
            score = 0
            for parameter, argument_type in zip(method.parameters, argument_types):
                if argument_type is None or parameter.type is None:
                    continue
                score += 1 if self._assignable(argument_type, parameter.type) else -10
            scored.append((score, method))
        scored.sort(key=lambda item: item[0], reverse=True)
        if scored[0][0] > scored[1][0]:
            return scored[0][1]
        return None

    @staticmethod
    def _assignable(source: Symbol | None, target: Symbol | None) -> bool:
        if source is None or target is None:
            return True
        if target is OBJECT or target.kind in ("type_parameter", "error") or source.kind == "error":
            return True
        target_key = target.original_definition.display_string()
        if source.original_definition.display_string() == target_key:
            return True
        if source.name in _NUMERIC and target.name in _NUMERIC:
            return True
        if target.kind == "nullable" and target.element_type is not None:
            return SemanticModel._assignable(source, target.element_type)
        for ancestor in (*source.base_chain(), *source.all_interfaces()):
            if ancestor.original_definition.display_string() == target_key:
                return True
        return False

    # Expression types

    def _type_of_symbol(self, symbol: Symbol) -> Symbol | None:
        if symbol.is_type:
            return symbol
        if symbol.kind == "constructor":
            return symbol.containing_type
        return symbol.type

    def _expression_type(self, expression: Node | None, depth: int = 0) -> Symbol | None:
        if expression is None or depth > _MAX_DEPTH:
            return None
        kind = expression.type

        if kind in _LITERAL_TYPES:
            return SPECIAL_TYPES[_LITERAL_TYPES[kind]]
        if kind == "null_literal":
            return None
        if self._is_keyword(expression, "this"):
            return self._scope(expression).type_symbol
        if self._is_keyword(expression, "base"):
            owner = self._scope(expression).type_symbol
            return owner.base_type if owner is not None else None
        if kind in ("identifier", "generic_name"):
            symbol = self._bind_name(expression).first()
            return self._type_of_symbol(symbol) if symbol is not None else None
        if kind in ("member_access_expression", "invocation_expression"):
            symbol = self.symbol_info(expression).first()
            if symbol is None:
                return None
            if symbol.is_type and kind == "member_access_expression":
                return symbol
            return symbol.type if not symbol.is_type else symbol
        if kind == "conditional_access_expression":
            binding = expression.named_children[-1] if expression.named_children else None
            return self._expression_type(binding, depth + 1)
        if kind == "member_binding_expression":
            name_node = expression.child_by_field_name("name") or (
                expression.named_children[-1] if expression.named_children else None
            )
            symbol = self._bind_member_binding(expression, name_node).first() if name_node is not None else None
            return self._type_of_symbol(symbol) if symbol is not None else None
        if kind == "object_creation_expression":
            return self.compilation.resolve_type(expression.child_by_field_name("type"), self._scope(expression))
        if kind == "implicit_object_creation_expression":
            return self._target_type(expression)
        if kind == "array_creation_expression":
            type_node = expression.child_by_field_name("type")
            return self.compilation.resolve_type(type_node, self._scope(expression))
        if kind == "await_expression":
            inner = self._expression_type(expression.named_children[-1] if expression.named_children else None, depth + 1)
            return self._unwrap_task(inner)
        if kind in ("parenthesized_expression", "checked_expression", "postfix_unary_expression", "prefix_unary_expression"):
            inner = expression.named_children[-1] if expression.named_children else None
            if kind == "prefix_unary_expression" and syntax.text(expression).startswith("!"):
                return SPECIAL_TYPES["bool"]
            return self._expression_type(inner, depth + 1)
        if kind == "cast_expression":
            return self.compilation.resolve_type(expression.child_by_field_name("type"), self._scope(expression))
        if kind == "as_expression":
            return self.compilation.resolve_type(expression.child_by_field_name("right"), self._scope(expression))
        if kind in ("is_expression", "is_pattern_expression"):
            return SPECIAL_TYPES["bool"]
        if kind == "conditional_expression":
            branch = expression.child_by_field_name("consequence")
            return self._expression_type(branch, depth + 1)
        if kind == "assignment_expression":
            return self._expression_type(expression.child_by_field_name("left"), depth + 1)
        if kind == "binary_expression":
            operator = expression.child_by_field_name("operator")
            if operator is not None and syntax.text(operator) in _BOOLEAN_OPERATORS:
                return SPECIAL_TYPES["bool"]
            return self._expression_type(expression.child_by_field_name("left"), depth + 1)
        if kind == "element_access_expression":
            receiver = expression.child_by_field_name("expression")
            return self._element_type(self._expression_type(receiver, depth + 1))
        if kind == "typeof_expression":
            return unresolved("Type")
        return None

    @staticmethod
    def _unwrap_task(task: Symbol | None) -> Symbol | None:
        if task is None:
            return None
        definition = task.original_definition
        if definition.name in ("Task", "ValueTask"):
            if task.type_arguments:
                return task.type_arguments[0]
            return SPECIAL_TYPES["void"]
        return task

    @staticmethod
    def _element_type(collection: Symbol | None) -> Symbol | None:
        if collection is None:
            return None
        if collection.kind == "array":
            return collection.element_type
        if collection is SPECIAL_TYPES["string"]:
            return SPECIAL_TYPES["char"]
        if len(collection.type_arguments) == 2:
            return collection.type_arguments[1]
        if collection.type_arguments:
            return collection.type_arguments[0]
        return None

    def _target_type(self, node: Node) -> Symbol | None:
        """Type an implicit ``new()`` is converted to, from its surrounding declaration."""
        parent = node.parent
        if parent is not None and parent.type == "equals_value_clause":
            parent = parent.parent
        if parent is None:
            return None
        if parent.type == "variable_declarator":
            declaration = parent.parent
            if declaration is not None and declaration.type == "variable_declaration":
                return self.compilation.resolve_type(declaration.child_by_field_name("type"), self._scope(node))
        if parent.type == "assignment_expression":
            return self._expression_type(parent.child_by_field_name("left"))
        if parent.type in ("property_declaration", "arrow_expression_clause", "return_statement"):
            member = syntax.enclosing(node, ("property_declaration", "method_declaration", "local_function_statement"))
            if member is not None:
                return self.compilation.resolve_type(syntax.declaration_type(member), self._scope(node))
        if parent.type == "parameter":
            return self.compilation.resolve_type(parent.child_by_field_name("type"), self._scope(node))
        return None

    # Locals

    def _lookup_local(self, name: str, node: Node) -> Symbol | None:
        if name == "value":
            accessor = syntax.enclosing(node, ("accessor_declaration",))
            if accessor is not None and syntax.accessor_keyword(accessor) in ("set", "init"):
                owner = syntax.enclosing(accessor, ("property_declaration", "indexer_declaration"))
                owner_symbol = self.compilation.declared(self.tree, owner) if owner is not None else None
                return self._cached_local(
                    accessor, lambda: Symbol(name="value", kind="parameter", type=owner_symbol.type if owner_symbol else None)
                )

        current = node
        while current.parent is not None:
            parent = current.parent
            ptype = parent.type
            if ptype in syntax.TYPE_DECLARATIONS:
                for pnode in syntax.parameter_nodes(parent):
                    if syntax.name_of(pnode) == name:
                        return self.compilation.declared(self.tree, pnode)
                return None
            if ptype in _FUNCTION_LIKE:
                found = self._function_parameter(parent, name)
                if found is not None:
                    return found
            if ptype == "foreach_statement":
                left = parent.child_by_field_name("left")
                if left is not None and syntax.text(left) == name:
                    return self._foreach_variable(parent, left)
            if ptype == "catch_clause":
                declaration = syntax.first_child_of_type(parent, "catch_declaration")
                if declaration is not None and syntax.name_of(declaration) == name:
                    return self._cached_local(
                        declaration,
                        lambda: Symbol(
                            name=name,
                            kind="local",
                            type=self.compilation.resolve_type(declaration.child_by_field_name("type"), self._scope(declaration)),
                        ),
                    )
            if ptype not in _MEMBER_CONTAINERS:
                for sibling in parent.children:
                    if sibling.start_byte >= current.start_byte:
                        break
                    found = self._declared_in(sibling, name)
                    if found is not None:
                        return found
            current = parent
        return None

    def _function_parameter(self, function: Node, name: str) -> Symbol | None:
        parameters = function.child_by_field_name("parameters")
        if parameters is not None and parameters.type in ("identifier", "implicit_parameter"):
            if syntax.text(parameters) == name:
                return self._cached_local(parameters, lambda: Symbol(name=name, kind="parameter"))
            return None
        for pnode in syntax.parameter_nodes(function):
            if syntax.name_of(pnode) == name:
                return self.declared_symbol(pnode)
        return None

    def _lambda_parameter(self, pnode: Node) -> Symbol:
        def _create() -> Symbol:
            type_node = pnode.child_by_field_name("type")
            return Symbol(
                name=syntax.name_of(pnode) or "",
                kind="parameter",
                declarations=[Declaration(self.tree, pnode)],
                type=self.compilation.resolve_type(type_node, self._scope(pnode)),
                type_text=syntax.parameter_type_text(pnode),
            )

        return self._cached_local(pnode, _create)

    def _declared_in(self, statement: Node, name: str) -> Symbol | None:
        if statement.type == "global_statement" and statement.named_children:
            statement = statement.named_children[0]
        elif statement.type in _DECLARATION_NODES:
            return None
        if statement.type in ("local_declaration_statement", "variable_declaration"):
            declaration = statement if statement.type == "variable_declaration" else syntax.variable_declaration(statement)
            if declaration is not None:
                for declarator in syntax.variable_declarators(declaration):
                    if syntax.declarator_name(declarator) == name:
                        return self._local_for_declarator(declarator)
        for node in self._walk_expression_scope(statement):
            if node.type in ("declaration_expression", "declaration_pattern"):
                designation = node.child_by_field_name("name") or syntax.first_child_of_type(
                    node, "single_variable_designation"
                )
                if designation is None:
                    designation = syntax.first_child_of_type(node, "identifier")
                if designation is not None and syntax.text(designation) == name:
                    return self._cached_local(
                        node,
                        lambda: Symbol(
                            name=name,
                            kind="local",
                            type=self.compilation.resolve_type(node.child_by_field_name("type"), self._scope(node)),
                        ),
                    )
        return None

    @staticmethod
    def _walk_expression_scope(statement: Node) -> Iterator[Node]:
        """Walk a statement without entering nested blocks or lambdas."""
        stack = [statement]
        while stack:
            current = stack.pop()
            yield current
            for child in reversed(current.children):
                if child.type in ("block", "lambda_expression", "anonymous_method_expression", "local_function_statement"):
                    continue
                stack.append(child)

    def _local_for_declarator(self, declarator: Node) -> Symbol:
        key = node_key(self.tree, declarator)
        cached = self._locals.get(key)
        if cached is not None:
            return cached
        declaration = declarator.parent
        type_node = declaration.child_by_field_name("type") if declaration is not None else None
        symbol = Symbol(
            name=syntax.declarator_name(declarator),
            kind="local",
            declarations=[Declaration(self.tree, declarator)],
            type_text=syntax.normalized_text(type_node),
        )
        self._locals[key] = symbol
        resolved = self.compilation.resolve_type(type_node, self._scope(declarator))
        if resolved is None:
            resolved = self._expression_type(syntax.declarator_initializer(declarator))
        symbol.type = resolved
        return symbol

    def _foreach_variable(self, statement: Node, left: Node) -> Symbol:
        def _create() -> Symbol:
            type_node = statement.child_by_field_name("type")
            resolved = self.compilation.resolve_type(type_node, self._scope(statement))
            if resolved is None:
                resolved = self._element_type(self._expression_type(statement.child_by_field_name("right")))
            return Symbol(
                name=syntax.text(left),
                kind="local",
                declarations=[Declaration(self.tree, left)],
                type=resolved,
                type_text=syntax.normalized_text(type_node),
            )

        return self._cached_local(left, _create)

    def _lookup_local_function(self, name: str, node: Node) -> Symbol | None:
        current = node.parent
        while current is not None and not syntax.is_type_declaration(current):
            if current.type == "block":
                for statement in syntax.children_of_type(current, "local_function_statement"):
                    if syntax.name_of(statement) == name:
                        return self._local_function(statement)
            current = current.parent
        return None

    def _local_function(self, statement: Node) -> Symbol:
        def _create() -> Symbol:
            scope = self._scope(statement)
            symbol = Symbol(
                name=syntax.name_of(statement) or "",
                kind="method",
                containing_type=scope.type_symbol,
                declarations=[Declaration(self.tree, statement)],
                modifiers=frozenset(syntax.modifiers(statement)),
                type_text=syntax.normalized_text(syntax.declaration_type(statement)),
            )
            symbol.type = self.compilation.resolve_type(syntax.declaration_type(statement), scope)
            symbol.parameters = [self._lambda_parameter(pnode) for pnode in syntax.parameter_nodes(statement)]
            return symbol

        return self._cached_local(statement, _create)

    def _cached_local(self, node: Node, factory) -> Symbol:
        key = node_key(self.tree, node)
        cached = self._locals.get(key)
        if cached is None:
            cached = factory()
            self._locals[key] = cached
        return cached
