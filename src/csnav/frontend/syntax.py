"""Syntax helpers over tree-sitter C# nodes.

Everything here is purely syntactic: names, modifiers, enclosing
declarations, line ranges and literal text. Semantic questions go
through the binder.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator

from tree_sitter import Node

from .parser import SyntaxTree

# Declarations that introduce a named type, mapped to the kind reported in results
TYPE_DECLARATIONS: dict[str, str] = {
    "class_declaration": "class",
    "struct_declaration": "struct",
    "interface_declaration": "interface",
    "record_declaration": "record",
    "record_struct_declaration": "record",
    "enum_declaration": "enum",
}

# Type declarations with members (everything above except enums)
MEMBERED_TYPE_DECLARATIONS = frozenset(
    kind for kind in TYPE_DECLARATIONS if kind != "enum_declaration"
)

# Enclosing "class" for context strings: classes, structs and records only
CLASS_LIKE_DECLARATIONS = frozenset(
    {"class_declaration", "struct_declaration", "record_declaration", "record_struct_declaration"}
)

MEMBER_CONTEXT_DECLARATIONS = frozenset(
    {"method_declaration", "constructor_declaration", "property_declaration"}
)

NAMESPACE_DECLARATIONS = frozenset({"namespace_declaration", "file_scoped_namespace_declaration"})

# Nodes whose ``name`` field is a declaration identifier rather than a reference
_DECLARING_PARENTS = frozenset(
    set(TYPE_DECLARATIONS)
    | {
        "method_declaration",
        "constructor_declaration",
        "destructor_declaration",
        "property_declaration",
        "event_declaration",
        "variable_declarator",
        "parameter",
        "type_parameter",
        "enum_member_declaration",
        "local_function_statement",
        "delegate_declaration",
        "namespace_declaration",
        "file_scoped_namespace_declaration",
        "foreach_statement",
        "catch_declaration",
        "using_directive",
    }
)

_WHITESPACE = re.compile(r"\s+")
_PASCAL_SPLIT = re.compile(r"([a-z])([A-Z])")

_SIMPLE_ESCAPES = {
    "'": "'",
    '"': '"',
    "\\": "\\",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{1,4}|.)")


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all its descendants in document (pre-)order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def descendants_of_type(node: Node, types: Iterable[str] | str) -> Iterator[Node]:
    """Yield descendants of the given node types in document order."""
    wanted = {types} if isinstance(types, str) else set(types)
    for child in walk(node):
        if child.type in wanted:
            yield child


def same_node(a: Node | None, b: Node | None) -> bool:
    """Structural node identity: same span and type."""
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def normalized_text(node: Node | None) -> str:
    """Node text with runs of whitespace collapsed, the way type names are rendered in signatures."""
    return _WHITESPACE.sub(" ", text(node)).strip()


def name_of(node: Node) -> str | None:
    name = node.child_by_field_name("name")
    if name is None:
        return None
    if name.type in ("identifier", "generic_name"):
        identifier = name if name.type == "identifier" else first_child_of_type(name, "identifier")
        return text(identifier)
    return normalized_text(name)


def first_child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def children_of_type(node: Node, node_type: str) -> list[Node]:
    return [child for child in node.children if child.type == node_type]


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def line_range(node: Node) -> list[int]:
    return [node.start_point[0] + 1, node.end_point[0] + 1]


def column_of(tree: SyntaxTree, node: Node) -> int:
    """1-based character column of a node's start, tolerant of non-ASCII source."""
    row, byte_column = node.start_point[0], node.start_point[1]
    line = tree.line_text(row + 1)
    prefix = line.encode("utf-8")[:byte_column].decode("utf-8", errors="ignore")
    return len(prefix) + 1


def context_line(tree: SyntaxTree, node: Node) -> str:
    """The trimmed source line a node starts on."""
    return tree.line_text(line_of(node)).strip()


def modifiers(node: Node) -> set[str]:
    mods = set()
    for child in node.children:
        if child.type == "modifier":
            mods.update(text(child).split())
    return mods


def accessibility(mods: set[str]) -> str:
    if "public" in mods:
        return "public"
    if "private" in mods:
        return "private"
    if "protected" in mods and "internal" in mods:
        return "protected internal"
    if "protected" in mods:
        return "protected"
    if "internal" in mods:
        return "internal"
    return "private"


def is_type_declaration(node: Node) -> bool:
    return node.type in TYPE_DECLARATIONS


def enclosing(node: Node, types: Iterable[str]) -> Node | None:
    """Nearest proper ancestor of one of the given node types."""
    wanted = set(types)
    current = node.parent
    while current is not None:
        if current.type in wanted:
            return current
        current = current.parent
    return None


def enclosing_type_declaration(node: Node) -> Node | None:
    return enclosing(node, TYPE_DECLARATIONS)


def containing_class_name(node: Node) -> str | None:
    decl = enclosing(node, CLASS_LIKE_DECLARATIONS)
    return name_of(decl) if decl is not None else None


def containing_member_name(node: Node) -> str | None:
    decl = enclosing(node, MEMBER_CONTEXT_DECLARATIONS)
    return name_of(decl) if decl is not None else None


def namespace_of(node: Node) -> str:
    """Full dotted namespace a node is declared in, or an empty string."""
    parts: list[str] = []
    current = node.parent
    root = node
    while current is not None:
        if current.type in NAMESPACE_DECLARATIONS:
            parts.append(normalized_text(current.child_by_field_name("name")))
        root = current
        current = current.parent

    if not any(part for part in parts):
        # Older grammars emit file-scoped namespaces as a sibling preceding the types
        for child in root.children:
            if child.type == "file_scoped_namespace_declaration" and child.start_byte <= node.start_byte:
                return normalized_text(child.child_by_field_name("name"))
    return ".".join(part for part in reversed(parts) if part)


def using_namespaces(root: Node) -> list[str]:
    """Namespaces imported with plain ``using`` directives anywhere in the file."""
    imported = []
    for directive in descendants_of_type(root, "using_directive"):
        # Skip aliases (using X = Y;) and using static
        if any(child.type == "=" for child in directive.children):
            continue
        if any(text(child) == "static" for child in directive.children):
            continue
        named = [child for child in directive.named_children if child.type in ("identifier", "qualified_name")]
        if named:
            imported.append(normalized_text(named[-1]))
    return imported


def is_declaration_name(node: Node) -> bool:
    """True when an identifier names the declaration it sits in rather than referencing something."""
    parent = node.parent
    if parent is None:
        return False
    if parent.type in NAMESPACE_DECLARATIONS or parent.type == "using_directive":
        return True
    if parent.type == "qualified_name":
        ancestor = parent
        while ancestor is not None and ancestor.type == "qualified_name":
            ancestor = ancestor.parent
        if ancestor is not None and (ancestor.type in NAMESPACE_DECLARATIONS or ancestor.type == "using_directive"):
            return True
    if parent.type not in _DECLARING_PARENTS:
        return False
    name = parent.child_by_field_name("name")
    if name is not None:
        return same_node(name, node)
    if parent.type == "foreach_statement":
        left = parent.child_by_field_name("left")
        return left is not None and left.start_byte == node.start_byte and left.type == "identifier"
    # Older grammars expose declarator names as a bare identifier child
    return (
        parent.type == "variable_declarator"
        and bool(parent.named_children)
        and same_node(parent.named_children[0], node)
    )


# Members

def declaration_type(node: Node) -> Node | None:
    """The declared (or return) type node of a member, parameter or variable declaration."""
    return node.child_by_field_name("returns") or node.child_by_field_name("type")


def variable_declaration(node: Node) -> Node | None:
    """The variable_declaration of a field or local declaration statement."""
    return first_child_of_type(node, "variable_declaration")


def variable_declarators(declaration: Node) -> list[Node]:
    return children_of_type(declaration, "variable_declarator")


def declarator_name(declarator: Node) -> str:
    name = declarator.child_by_field_name("name")
    if name is None:
        name = first_child_of_type(declarator, "identifier")
    return text(name)


def declarator_initializer(declarator: Node) -> Node | None:
    """The initializer expression of a variable declarator, if any."""
    clause = first_child_of_type(declarator, "equals_value_clause")
    if clause is not None:
        return clause.named_children[0] if clause.named_children else None
    seen_equals = False
    for child in declarator.children:
        if child.type == "=":
            seen_equals = True
        elif seen_equals and child.is_named:
            return child
    return None


def parameter_nodes(declaration: Node) -> list[Node]:
    plist = declaration.child_by_field_name("parameters")
    if plist is None:
        plist = first_child_of_type(declaration, "parameter_list")
    if plist is None:
        return []
    return children_of_type(plist, "parameter")


def parameter_list_text(declaration: Node) -> str:
    plist = declaration.child_by_field_name("parameters") or first_child_of_type(declaration, "parameter_list")
    return normalized_text(plist) if plist is not None else "()"


def parameter_type_text(parameter: Node) -> str:
    type_node = parameter.child_by_field_name("type")
    return normalized_text(type_node) if type_node is not None else "var"


def type_parameter_list_text(declaration: Node) -> str:
    tparams = declaration.child_by_field_name("type_parameters") or first_child_of_type(
        declaration, "type_parameter_list"
    )
    return normalized_text(tparams) if tparams is not None else ""


def method_signature(method: Node) -> str:
    mods = modifiers(method)
    parts = [accessibility(mods)]
    for keyword in ("static", "async", "virtual", "override", "abstract"):
        if keyword in mods:
            parts.append(keyword)
    return_type = normalized_text(declaration_type(method))
    return (
        f"{' '.join(parts)} {return_type} {name_of(method)}"
        f"{type_parameter_list_text(method)}{parameter_list_text(method)}"
    )


def constructor_signature(ctor: Node) -> str:
    mods = modifiers(ctor)
    parts = [accessibility(mods)]
    if "static" in mods:
        parts.append("static")
    return f"{' '.join(parts)} {name_of(ctor)}{parameter_list_text(ctor)}"


def accessor_kinds(property_node: Node) -> set[str]:
    """Accessor keywords (get/set/init) declared on a property."""
    accessors = property_node.child_by_field_name("accessors") or first_child_of_type(
        property_node, "accessor_list"
    )
    if accessors is None:
        return set()
    return {
        keyword
        for accessor in children_of_type(accessors, "accessor_declaration")
        for keyword in [accessor_keyword(accessor)]
        if keyword
    }


def accessor_keyword(accessor: Node) -> str:
    """The get/set/init keyword of one accessor declaration, or an empty string."""
    for child in accessor.children:
        if child.type in ("get", "set", "init"):
            return child.type
        if child.type in ("identifier", "accessor_keyword") or not child.is_named:
            word = text(child)
            if word in ("get", "set", "init"):
                return word
    return ""


def has_expression_body(node: Node) -> bool:
    return first_child_of_type(node, "arrow_expression_clause") is not None or (
        node.child_by_field_name("value") is not None
    )


def source_with_comments(tree: SyntaxTree, node: Node) -> str:
    """Full source lines of a declaration, including comments directly above it."""
    start = node
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        start = sibling
        sibling = sibling.prev_sibling
    first, last = line_of(start), node.end_point[0] + 1
    return "\n".join(tree.line_text(line) for line in range(first, last + 1)) + "\n"


def member_declarations(type_decl: Node) -> list[Node]:
    """Direct member declarations in a type body."""
    body = type_decl.child_by_field_name("body") or first_child_of_type(type_decl, "declaration_list")
    if body is None:
        return []
    return [child for child in body.named_children]


# Attributes

def attributes(node: Node) -> list[Node]:
    """Attributes applied directly to a declaration, in source order."""
    found = []
    for attr_list in children_of_type(node, "attribute_list"):
        # Skip target-specified lists like [return: ...]
        if first_child_of_type(attr_list, "attribute_target_specifier") is not None:
            continue
        found.extend(children_of_type(attr_list, "attribute"))
    return found


def attribute_name(attribute: Node) -> str:
    name = attribute.child_by_field_name("name")
    if name is None:
        for child in attribute.named_children:
            if child.type != "attribute_argument_list":
                name = child
                break
    return normalized_text(name)


def attribute_arguments(attribute: Node) -> list[Node]:
    arg_list = first_child_of_type(attribute, "attribute_argument_list")
    if arg_list is None:
        return []
    return children_of_type(arg_list, "attribute_argument")


def argument_expression(argument: Node) -> Node | None:
    """The value expression of an argument, skipping ``name:`` / ``Name =`` prefixes."""
    named = [
        child for child in argument.named_children
        if child.type not in ("name_colon", "name_equals")
    ]
    return named[-1] if named else None


def unescape(value: str) -> str:
    def _replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape[0] in "uUx" and len(escape) > 1:
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)

    return _ESCAPE.sub(_replace, value)


def literal_value(expression: Node) -> str:
    """Value of a literal expression the way a compiler would see the token's value text.

    Regular and verbatim strings are unescaped, interpolated strings are
    returned as written, and anything else falls back to its text with
    surrounding quotes trimmed.
    """
    raw = text(expression)
    if expression.type == "string_literal":
        if raw.startswith("@") or raw.startswith('$@') or raw.startswith('@$'):
            return raw[raw.index('"') + 1:-1].replace('""', '"') if raw.endswith('"') else raw
        body = raw[1:-1] if len(raw) >= 2 and raw.startswith('"') else raw
        return unescape(body)
    if expression.type == "verbatim_string_literal":
        return raw[2:-1].replace('""', '"')
    if expression.type == "raw_string_literal":
        stripped = raw.strip('"')
        return stripped.strip("\n").strip() if "\n" in stripped else stripped
    if expression.type == "interpolated_string_expression":
        return raw
    if expression.type == "character_literal":
        return unescape(raw[1:-1])
    return raw.strip('"')


def split_pascal_case(name: str) -> str:
    return _PASCAL_SPLIT.sub(r"\1 \2", name)
