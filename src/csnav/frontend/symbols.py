"""Semantic symbols produced by the binder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from tree_sitter import Node
    from .parser import SyntaxTree


# Named type kinds that come from declarations
DECLARED_TYPE_KINDS = frozenset({"class", "struct", "interface", "record", "enum", "delegate"})

# Every kind that denotes a type
TYPE_KINDS = DECLARED_TYPE_KINDS | {"special", "type_parameter", "array", "nullable", "error"}

MEMBER_KINDS = frozenset({"method", "constructor", "property", "field"})

VALUE_TYPE_KINDS = frozenset({"struct", "enum"})


@dataclass(frozen=True, eq=False)
class Declaration:
    """Where a symbol is declared: a tree plus the declaring node."""

    tree: SyntaxTree
    node: Node


@dataclass(eq=False)
class Symbol:
    """A declared program entity or a type reference.

    Symbols compare by identity. Two symbols created by different
    compilations for the same declaration are different objects; use
    ``csnav.engine.matching.symbols_match`` to compare them.
    """

    name: str
    kind: str
    namespace: str = ""
    containing_type: Symbol | None = None
    declarations: list[Declaration] = field(default_factory=list)
    modifiers: frozenset[str] = frozenset()

    # Types
    type_parameters: list[Symbol] = field(default_factory=list)
    type_arguments: list[Symbol] = field(default_factory=list)
    definition: Symbol | None = None
    base_type: Symbol | None = None
    interfaces: list[Symbol] = field(default_factory=list)
    members: list[Symbol] = field(default_factory=list)
    element_type: Symbol | None = None
    is_value_type: bool = False

    # Members, parameters and locals
    type: Symbol | None = None
    type_text: str = ""
    parameters: list[Symbol] = field(default_factory=list)
    overridden_method: Symbol | None = None
    optional_parameters: int = 0
    has_params_array: bool = False

    def __repr__(self) -> str:
        return f"Symbol({self.kind} {self.display_string()})"

    @property
    def original_definition(self) -> Symbol:
        """The unsubstituted form: the generic definition for a constructed type, else itself."""
        return self.definition if self.definition is not None else self

    @property
    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS

    @property
    def declaration(self) -> Declaration | None:
        return self.declarations[0] if self.declarations else None

    def base_chain(self) -> Iterator[Symbol]:
        """Yield base types from the nearest up to and including the root."""
        seen: set[int] = set()
        current = self.original_definition.base_type
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            yield current
            current = current.original_definition.base_type

    def all_interfaces(self) -> list[Symbol]:
        """Transitive interface set: own interfaces with their bases, then the base type's."""
        result: list[Symbol] = []
        seen: set[str] = set()

        def _add(interface: Symbol, depth: int = 0) -> None:
            key = interface.display_string()
            if key in seen or depth > 32:
                return
            seen.add(key)
            result.append(interface)
            for inherited in interface.original_definition.interfaces:
                _add(inherited, depth + 1)

        for interface in self.original_definition.interfaces:
            _add(interface)
        for base in self.base_chain():
            for interface in base.original_definition.interfaces:
                _add(interface)
        return result

    def members_named(self, name: str, kinds: frozenset[str] | set[str] | None = None) -> list[Symbol]:
        return [
            member for member in self.original_definition.members
            if member.name == name and (kinds is None or member.kind in kinds)
        ]

    def display_string(self) -> str:
        """Fully qualified string form, e.g. ``Ns.Calculator.Add(int, int)``."""
        return self._render(global_prefix=False)

    def fully_qualified_name(self) -> str:
        """Fully qualified form with ``global::`` qualification on named types."""
        return self._render(global_prefix=True)

    def _render(self, global_prefix: bool) -> str:
        if self.kind in ("special", "type_parameter"):
            return self.name
        if self.kind == "array":
            return f"{self.element_type._render(global_prefix) if self.element_type else '?'}[]"
        if self.kind == "nullable":
            return f"{self.element_type._render(global_prefix) if self.element_type else '?'}?"
        if self.kind == "error":
            return self.name + self._render_type_arguments(global_prefix)
        if self.is_type:
            return self._qualifier(global_prefix) + self.name + self._render_type_arguments(global_prefix)
        if self.kind in ("parameter", "local"):
            return self.name

        owner = self.containing_type._render(global_prefix) if self.containing_type else ""
        prefix = f"{owner}." if owner else ""
        if self.kind in ("method", "constructor"):
            name = self.containing_type.name if self.kind == "constructor" and self.containing_type else self.name
            tparams = ""
            if self.type_parameters:
                tparams = "<" + ", ".join(tp.name for tp in self.type_parameters) + ">"
            params = ", ".join(p.parameter_type_display(global_prefix) for p in self.parameters)
            return f"{prefix}{name}{tparams}({params})"
        return f"{prefix}{self.name}"

    def _qualifier(self, global_prefix: bool) -> str:
        if self.containing_type is not None:
            return self.containing_type.original_definition._render(global_prefix) + "."
        if self.namespace:
            return ("global::" if global_prefix else "") + self.namespace + "."
        return "global::" if global_prefix else ""

    def _render_type_arguments(self, global_prefix: bool) -> str:
        if self.type_arguments:
            return "<" + ", ".join(arg._render(global_prefix) for arg in self.type_arguments) + ">"
        if self.type_parameters:
            return "<" + ", ".join(tp.name for tp in self.type_parameters) + ">"
        return ""

    def parameter_type_display(self, global_prefix: bool = False) -> str:
        if self.type is not None:
            return self.type._render(global_prefix)
        return self.type_text or "?"


def construct(definition: Symbol, arguments: list[Symbol]) -> Symbol:
    """Build a constructed generic type from a definition and its type arguments."""
    return Symbol(
        name=definition.name,
        kind=definition.kind,
        namespace=definition.namespace,
        containing_type=definition.containing_type,
        type_arguments=list(arguments),
        definition=definition,
        is_value_type=definition.is_value_type,
    )


def array_of(element: Symbol) -> Symbol:
    return Symbol(name=f"{element.name}[]", kind="array", element_type=element, base_type=WELL_KNOWN["Array"])


def nullable_of(element: Symbol) -> Symbol:
    return Symbol(name=f"{element.name}?", kind="nullable", element_type=element, is_value_type=True)


def unresolved(name: str, arguments: list[Symbol] | None = None) -> Symbol:
    """A type the workspace cannot resolve, kept so generic arguments stay inspectable."""
    return Symbol(name=name, kind="error", type_arguments=list(arguments or []))


# Built-in types. These are shared by every compilation.

OBJECT = Symbol(name="object", kind="special")

_VALUE_TYPE = Symbol(name="ValueType", kind="class", namespace="System", base_type=OBJECT)
_ENUM = Symbol(name="Enum", kind="class", namespace="System", base_type=_VALUE_TYPE)

_SPECIAL_VALUE_KEYWORDS = (
    "bool", "byte", "sbyte", "char", "decimal", "double", "float",
    "int", "uint", "long", "ulong", "short", "ushort", "nint", "nuint",
)

SPECIAL_TYPES: dict[str, Symbol] = {"object": OBJECT}
SPECIAL_TYPES["string"] = Symbol(name="string", kind="special", base_type=OBJECT)
SPECIAL_TYPES["void"] = Symbol(name="void", kind="special")
SPECIAL_TYPES["dynamic"] = Symbol(name="dynamic", kind="special")
for _keyword in _SPECIAL_VALUE_KEYWORDS:
    SPECIAL_TYPES[_keyword] = Symbol(name=_keyword, kind="special", base_type=_VALUE_TYPE, is_value_type=True)

# System names that alias the keywords above
SPECIAL_ALIASES = {
    "Object": "object", "String": "string", "Boolean": "bool", "Byte": "byte", "SByte": "sbyte",
    "Char": "char", "Decimal": "decimal", "Double": "double", "Single": "float", "Int32": "int",
    "UInt32": "uint", "Int64": "long", "UInt64": "ulong", "Int16": "short", "UInt16": "ushort",
    "Void": "void",
}


def _well_known(name: str, kind: str, namespace: str, arity: int = 0) -> Symbol:
    symbol = Symbol(name=name, kind=kind, namespace=namespace)
    symbol.type_parameters = [
        Symbol(name="T" if arity == 1 else f"T{index + 1}", kind="type_parameter")
        for index in range(arity)
    ]
    if kind in ("class", "record"):
        symbol.base_type = OBJECT
    return symbol


# Frequently referenced framework types, keyed by (name, arity)
_WELL_KNOWN_TABLE = [
    ("Array", "class", "System", 0),
    ("Exception", "class", "System", 0),
    ("DateTime", "struct", "System", 0),
    ("Guid", "struct", "System", 0),
    ("TimeSpan", "struct", "System", 0),
    ("Attribute", "class", "System", 0),
    ("Action", "delegate", "System", 0),
    ("Func", "delegate", "System", 1),
    ("Func", "delegate", "System", 2),
    ("Func", "delegate", "System", 3),
    ("Lazy", "class", "System", 1),
    ("Nullable", "struct", "System", 1),
    ("IDisposable", "interface", "System", 0),
    ("List", "class", "System.Collections.Generic", 1),
    ("IList", "interface", "System.Collections.Generic", 1),
    ("ICollection", "interface", "System.Collections.Generic", 1),
    ("IEnumerable", "interface", "System.Collections.Generic", 1),
    ("IReadOnlyList", "interface", "System.Collections.Generic", 1),
    ("IReadOnlyCollection", "interface", "System.Collections.Generic", 1),
    ("HashSet", "class", "System.Collections.Generic", 1),
    ("Queue", "class", "System.Collections.Generic", 1),
    ("Stack", "class", "System.Collections.Generic", 1),
    ("Dictionary", "class", "System.Collections.Generic", 2),
    ("IDictionary", "interface", "System.Collections.Generic", 2),
    ("IReadOnlyDictionary", "interface", "System.Collections.Generic", 2),
    ("KeyValuePair", "struct", "System.Collections.Generic", 2),
    ("Task", "class", "System.Threading.Tasks", 0),
    ("Task", "class", "System.Threading.Tasks", 1),
    ("ValueTask", "struct", "System.Threading.Tasks", 0),
    ("ValueTask", "struct", "System.Threading.Tasks", 1),
    ("CancellationToken", "struct", "System.Threading", 0),
]

WELL_KNOWN: dict[str, Symbol] = {}
WELL_KNOWN_GENERIC: dict[tuple[str, int], Symbol] = {}
for _name, _kind, _namespace, _arity in _WELL_KNOWN_TABLE:
    _symbol = _well_known(_name, _kind, _namespace, _arity)
    if _kind in ("struct",):
        _symbol.base_type = _VALUE_TYPE
        _symbol.is_value_type = True
    WELL_KNOWN_GENERIC[(_name, _arity)] = _symbol
    if _arity == 0:
        WELL_KNOWN[_name] = _symbol
WELL_KNOWN["ValueType"] = _VALUE_TYPE
WELL_KNOWN["Enum"] = _ENUM
WELL_KNOWN_GENERIC[("ValueType", 0)] = _VALUE_TYPE
WELL_KNOWN_GENERIC[("Enum", 0)] = _ENUM

VALUE_TYPE = _VALUE_TYPE
ENUM = _ENUM
