"""Tests for parsing and semantic binding."""

from types import SimpleNamespace

import pytest

from csnav.engine.matching import symbols_match
from csnav.frontend import CSharpCompilation, CSharpParser, syntax
from csnav.frontend.protocol import Compilation, SemanticBinder


SHAPES = """\
namespace Demo.Shapes
{
    public interface IShape
    {
        double Area();
    }

    public class Square : IShape
    {
        public double Side { get; set; }

        public virtual double Area() => Side * Side;
    }

    public class Cube : Square
    {
        public override double Area()
        {
            return base.Area() * 6;
        }
    }

    public struct Point : IShape
    {
        public double Area() => 0;
    }
}
"""

USES = """\
using Demo.Shapes;

namespace Demo.App
{
    public class Report
    {
        private readonly IShape _shape;

        public double Total()
        {
            var cube = new Cube();
            var square = new Square();
            return cube.Area() + square.Area() + _shape.Area();
        }
    }
}
"""


@pytest.fixture
def parser():
    return CSharpParser()


@pytest.fixture
def trees(parser):
    return [parser.parse(SHAPES, "Shapes.cs"), parser.parse(USES, "Uses.cs")]


@pytest.fixture
def compilation(trees):
    return CSharpCompilation("Demo", trees)


def _node(tree, node_type, name):
    for node in syntax.descendants_of_type(tree.root, node_type):
        if syntax.name_of(node) == name:
            return node
    raise AssertionError(f"No {node_type} named {name}")


def _invocations(tree):
    return list(syntax.descendants_of_type(tree.root, "invocation_expression"))


class TestParser:
    """Tree-sitter parsing wrapper."""

    def test_parse_keeps_text_and_lines(self, parser):
        tree = parser.parse("class A\n{\n}\n", "A.cs")

        assert tree.path == "A.cs"
        assert tree.root.type == "compilation_unit"
        assert tree.line_text(1) == "class A"
        assert tree.line_text(99) == ""

    def test_contains_text_is_case_insensitive(self, parser):
        tree = parser.parse("class Calculator {}", "A.cs")

        assert tree.contains_text("calculator")
        assert not tree.contains_text("Adder")

    def test_broken_source_still_parses(self, parser):
        """Syntax errors leave a partial tree rather than failing."""
        tree = parser.parse("class A { void M( { }", "A.cs")

        assert tree.root.has_error

    def test_parse_file_strips_bom(self, parser, tmp_path):
        path = tmp_path / "Bom.cs"
        path.write_bytes("\ufeffclass Bom {}".encode("utf-8"))

        tree = parser.parse_file(path)

        assert tree.text.startswith("class")


class TestCompilation:
    """Declarations, base types and interfaces."""

    def test_protocols_satisfied(self, compilation, trees):
        assert isinstance(compilation, Compilation)
        assert isinstance(compilation.semantic_model(trees[0]), SemanticBinder)

    def test_foreign_tree_rejected(self, compilation, parser):
        with pytest.raises(KeyError):
            compilation.semantic_model(parser.parse("class X {}", "Other.cs"))

    def test_declared_types(self, compilation):
        names = [symbol.display_string() for symbol in compilation.types]

        assert "Demo.Shapes.Square" in names
        assert "Demo.App.Report" in names

    def test_base_chain_and_interfaces(self, compilation, trees):
        model = compilation.semantic_model(trees[0])
        cube = model.declared_symbol(_node(trees[0], "class_declaration", "Cube"))

        assert [base.name for base in cube.base_chain()] == ["Square", "object"]
        assert [interface.name for interface in cube.all_interfaces()] == ["IShape"]

    def test_struct_is_value_type(self, compilation, trees):
        model = compilation.semantic_model(trees[0])
        point = model.declared_symbol(_node(trees[0], "struct_declaration", "Point"))

        assert point.is_value_type
        assert [interface.name for interface in point.interfaces] == ["IShape"]

    def test_override_links_to_base_method(self, compilation, trees):
        model = compilation.semantic_model(trees[0])
        cube = model.declared_symbol(_node(trees[0], "class_declaration", "Cube"))
        area = cube.members_named("Area", {"method"})[0]

        assert area.overridden_method is not None
        assert area.overridden_method.display_string() == "Demo.Shapes.Square.Area()"


class TestSemanticModel:
    """Reference binding."""

    def test_base_call_binds_to_base_method(self, compilation, trees):
        model = compilation.semantic_model(trees[0])
        (call,) = _invocations(trees[0])

        assert model.symbol_info(call).first().display_string() == "Demo.Shapes.Square.Area()"

    def test_calls_bind_through_receiver_types(self, compilation, trees):
        """Receivers typed by var, a field and an interface bind to the right owner."""
        model = compilation.semantic_model(trees[1])
        bound = [model.symbol_info(call).first().display_string() for call in _invocations(trees[1])]

        assert bound == [
            "Demo.Shapes.Cube.Area()",
            "Demo.Shapes.Square.Area()",
            "Demo.Shapes.IShape.Area()",
        ]

    def test_creation_type(self, compilation, trees):
        model = compilation.semantic_model(trees[1])
        creations = list(syntax.descendants_of_type(trees[1].root, "object_creation_expression"))

        assert [model.type_info(creation).name for creation in creations] == ["Cube", "Square"]

    def test_symbols_from_two_compilations_match(self, trees):
        """Separate compilations produce distinct symbols for one declaration."""
        first = CSharpCompilation("First", trees)
        second = CSharpCompilation("Second", [trees[1]], [trees[0]])
        square_node = _node(trees[0], "class_declaration", "Square")

        square = first.semantic_model(trees[0]).declared_symbol(square_node)
        creation = list(syntax.descendants_of_type(trees[1].root, "object_creation_expression"))[1]
        other = second.semantic_model(trees[1]).type_info(creation)

        assert other is not square
        assert symbols_match(square, other)
        assert not symbols_match(square, None)


class TestLiteralValue:
    """String literal values as the compiler sees them."""

    def test_regular_and_verbatim(self, parser):
        tree = parser.parse('class A { string a = "tab\\there"; string b = @"say ""hi"""; }', "A.cs")

        (regular,) = syntax.descendants_of_type(tree.root, "string_literal")
        (verbatim,) = syntax.descendants_of_type(tree.root, "verbatim_string_literal")

        assert syntax.literal_value(regular) == "tab\there"
        assert syntax.literal_value(verbatim) == 'say "hi"'

    @pytest.mark.parametrize("raw", [b'@"say ""hi"""', b'$@"say ""hi"""', b'@$"say ""hi"""'])
    def test_prefixed_string_tokens(self, raw):
        token = SimpleNamespace(type="string_literal", text=raw)

        assert syntax.literal_value(token) == 'say "hi"'
