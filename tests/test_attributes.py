"""Tests for attribute search and step definitions."""

import pytest

from conftest import CALCULATOR_STEPS
from csnav.engine import AttributeMatcher
from csnav.engine.attributes import derive_scope, step_type
from csnav.workspace import load_workspace


WIDGET = """\
namespace Demo
{
    public class Widget
    {
        [Obsolete("msg")]
        public void Old() { }

        public void Current() { }
    }
}
"""

CONTROLLER = """\
namespace Demo.Api;

[Serializable]
public class Controller
{
    [NonSerialized]
    private int _cache, _other;

    [Required]
    [System.ComponentModel.DataAnnotations.MaxLength(20)]
    public string Name { get; set; }

    [return: NotNull]
    public string Post([FromBody] string body) => body;
}
"""


@pytest.fixture
def matcher(workspace):
    return AttributeMatcher(workspace)


@pytest.fixture
def demo_matcher(source_dir, config):
    root = source_dir({"Widget.cs": WIDGET, "Api/Controller.cs": CONTROLLER})
    return AttributeMatcher(load_workspace(str(root), config))


class TestFindByAttribute:
    """Attribute name and text matching across declaration kinds."""

    def test_single_annotated_member(self, demo_matcher):
        result = demo_matcher.find_by_attribute("Obsolete")

        (match,) = result.matches
        assert match.member_type == "method"
        assert match.name == "Old"
        assert match.attribute_arguments == '[Obsolete("msg")]'
        assert match.containing_class == "Widget"
        assert match.namespace == "Demo"
        assert match.file_path == "Widget.cs"
        assert match.line == 5

    def test_attribute_suffix_optional(self, demo_matcher):
        short = demo_matcher.find_by_attribute("Obsolete")
        long = demo_matcher.find_by_attribute("ObsoleteAttribute")

        assert short.matches == long.matches
        assert long.attribute == "ObsoleteAttribute"

    def test_class_attribute(self, demo_matcher):
        (match,) = demo_matcher.find_by_attribute("Serializable").matches

        assert match.member_type == "class"
        assert match.name == "Controller"
        assert match.containing_class == "(none)"
        assert match.namespace == "Demo.Api"

    def test_every_type_declaration_kind(self, source_dir, config):
        root = source_dir({"Shapes.cs": (
            "namespace Shapes\n"
            "{\n"
            "    [Serializable] public struct Point { }\n"
            "    [Serializable] public record Circle(double Radius);\n"
            "    [Serializable] public interface IShape { }\n"
            "    [Serializable] public enum Color { Red }\n"
            "    public class Canvas\n"
            "    {\n"
            "        [Serializable] public class Layer { }\n"
            "    }\n"
            "}\n"
        )})
        matcher = AttributeMatcher(load_workspace(str(root), config))

        result = matcher.find_by_attribute("Serializable")

        assert [(m.member_type, m.name, m.containing_class) for m in result.matches] == [
            ("struct", "Point", "(none)"),
            ("record", "Circle", "(none)"),
            ("interface", "IShape", "(none)"),
            ("enum", "Color", "(none)"),
            ("class", "Layer", "Canvas"),
        ]
        assert [m.line for m in result.matches] == [3, 4, 5, 6, 9]

    def test_field_reports_first_declarator(self, demo_matcher):
        (match,) = demo_matcher.find_by_attribute("NonSerialized").matches

        assert (match.member_type, match.name) == ("field", "_cache")

    def test_qualified_attribute_name(self, demo_matcher):
        (match,) = demo_matcher.find_by_attribute("MaxLength").matches

        assert (match.member_type, match.name) == ("property", "Name")
        assert match.attribute_arguments == "[System.ComponentModel.DataAnnotations.MaxLength(20)]"

    def test_parameter_attribute(self, demo_matcher):
        (match,) = demo_matcher.find_by_attribute("FromBody").matches

        assert (match.member_type, match.name) == ("parameter", "Post.body")

    def test_return_attributes_ignored(self, demo_matcher):
        assert demo_matcher.find_by_attribute("NotNull").matches == []

    def test_pattern_narrows(self, matcher):
        everything = matcher.find_by_attribute("Obsolete")
        narrowed = matcher.find_by_attribute("Obsolete", pattern="use add")

        assert len(everything.matches) == 2
        assert [match.name for match in narrowed.matches] == ["Sum"]
        assert narrowed.pattern == "use add"
        assert set(narrowed.matches) <= set(everything.matches)

    def test_no_matches(self, matcher):
        result = matcher.find_by_attribute("Obsolete", pattern="nothing like this")

        assert result.matches == []
        assert result.total_count == 0


class TestStepDefinitions:
    """Given/When/Then step bindings."""

    def test_pattern_match(self, matcher, line_of):
        result = matcher.find_step_definitions("calculator")

        assert [(step.type, step.method_name) for step in result.matches] == [
            ("Given", "GivenIHaveEntered"),
            ("StepDefinition", "ClearCalculator"),
        ]
        given = result.matches[0]
        assert given.regex == "I have entered (.*) into the calculator"
        assert given.class_name == "CalculatorSteps"
        assert given.scope == "Calculator"
        assert given.file_path == "SampleProject/Steps/CalculatorSteps.cs"
        assert given.start_line == line_of(CALCULATOR_STEPS, "[Given(")
        assert given.line_count == given.end_line - given.start_line + 1

    def test_verbatim_string_unescaped(self, matcher):
        (step,) = matcher.find_step_definitions('press "add"').matches

        assert step.type == "When"
        assert step.regex == 'I press "add"'

    def test_case_insensitive(self, matcher):
        assert matcher.find_step_definitions("THE RESULT").total_count == 1

    def test_non_step_attributes_ignored(self, matcher):
        assert matcher.find_step_definitions("old calculator").matches == []


class TestStepHelpers:
    """Scope derivation and step keyword recognition."""

    @pytest.mark.parametrize(
        ("class_name", "scope"),
        [
            ("CalculatorSteps", "Calculator"),
            ("UserStepDefinitions", "User"),
            ("ShoppingCartStepDefs", "Shopping Cart"),
            ("Checkout", "Checkout"),
        ],
    )
    def test_derive_scope(self, class_name, scope):
        assert derive_scope(class_name) == scope

    @pytest.mark.parametrize(
        ("written", "expected"),
        [
            ("Given", "Given"),
            ("ThenAttribute", "Then"),
            ("TechTalk.SpecFlow.When", "When"),
            ("but", "But"),
            ("Obsolete", None),
        ],
    )
    def test_step_type(self, written, expected):
        assert step_type(written) == expected
