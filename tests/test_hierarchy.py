"""Tests for the type hierarchy walker."""

import pytest

from conftest import CALCULATOR
from csnav.engine import HierarchyWalker
from csnav.errors import SymbolNotFoundError
from csnav.workspace import load_workspace


@pytest.fixture
def walker(workspace):
    return HierarchyWalker(workspace)


class TestGetHierarchy:
    """Base chains, interfaces and derived types."""

    def test_derived_class(self, walker):
        result = walker.get_hierarchy("ScientificCalculator")

        assert result.class_name == "ScientificCalculator"
        assert result.file_path == "SampleProject/Services/Calculator.cs"
        assert result.namespace == "SampleProject.Services"
        assert result.base_types == ["Calculator", "object"]
        assert result.interfaces == ["ICalculator"]
        assert result.derived_types == []

    def test_base_class(self, walker, line_of):
        result = walker.get_hierarchy("Calculator")

        assert result.base_types == ["object"]
        assert result.interfaces == ["ICalculator"]
        assert [(d.name, d.kind, d.line) for d in result.derived_types] == [
            ("ScientificCalculator", "class", line_of(CALCULATOR, "public class ScientificCalculator")),
        ]

    def test_abstract_base(self, walker):
        result = walker.get_hierarchy("BaseProcessor")

        assert [derived.name for derived in result.derived_types] == ["TextProcessor"]
        assert result.interfaces == []

    def test_case_insensitive_lookup(self, walker):
        assert walker.get_hierarchy("textprocessor").base_types == ["BaseProcessor", "object"]

    def test_interface_hierarchy(self, source_dir, config):
        """Interfaces report their inherited interfaces and no derived classes."""
        root = source_dir({"Shapes.cs": (
            "namespace Shapes\n"
            "{\n"
            "    public interface IA { }\n"
            "    public interface IB : IA { }\n"
            "    public class Square : IB { }\n"
            "}\n"
        )})
        walker = HierarchyWalker(load_workspace(str(root), config))

        result = walker.get_hierarchy("IB")

        assert result.class_name == "IB"
        assert result.namespace == "Shapes"
        assert result.base_types == ["object"]
        assert result.interfaces == ["IA"]
        assert result.derived_types == []

    def test_unknown_type(self, walker):
        with pytest.raises(SymbolNotFoundError, match="Class 'Missing' not found in solution"):
            walker.get_hierarchy("Missing")

    def test_no_self_derivation(self, walker):
        for name in ("Calculator", "ScientificCalculator", "BaseProcessor", "Application"):
            result = walker.get_hierarchy(name)
            assert name not in [derived.name for derived in result.derived_types]


class TestFindImplementations:
    """Types whose interface set contains a given interface."""

    def test_direct_and_inherited_implementations(self, walker):
        result = walker.find_implementations("ICalculator")

        assert [(impl.name, impl.kind) for impl in result.implementations] == [
            ("Calculator", "class"),
            ("ScientificCalculator", "class"),
            ("FastCalculator", "struct"),
        ]
        assert result.total_count == 3
        assert all(impl.namespace == "SampleProject.Services" for impl in result.implementations)

    def test_implementations_agree_with_hierarchy(self, walker):
        """Every implementation lists the interface in its own hierarchy."""
        result = walker.find_implementations("ICalculator")

        for impl in result.implementations:
            assert "ICalculator" in walker.get_hierarchy(impl.name).interfaces

    def test_interface_in_other_file(self, walker):
        result = walker.find_implementations("ILogger")

        assert [impl.name for impl in result.implementations] == ["ConsoleLogger"]

    def test_unknown_interface(self, walker):
        with pytest.raises(SymbolNotFoundError, match="Interface 'IMissing' not found in solution"):
            walker.find_implementations("IMissing")

    def test_interface_inheritance(self, source_dir, config):
        """Implementing a derived interface implements its bases too."""
        root = source_dir({"Repo.cs": (
            "namespace Data\n"
            "{\n"
            "    public interface IReader { }\n"
            "    public interface IRepository : IReader { }\n"
            "    public record Store : IRepository;\n"
            "    public class Plain { }\n"
            "}\n"
        )})
        walker = HierarchyWalker(load_workspace(str(root), config))

        result = walker.find_implementations("IReader")

        assert [(impl.name, impl.kind) for impl in result.implementations] == [("Store", "record")]
