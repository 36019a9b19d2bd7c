"""Attribute search and BDD step-definition discovery.

Both queries are purely syntactic: they read attribute names and argument
text from each document's tree and never bind.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from tree_sitter import Node

from ..frontend import syntax
from ..models import AttributeMatchInfo, AttributeSearchResult, StepDefinitionInfo, StepDefinitionResult
from .base import WorkspaceQuery
from .matching import attribute_name_matches, contains_ignore_case

logger = logging.getLogger(__name__)

# Step binding attribute names; the first one a written name matches is reported as the step type
STEP_ATTRIBUTE_NAMES = ("Given", "When", "Then", "And", "But", "StepDefinition")

STEP_CLASS_SUFFIXES = ("Steps", "StepDefinitions", "StepDefs")

UNKNOWN = "(unknown)"


def derive_scope(class_name: str) -> str:
    """Human-readable scope from a step class name: ``CalculatorSteps`` -> ``Calculator``."""
    name = class_name
    for suffix in STEP_CLASS_SUFFIXES:
        if name.lower().endswith(suffix.lower()):
            name = name[: -len(suffix)]
            break
    return syntax.split_pascal_case(name)


def step_type(written_name: str) -> Optional[str]:
    """The step keyword an attribute name denotes, or None for other attributes."""
    lowered = written_name.lower()
    for name in STEP_ATTRIBUTE_NAMES:
        candidate = name.lower()
        if lowered in (candidate, candidate + "attribute") or lowered.endswith("." + candidate):
            return name
    return None


def first_argument_text(attribute: Node) -> Optional[str]:
    """Value of an attribute's first argument, or None when it has no arguments."""
    arguments = syntax.attribute_arguments(attribute)
    if not arguments:
        return None
    expression = syntax.argument_expression(arguments[0])
    if expression is None:
        return None
    return syntax.literal_value(expression)


class AttributeMatcher(WorkspaceQuery):
    """Searches declarations for attributes by name and argument text."""

    def find_by_attribute(self, attribute_name: str, pattern: Optional[str] = None) -> AttributeSearchResult:
        """Methods, type declarations, properties, fields and parameters carrying a matching attribute.

        The attribute name matches with or without its ``Attribute`` suffix
        and as the last segment of a qualified name. When ``pattern`` is
        given, the attribute's text must also contain it. Each declaration
        is reported once, with the first qualifying attribute.
        """
        matches: List[AttributeMatchInfo] = []
        for document, tree in self.document_trees():
            file_path = self.relative(document.path)
            root = tree.root

            def _emit(nodes: Iterable[Node], member_type: Optional[str], name_for, default_class: str = "(global)"):
                for node in nodes:
                    found = self._matching_attribute(node, attribute_name, pattern)
                    if found is None:
                        continue
                    matches.append(
                        AttributeMatchInfo(
                            member_type=member_type or syntax.TYPE_DECLARATIONS[node.type],
                            name=name_for(node),
                            attribute_arguments=found,
                            file_path=file_path,
                            line=syntax.line_of(node),
                            containing_class=syntax.containing_class_name(node) or default_class,
                            namespace=syntax.namespace_of(node),
                        )
                    )

            _emit(syntax.descendants_of_type(root, "method_declaration"), "method", self._name)
            _emit(syntax.descendants_of_type(root, syntax.TYPE_DECLARATIONS), None, self._name, "(none)")
            _emit(syntax.descendants_of_type(root, "property_declaration"), "property", self._name)
            _emit(syntax.descendants_of_type(root, "field_declaration"), "field", self._field_name)
            _emit(syntax.descendants_of_type(root, "parameter"), "parameter", self._parameter_name)

        logger.debug("find_by_attribute %s: %d matches", attribute_name, len(matches))
        return AttributeSearchResult(
            attribute=attribute_name, pattern=pattern, matches=matches, total_count=len(matches)
        )

    @staticmethod
    def _matching_attribute(node: Node, attribute_name: str, pattern: Optional[str]) -> Optional[str]:
        for attribute in syntax.attributes(node):
            if not attribute_name_matches(syntax.attribute_name(attribute), attribute_name):
                continue
            attribute_text = syntax.text(attribute)
            if pattern and not contains_ignore_case(attribute_text, pattern):
                continue
            return f"[{attribute_text}]"
        return None

    @staticmethod
    def _name(node: Node) -> str:
        return syntax.name_of(node) or ""

    @staticmethod
    def _field_name(node: Node) -> str:
        variables = syntax.variable_declaration(node)
        declarators = syntax.variable_declarators(variables) if variables is not None else []
        return syntax.declarator_name(declarators[0]) if declarators else UNKNOWN

    @staticmethod
    def _parameter_name(node: Node) -> str:
        method = syntax.containing_member_name(node) or UNKNOWN
        return f"{method}.{syntax.name_of(node) or ''}"

    def find_step_definitions(self, pattern: str) -> StepDefinitionResult:
        """Step-binding methods whose step text contains ``pattern``, case-insensitively."""
        matches: List[StepDefinitionInfo] = []
        for document, tree in self.document_trees():
            file_path = self.relative(document.path)
            for method in syntax.descendants_of_type(tree.root, "method_declaration"):
                step = self._step_definition(method, pattern, file_path)
                if step is not None:
                    matches.append(step)

        logger.debug("find_step_definitions %s: %d matches", pattern, len(matches))
        return StepDefinitionResult(pattern=pattern, matches=matches, total_count=len(matches))

    @staticmethod
    def _step_definition(method: Node, pattern: str, file_path: str) -> Optional[StepDefinitionInfo]:
        for attribute in syntax.attributes(method):
            matched = step_type(syntax.attribute_name(attribute))
            if matched is None:
                continue
            regex = first_argument_text(attribute)
            if not regex or not contains_ignore_case(regex, pattern):
                continue
            class_name = syntax.containing_class_name(method) or UNKNOWN
            start, end = syntax.line_range(method)
            return StepDefinitionInfo(
                type=matched,
                regex=regex,
                file_path=file_path,
                class_name=class_name,
                method_name=syntax.name_of(method) or "",
                start_line=start,
                end_line=end,
                line_count=end - start + 1,
                scope=derive_scope(class_name),
            )
        return None
