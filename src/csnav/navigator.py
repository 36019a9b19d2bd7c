"""Query facade: one method per navigation query."""

from __future__ import annotations

import logging
from typing import Optional

from .config import Config
from .engine import (
    AttributeMatcher,
    DependencyAnalyzer,
    HierarchyWalker,
    ReferenceScanner,
    StructureInspector,
    SymbolLocator,
)
from .errors import InvalidQueryError
from .features import FeatureScanner
from .models import (
    AttributeSearchResult,
    CallersResult,
    ClassListResult,
    ClassStructure,
    ConstructorDepsResult,
    FeatureScenariosResult,
    HierarchyResult,
    ImplementationResult,
    InstantiationResult,
    InterfaceConsumersResult,
    MethodResult,
    MethodsResult,
    NamespaceStructureResult,
    OverridableResult,
    StepDefinitionResult,
    SymbolSearchResult,
    UsageResult,
)
from .workspace import Workspace, WorkspaceCache

logger = logging.getLogger(__name__)


def require(value: Optional[str], label: str) -> str:
    """Return ``value`` stripped, or raise InvalidQueryError when it is missing or blank."""
    if value is None or not value.strip():
        raise InvalidQueryError(f"{label} is required", query=value)
    return value.strip()


class Navigator:
    """Answers navigation queries against cached workspaces.

    Each method validates its required identifiers before loading anything,
    then runs a single engine query over the workspace for ``solution``.
    Results are immutable records; failures are NavigatorError subclasses.
    """

    def __init__(self, cache: Optional[WorkspaceCache] = None, config: Optional[Config] = None):
        self.config = config or Config()
        self.cache = cache or WorkspaceCache(self.config)

    def workspace(self, solution: str) -> Workspace:
        return self.cache.get(require(solution, "Solution path"))

    # Symbols and references

    def find_symbol(self, solution: str, name: str, kind: Optional[str] = None) -> SymbolSearchResult:
        name = require(name, "Symbol name")
        return SymbolLocator(self.workspace(solution)).find_symbol(name, kind)

    def find_usages(self, solution: str, symbol: str, pattern: Optional[str] = None) -> UsageResult:
        symbol = require(symbol, "Symbol name")
        return self._references(solution).find_usages(symbol, pattern)

    def find_callers(self, solution: str, symbol: str) -> CallersResult:
        symbol = require(symbol, "Method name")
        return self._references(solution).find_callers(symbol)

    def find_instantiations(self, solution: str, class_name: str) -> InstantiationResult:
        class_name = require(class_name, "Class name")
        return self._references(solution).find_instantiations(class_name)

    def _references(self, solution: str) -> ReferenceScanner:
        return ReferenceScanner(self.workspace(solution), prefilter=self.config.prefilter)

    # Hierarchy

    def find_implementations(self, solution: str, interface: str) -> ImplementationResult:
        interface = require(interface, "Interface name")
        return HierarchyWalker(self.workspace(solution)).find_implementations(interface)

    def get_hierarchy(self, solution: str, class_name: str) -> HierarchyResult:
        class_name = require(class_name, "Class name")
        return HierarchyWalker(self.workspace(solution)).get_hierarchy(class_name)

    # Attributes

    def find_by_attribute(self, solution: str, attribute: str, pattern: Optional[str] = None) -> AttributeSearchResult:
        attribute = require(attribute, "Attribute name")
        return AttributeMatcher(self.workspace(solution)).find_by_attribute(attribute, pattern or None)

    def find_step_definitions(self, solution: str, pattern: str) -> StepDefinitionResult:
        pattern = require(pattern, "Pattern")
        return AttributeMatcher(self.workspace(solution)).find_step_definitions(pattern)

    # Dependencies

    def get_constructor_deps(self, solution: str, class_name: str) -> ConstructorDepsResult:
        class_name = require(class_name, "Class name")
        return DependencyAnalyzer(self.workspace(solution)).constructor_deps(class_name)

    def find_interface_consumers(self, solution: str, interface: str) -> InterfaceConsumersResult:
        interface = require(interface, "Interface name")
        return DependencyAnalyzer(self.workspace(solution)).interface_consumers(interface)

    # Features

    def list_feature_scenarios(self, path: str) -> FeatureScenariosResult:
        path = require(path, "Path")
        return FeatureScanner(self.config).scan(path)

    # Structure

    def list_class(self, solution: str, file_path: str, class_name: str) -> ClassStructure:
        file_path = require(file_path, "File path")
        class_name = require(class_name, "Class name")
        return StructureInspector(self.workspace(solution)).list_class(file_path, class_name)

    def get_method(
        self,
        solution: str,
        method: str,
        class_name: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> MethodResult:
        method = require(method, "Method name")
        return StructureInspector(self.workspace(solution)).get_method(method, class_name or None, file_path or None)

    def get_methods(self, solution: str, class_name: str, methods: str) -> MethodsResult:
        class_name = require(class_name, "Class name")
        methods = require(methods, "Method names")
        return StructureInspector(self.workspace(solution)).get_methods(class_name, methods)

    def list_classes(self, solution: str, namespace: str) -> ClassListResult:
        namespace = require(namespace, "Namespace")
        return StructureInspector(self.workspace(solution)).list_classes(namespace)

    def get_namespace_structure(self, solution: str, project: str) -> NamespaceStructureResult:
        project = require(project, "Project name")
        return StructureInspector(self.workspace(solution)).get_namespace_structure(project)

    def check_overridable(self, solution: str, class_name: str, method: str) -> OverridableResult:
        class_name = require(class_name, "Class name")
        method = require(method, "Method name")
        return StructureInspector(self.workspace(solution)).check_overridable(class_name, method)
