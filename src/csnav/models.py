"""Result records returned by navigator queries."""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Immutable result record serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# Symbols

class SymbolLocation(Record):
    file_path: str
    line_range: List[int]
    namespace: str
    full_name: str


class SymbolSearchResult(Record):
    symbol_name: str
    kind: str
    results: List[SymbolLocation] = Field(default_factory=list)


# Cross references

class UsageInfo(Record):
    file_path: str
    line: int
    column: int
    context_code: str
    method_context: str


class UsageResult(Record):
    symbol_name: str
    total_usages: int
    usages: List[UsageInfo] = Field(default_factory=list)


class CallerInfo(Record):
    caller_class: str
    caller_method: str
    file_path: str
    line: int
    context_code: str


class CallersResult(Record):
    symbol: str
    callers: List[CallerInfo] = Field(default_factory=list)
    total_count: int


class InstantiationInfo(Record):
    file_path: str
    line: int
    containing_method: str
    containing_class: str
    context_code: str


class InstantiationResult(Record):
    class_name: str
    instantiations: List[InstantiationInfo] = Field(default_factory=list)
    total_count: int


# Hierarchy

class ImplementationInfo(Record):
    name: str
    kind: str
    file_path: str
    line: int
    namespace: str


class ImplementationResult(Record):
    interface: str
    implementations: List[ImplementationInfo] = Field(default_factory=list)
    total_count: int


class DerivedTypeInfo(Record):
    name: str
    kind: str
    file_path: str
    line: int
    namespace: str


class HierarchyResult(Record):
    class_name: str
    file_path: str
    namespace: str
    base_types: List[str] = Field(default_factory=list)
    interfaces: List[str] = Field(default_factory=list)
    derived_types: List[DerivedTypeInfo] = Field(default_factory=list)


# Attributes

class AttributeMatchInfo(Record):
    member_type: str  # "class", "method", "property", "field", "parameter"
    name: str
    attribute_arguments: str
    file_path: str
    line: int
    containing_class: str
    namespace: str


class AttributeSearchResult(Record):
    attribute: str
    pattern: Optional[str] = None
    matches: List[AttributeMatchInfo] = Field(default_factory=list)
    total_count: int


class StepDefinitionInfo(Record):
    type: str
    regex: str
    file_path: str
    class_name: str
    method_name: str
    start_line: int
    end_line: int
    line_count: int
    scope: str


class StepDefinitionResult(Record):
    pattern: str
    matches: List[StepDefinitionInfo] = Field(default_factory=list)
    total_count: int


# Dependencies

class ConstructorParameterInfo(Record):
    name: str
    type: str
    full_type_name: str


class ConstructorInfo(Record):
    parameters: List[ConstructorParameterInfo] = Field(default_factory=list)
    line_range: List[int]
    signature: str


class MemberDependencyInfo(Record):
    kind: str  # "field" or "property"
    name: str
    type: str
    full_type_name: str
    line: int


class ConstructorDepsResult(Record):
    class_name: str
    file_path: str
    namespace: str
    constructors: List[ConstructorInfo] = Field(default_factory=list)
    members: List[MemberDependencyInfo] = Field(default_factory=list)


class InjectionInfo(Record):
    class_name: str
    member_name: str
    member_type: str  # "constructor-parameter", "field", "property"
    file_path: str
    line: int


class InterfaceConsumersResult(Record):
    interface: str
    defined_in: Optional[str] = None
    definition_line: Optional[int] = None
    implementations: List[ImplementationInfo] = Field(default_factory=list)
    injections: List[InjectionInfo] = Field(default_factory=list)


# Feature files

class ScenarioInfo(Record):
    line: int
    name: str


class FeatureInfo(Record):
    file: str
    name: str
    scenarios: List[ScenarioInfo] = Field(default_factory=list)


class FeatureSummary(Record):
    total_features: int
    total_scenarios: int


class FeatureScenariosResult(Record):
    path: str
    features: List[FeatureInfo] = Field(default_factory=list)
    summary: FeatureSummary


# Structure

class ParameterInfo(Record):
    name: str
    type: str


class MemberInfo(Record):
    kind: str
    name: str
    type: Optional[str] = None
    line: Optional[int] = None
    line_range: Optional[List[int]] = None
    signature: Optional[str] = None
    accessibility: str
    is_readonly: Optional[bool] = None
    is_async: Optional[bool] = None
    is_static: Optional[bool] = None
    return_type: Optional[str] = None
    parameters: Optional[List[ParameterInfo]] = None
    has_getter: Optional[bool] = None
    has_setter: Optional[bool] = None


class ClassStructure(Record):
    class_name: str
    namespace: str
    line_range: List[int]
    file_path: str
    members: List[MemberInfo] = Field(default_factory=list)


class MethodResult(Record):
    method_name: str
    class_name: str
    line_range: List[int]
    file_path: str
    signature: str
    accessibility: str
    is_async: bool
    return_type: str
    parameters: List[ParameterInfo] = Field(default_factory=list)
    source_code: str


class MethodInfo(Record):
    name: str
    signature: str
    line_range: List[int]
    source_code: str
    return_type: str
    parameters: List[ParameterInfo] = Field(default_factory=list)
    accessibility: str
    is_async: bool


class MethodsResult(Record):
    class_name: str
    file_path: str
    methods: List[MethodInfo] = Field(default_factory=list)


class ClassInfo(Record):
    name: str
    file_path: str
    line_range: List[int]
    accessibility: str
    is_static: bool


class ClassListResult(Record):
    namespace: str
    total_classes: int
    classes: List[ClassInfo] = Field(default_factory=list)


class NamespaceInfo(Record):
    name: str
    class_count: int
    classes: List[str] = Field(default_factory=list)


class NamespaceStructureResult(Record):
    project_name: str
    namespaces: List[NamespaceInfo] = Field(default_factory=list)


class OverridableResult(Record):
    class_name: str
    method_name: str
    is_virtual: bool
    is_override: bool
    is_abstract: bool
    is_sealed: bool
    can_be_overridden: bool
    base_method: Optional[str] = None
    file_path: str
    line: int


# Errors

class ErrorInfo(Record):
    code: str
    message: str


class ErrorResult(Record):
    success: bool = False
    error: ErrorInfo
