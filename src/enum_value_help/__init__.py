"""Enum Value Help - generic value lists for enum fields of entity models."""

from enum_value_help.config import Settings, get_settings
from enum_value_help.enricher import enrich
from enum_value_help.extraction import constant_in_filter
from enum_value_help.filters import (
    FilterNode,
    FilterTree,
    Group,
    Opaque,
    Operator,
    Ref,
    Token,
    Val,
    filter_tree_from_cqn,
)
from enum_value_help.parsing import FilterParser, parse_filter
from enum_value_help.resolver import ReadRequest, resolve_value_help, resolve_value_rows
from enum_value_help.schema import SchemaGraph
from enum_value_help.service import (
    ApplicationService,
    EnumValueHelpPlugin,
    Service,
    application_services,
)
from enum_value_help.types import (
    AnnotationKey,
    Annotations,
    Definition,
    DefinitionKind,
    EnumMember,
    FieldDefinition,
    ValueList,
    ValueListParameterConstant,
    ValueListParameterInOut,
)

__all__ = [
    # Main API
    "SchemaGraph",
    "enrich",
    "constant_in_filter",
    "resolve_value_help",
    "resolve_value_rows",
    "ReadRequest",
    # Host seams
    "Service",
    "ApplicationService",
    "EnumValueHelpPlugin",
    "application_services",
    # Filters
    "FilterNode",
    "FilterTree",
    "Group",
    "Opaque",
    "Operator",
    "Ref",
    "Token",
    "Val",
    "filter_tree_from_cqn",
    "FilterParser",
    "parse_filter",
    # Schema nodes
    "AnnotationKey",
    "Annotations",
    "Definition",
    "DefinitionKind",
    "EnumMember",
    "FieldDefinition",
    "ValueList",
    "ValueListParameterConstant",
    "ValueListParameterInOut",
    # Configuration
    "Settings",
    "get_settings",
]

__version__ = "0.1.0"
