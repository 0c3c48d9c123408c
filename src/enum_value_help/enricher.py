"""Schema enrichment for fields exposed as enum value lists.

Fields annotated with ``@enumValueHelp`` (or ``@enumValueHelpFixedValues``)
get a ``@Common.ValueList`` descriptor pointing at one generic value-list
entity, and that entity is projected into every service owning such a
field's entity.
"""

from __future__ import annotations

from enum_value_help.config import Settings, get_settings
from enum_value_help.logging import get_logger
from enum_value_help.schema import SchemaGraph
from enum_value_help.types import (
    AnnotationKey,
    Annotations,
    Definition,
    DefinitionKind,
    FieldDefinition,
    ValueList,
    ValueListParameterConstant,
    ValueListParameterInOut,
)

logger = get_logger(__name__)

VALUE_LIST_DOC = "Generic view that exposes enum values for any field annotated with @enumValueHelp"


def has_enum_value_help(field: FieldDefinition) -> bool:
    """Return whether a field carries either value-help marker, whatever its value."""
    return field.annotations.has(AnnotationKey.ENUM_VALUE_HELP) or field.annotations.has(
        AnnotationKey.ENUM_VALUE_HELP_FIXED_VALUES
    )


def enum_fields_of(entity: Definition) -> list[FieldDefinition]:
    """Return the fields of an entity that carry a value-help marker."""
    return [f for f in entity.elements.values() if has_enum_value_help(f)]


def is_enum_value_help_enabled(entity: Definition) -> bool:
    """Return whether an entity takes part in enrichment.

    UNION-backed entities never do. Otherwise a truthy marker on the entity
    or a marker on any of its fields is enough.
    """
    if entity.is_union:
        return False
    if entity.annotations.is_truthy(AnnotationKey.ENUM_VALUE_HELP) or entity.annotations.is_truthy(
        AnnotationKey.ENUM_VALUE_HELP_FIXED_VALUES
    ):
        return True
    return any(has_enum_value_help(f) for f in entity.elements.values())


def _string_field(
    name: str, *, key: bool = False, title: str | None = None, not_computed: bool = True
) -> FieldDefinition:
    annotations = Annotations()
    if not_computed:
        annotations.set(AnnotationKey.CORE_COMPUTED, False)
    if title is not None:
        annotations.set(AnnotationKey.TITLE, title)
    return FieldDefinition(name=name, type="cds.String", key=key, annotations=annotations)


def build_value_list_entity(name: str) -> Definition:
    """Create the global, read-only value-list entity."""
    annotations = Annotations()
    annotations.set(AnnotationKey.READONLY, True)
    annotations.set(AnnotationKey.PERSISTENCE_SKIP, True)
    return Definition(
        name=name,
        kind=DefinitionKind.ENTITY,
        annotations=annotations,
        doc=VALUE_LIST_DOC,
        elements={
            "value": _string_field("value", key=True, title="Value"),
            "entityName": _string_field("entityName"),
            "fieldName": _string_field("fieldName"),
        },
    )


def build_value_list_projection(name: str) -> Definition:
    """Create a service's auto-exposed projection of the value-list entity."""
    annotations = Annotations()
    annotations.set(AnnotationKey.AUTOEXPOSE, True)
    annotations.set(AnnotationKey.READONLY, True)
    return Definition(
        name=name,
        kind=DefinitionKind.ENTITY,
        annotations=annotations,
        elements={
            "value": _string_field("value", key=True, title="Value", not_computed=False),
            "entityName": _string_field("entityName", not_computed=False),
            "fieldName": _string_field("fieldName", not_computed=False),
        },
    )


def build_value_list(value_list_entity: str, entity_name: str, field_name: str) -> ValueList:
    """Create the descriptor linking a field to the value-list entity."""
    return ValueList(
        collection_path=value_list_entity,
        parameters=[
            ValueListParameterInOut(local_data_property=field_name, value_list_property="value"),
            ValueListParameterConstant(value_list_property="entityName", constant=entity_name),
            ValueListParameterConstant(value_list_property="fieldName", constant=field_name),
        ],
    )


def annotate_field(field: FieldDefinition, entity_name: str, value_list_entity: str) -> None:
    """Attach the fixed-values flag and the value-list descriptor to a field.

    Annotations already present are left alone.
    """
    annotations = field.annotations
    if annotations.has(AnnotationKey.ENUM_VALUE_HELP_FIXED_VALUES) and not annotations.get(
        AnnotationKey.VALUE_LIST_WITH_FIXED_VALUES
    ):
        annotations.set(AnnotationKey.VALUE_LIST_WITH_FIXED_VALUES, True)

    if not annotations.get(AnnotationKey.VALUE_LIST):
        annotations.set(
            AnnotationKey.VALUE_LIST,
            build_value_list(value_list_entity, entity_name, field.name),
        )


def enrich(schema: SchemaGraph, settings: Settings | None = None) -> list[str]:
    """Enrich a schema with enum value lists.

    Safe to call repeatedly: once the schema carries the enhanced marker
    further calls return immediately.

    Args:
        schema: Schema graph to mutate in place.
        settings: Settings to use; defaults to the process-wide settings.

    Returns:
        Sorted names of the services that received a value-list projection.
    """
    if schema.is_enhanced:
        return []

    settings = settings or get_settings()
    view_name = settings.value_list_entity
    logger.debug("enum_value_help_enrichment_started", definitions=len(schema))

    if view_name not in schema:
        schema.register(build_value_list_entity(view_name))
        logger.debug("value_list_entity_created", entity=view_name)

    services_to_extend: set[str] = set()

    for entity in schema.entities():
        if entity.annotations.is_truthy(AnnotationKey.AUTOEXPOSED):
            continue
        if not is_enum_value_help_enabled(entity):
            continue

        logger.debug("enum_value_help_entity_found", entity=entity.name)

        for field in enum_fields_of(entity):
            annotate_field(field, entity.name, view_name)

        service_name = schema.parent_service_of(entity.name)
        if service_name is not None:
            services_to_extend.add(service_name)

        entity.annotations.set(AnnotationKey.ENUM_VALUE_HELP_PROCESSED, True)

    extended: list[str] = []
    for service_name in sorted(services_to_extend):
        projection_name = f"{service_name}.{view_name}"
        if projection_name in schema:
            continue
        schema.register(build_value_list_projection(projection_name))
        extended.append(service_name)
        logger.debug("value_list_entity_exposed", service=service_name, entity=projection_name)

    schema.mark_enhanced()
    logger.debug("enum_value_help_enrichment_finished", services=extended)
    return extended
