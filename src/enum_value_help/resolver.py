"""Request-time resolution of value-list rows from enum definitions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from enum_value_help.extraction import constant_in_filter
from enum_value_help.filters import FilterTree, filter_tree_from_cqn
from enum_value_help.logging import get_logger
from enum_value_help.schema import SchemaGraph
from enum_value_help.types import EnumDefinition, FieldDefinition

logger = get_logger(__name__)


@dataclass
class ReadRequest:
    """A read request against a value-list entity."""

    target: str | None = None
    where: FilterTree | None = None
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_cqn(cls, query: Any, data: Mapping[str, Any] | None = None) -> ReadRequest:
        """Build a request from a CQN ``{"SELECT": {...}}`` query."""
        select = query.get("SELECT") if isinstance(query, dict) else None
        if not isinstance(select, dict):
            return cls(data=dict(data or {}))
        source = select.get("from")
        target = None
        if isinstance(source, dict) and isinstance(source.get("ref"), list) and source["ref"]:
            target = str(source["ref"][0])
        return cls(target=target, where=filter_tree_from_cqn(select.get("where")), data=dict(data or {}))


def enum_definition_of(schema: SchemaGraph, field: FieldDefinition) -> EnumDefinition | None:
    """Return a field's enum, inline or through its named type."""
    if field.enum is not None:
        return field.enum
    if field.type:
        type_def = schema.get(field.type)
        if type_def is not None and type_def.enum is not None:
            return type_def.enum
    return None


def to_value_records(enum: EnumDefinition) -> list[dict[str, Any]]:
    """Turn an enum definition into ``{"value": ...}`` records in declaration order."""
    return [{"value": member.value} for member in enum.values()]


def resolve_value_rows(schema: SchemaGraph, request: ReadRequest) -> list[dict[str, Any]] | None:
    """Compute the value-list rows a request asks for.

    Returns None when the request cannot be answered, so the caller keeps
    whatever result it already has.
    """
    where = request.where
    entity_name = constant_in_filter(where, "entityName") or request.data.get("entityName")
    field_name = constant_in_filter(where, "fieldName") or request.data.get("fieldName")
    if not entity_name or not field_name:
        return None

    target = schema.get(entity_name)
    if target is None:
        logger.debug("value_help_entity_not_found", entity=entity_name)
        return None
    field_def = target.get_field(field_name)
    if field_def is None:
        logger.debug("value_help_field_not_found", entity=entity_name, field=field_name)
        return None

    enum = enum_definition_of(schema, field_def)
    if enum is None:
        return None

    rows = [
        {**record, "entityName": entity_name, "fieldName": field_name}
        for record in to_value_records(enum)
    ]

    if where:
        value_filter = constant_in_filter(where, "value")
        if value_filter:
            rows = [row for row in rows if row["value"] == value_filter]

    return rows


def resolve_value_help(schema: SchemaGraph, rows: list[dict[str, Any]], request: ReadRequest) -> None:
    """Replace the rows of a value-list read in place.

    Leaves ``rows`` untouched when the request names no known enum field.
    """
    result = resolve_value_rows(schema, request)
    if result is None:
        return
    rows[:] = result
    logger.debug("value_help_rows_resolved", target=request.target, rows=len(result))
