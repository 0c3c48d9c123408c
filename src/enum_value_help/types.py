"""Definitions for the nodes of an entity/service schema graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class DefinitionKind(Enum):
    """Kinds of schema definitions the enricher distinguishes."""

    ENTITY = "entity"
    SERVICE = "service"
    TYPE = "type"
    ASPECT = "aspect"
    CONTEXT = "context"
    OTHER = "other"

    @classmethod
    def parse(cls, kind: str | None) -> DefinitionKind:
        """Map a raw kind string to a member, falling back to OTHER."""
        for member in cls:
            if member.value == kind:
                return member
        return cls.OTHER


class AnnotationKey(Enum):
    """Annotation keys this package reads or writes."""

    ENUM_VALUE_HELP = "@enumValueHelp"
    ENUM_VALUE_HELP_FIXED_VALUES = "@enumValueHelpFixedValues"
    ENUM_VALUE_HELP_PROCESSED = "@enumValueHelp.processed"
    VALUE_LIST = "@Common.ValueList"
    VALUE_LIST_WITH_FIXED_VALUES = "@Common.ValueListWithFixedValues"
    AUTOEXPOSED = "@cds.autoexposed"
    AUTOEXPOSE = "@cds.autoexpose"
    READONLY = "@readonly"
    PERSISTENCE_SKIP = "@cds.persistence.skip"
    CORE_COMPUTED = "@Core.Computed"
    TITLE = "@title"


# Mapping from raw annotation names to AnnotationKey members
ANNOTATION_KEYS: dict[str, AnnotationKey] = {key.value: key for key in AnnotationKey}

VALUE_LIST_PARAMETER_IN_OUT = "Common.ValueListParameterInOut"
VALUE_LIST_PARAMETER_CONSTANT = "Common.ValueListParameterConstant"


@dataclass
class ValueListParameterInOut:
    """Binds a local field to a column of the value list in both directions."""

    local_data_property: str
    value_list_property: str

    def to_csn(self) -> dict[str, Any]:
        return {
            "$Type": VALUE_LIST_PARAMETER_IN_OUT,
            "LocalDataProperty": self.local_data_property,
            "ValueListProperty": self.value_list_property,
        }


@dataclass
class ValueListParameterConstant:
    """Fixes a column of the value list to a constant."""

    value_list_property: str
    constant: Any

    def to_csn(self) -> dict[str, Any]:
        return {
            "$Type": VALUE_LIST_PARAMETER_CONSTANT,
            "ValueListProperty": self.value_list_property,
            "Constant": self.constant,
        }


ValueListParameter = ValueListParameterInOut | ValueListParameterConstant


@dataclass
class ValueList:
    """Cross-reference descriptor linking a field to a value-list entity."""

    collection_path: str
    parameters: list[ValueListParameter | dict[str, Any]] = field(default_factory=list)

    def to_csn(self) -> dict[str, Any]:
        return {
            "CollectionPath": self.collection_path,
            "Parameters": [
                p.to_csn() if isinstance(p, (ValueListParameterInOut, ValueListParameterConstant)) else p
                for p in self.parameters
            ],
        }

    @classmethod
    def from_csn(cls, data: Any) -> ValueList | Any:
        """Build a descriptor from its CSN form.

        Anything that does not look like a descriptor is returned unchanged
        so that foreign payloads survive a round trip.
        """
        if not isinstance(data, dict) or "CollectionPath" not in data:
            return data
        parameters: list[ValueListParameter | dict[str, Any]] = []
        for raw in data.get("Parameters") or []:
            kind = raw.get("$Type") if isinstance(raw, dict) else None
            if kind == VALUE_LIST_PARAMETER_IN_OUT:
                parameters.append(
                    ValueListParameterInOut(
                        local_data_property=raw.get("LocalDataProperty"),
                        value_list_property=raw.get("ValueListProperty"),
                    )
                )
            elif kind == VALUE_LIST_PARAMETER_CONSTANT:
                parameters.append(
                    ValueListParameterConstant(
                        value_list_property=raw.get("ValueListProperty"),
                        constant=raw.get("Constant"),
                    )
                )
            else:
                parameters.append(raw)
        return cls(collection_path=data["CollectionPath"], parameters=parameters)


class Annotations:
    """Annotation mapping of a schema node.

    Recognized keys are held by AnnotationKey with typed payloads; every
    other annotation is kept verbatim in a pass-through bag.
    """

    def __init__(self) -> None:
        self._known: dict[AnnotationKey, Any] = {}
        self._extra: dict[str, Any] = {}

    @classmethod
    def from_csn(cls, node: dict[str, Any]) -> Annotations:
        """Collect the '@'-prefixed entries of a CSN node."""
        annotations = cls()
        for name, value in node.items():
            if name.startswith("@"):
                annotations.set_raw(name, value)
        return annotations

    def set_raw(self, name: str, value: Any) -> None:
        """Set an annotation by its raw name."""
        key = ANNOTATION_KEYS.get(name)
        if key is None:
            self._extra[name] = value
        else:
            self.set(key, value)

    def get(self, key: AnnotationKey, default: Any = None) -> Any:
        return self._known.get(key, default)

    def set(self, key: AnnotationKey, value: Any) -> None:
        if key is AnnotationKey.VALUE_LIST:
            value = ValueList.from_csn(value)
        self._known[key] = value

    def has(self, key: AnnotationKey) -> bool:
        """Return whether the key is present, whatever its value."""
        return key in self._known

    def is_truthy(self, key: AnnotationKey) -> bool:
        return bool(self._known.get(key))

    @property
    def extra(self) -> dict[str, Any]:
        return self._extra

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield (raw name, payload) pairs, recognized keys first."""
        for key, value in self._known.items():
            yield key.value, value
        yield from self._extra.items()

    def to_csn(self) -> dict[str, Any]:
        return {
            name: value.to_csn() if isinstance(value, ValueList) else value
            for name, value in self.items()
        }

    def __len__(self) -> int:
        return len(self._known) + len(self._extra)

    def __repr__(self) -> str:
        return f"Annotations({dict(self.items())!r})"


@dataclass
class EnumMember:
    """A single symbol of an enum definition."""

    name: str
    val: Any = None

    @property
    def value(self) -> Any:
        """The literal this symbol stands for; the symbol itself when no literal is given."""
        return self.name if self.val is None else self.val

    def to_csn(self) -> dict[str, Any]:
        return {} if self.val is None else {"val": self.val}


EnumDefinition = dict[str, EnumMember]


def enum_from_csn(data: Any) -> EnumDefinition | None:
    """Convert a CSN enum mapping into ordered EnumMembers."""
    if not isinstance(data, dict):
        return None
    members: EnumDefinition = {}
    for name, raw in data.items():
        val = raw.get("val") if isinstance(raw, dict) else None
        members[name] = EnumMember(name=name, val=val)
    return members


def enum_to_csn(members: EnumDefinition) -> dict[str, Any]:
    return {name: member.to_csn() for name, member in members.items()}


@dataclass
class FieldDefinition:
    """Definition of a field (element) within an entity."""

    name: str
    type: str | None = None
    key: bool = False
    enum: EnumDefinition | None = None
    annotations: Annotations = field(default_factory=Annotations)
    properties: dict[str, Any] = field(default_factory=dict)  # anything else, kept for round trips

    @classmethod
    def from_csn(cls, name: str, node: dict[str, Any]) -> FieldDefinition:
        properties = {
            k: v for k, v in node.items()
            if not k.startswith("@") and k not in ("type", "key", "enum")
        }
        return cls(
            name=name,
            type=node.get("type"),
            key=bool(node.get("key", False)),
            enum=enum_from_csn(node.get("enum")),
            annotations=Annotations.from_csn(node),
            properties=properties,
        )

    def to_csn(self) -> dict[str, Any]:
        node: dict[str, Any] = {}
        if self.key:
            node["key"] = True
        if self.type is not None:
            node["type"] = self.type
        if self.enum is not None:
            node["enum"] = enum_to_csn(self.enum)
        node.update(self.properties)
        node.update(self.annotations.to_csn())
        return node


@dataclass
class Definition:
    """A named node of the schema graph: entity, service, type and so on."""

    name: str
    kind: DefinitionKind
    elements: dict[str, FieldDefinition] = field(default_factory=dict)
    annotations: Annotations = field(default_factory=Annotations)
    enum: EnumDefinition | None = None
    query: dict[str, Any] | None = None
    doc: str | None = None
    raw_kind: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def is_entity(self) -> bool:
        return self.kind is DefinitionKind.ENTITY

    @property
    def is_service(self) -> bool:
        return self.kind is DefinitionKind.SERVICE

    @property
    def is_union(self) -> bool:
        """Return whether the definition is backed by a UNION query."""
        if not isinstance(self.query, dict):
            return False
        set_clause = self.query.get("SET")
        return isinstance(set_clause, dict) and set_clause.get("op") == "union"

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        return self.elements.get(name)

    @classmethod
    def from_csn(cls, name: str, node: dict[str, Any]) -> Definition:
        raw_elements = node.get("elements", {})
        if raw_elements is None:
            raw_elements = {}
        if not isinstance(raw_elements, dict):
            raise ValueError(f"Elements of '{name}' must be a mapping")
        properties = {
            k: v for k, v in node.items()
            if not k.startswith("@") and k not in ("kind", "elements", "enum", "query", "doc")
        }
        return cls(
            name=name,
            kind=DefinitionKind.parse(node.get("kind")),
            elements={
                field_name: FieldDefinition.from_csn(field_name, field_node)
                for field_name, field_node in raw_elements.items()
                if isinstance(field_node, dict)
            },
            annotations=Annotations.from_csn(node),
            enum=enum_from_csn(node.get("enum")),
            query=node.get("query"),
            doc=node.get("doc"),
            raw_kind=node.get("kind"),
            properties=properties,
        )

    def to_csn(self) -> dict[str, Any]:
        node: dict[str, Any] = {}
        if self.raw_kind is not None:
            node["kind"] = self.raw_kind
        elif self.kind is not DefinitionKind.OTHER:
            node["kind"] = self.kind.value
        node.update(self.annotations.to_csn())
        if self.doc is not None:
            node["doc"] = self.doc
        if self.query is not None:
            node["query"] = self.query
        node.update(self.properties)
        if self.enum is not None:
            node["enum"] = enum_to_csn(self.enum)
        if self.elements:
            node["elements"] = {name: f.to_csn() for name, f in self.elements.items()}
        return node
