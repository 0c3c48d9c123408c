"""Schema graph holding every definition of a loaded model."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from enum_value_help.types import Definition, DefinitionKind

# Key in the schema's own metadata marking a completed enrichment
ENHANCED_MARKER = "enum.value.help.enhanced"


class SchemaGraph:
    """Registry of all definitions of a model, keyed by qualified name."""

    def __init__(
        self,
        definitions: dict[str, Definition] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        self.definitions: dict[str, Definition] = dict(definitions or {})
        self.meta: dict[str, Any] = dict(meta or {})
        self.extra: dict[str, Any] = {}

    @classmethod
    def from_csn(cls, csn: Any) -> SchemaGraph:
        """Build a schema graph from a CSN document.

        Args:
            csn: Parsed CSN, a mapping with a "definitions" mapping.

        Returns:
            A new SchemaGraph.

        Raises:
            ValueError: If the document does not have the expected shape.
        """
        if not isinstance(csn, dict):
            raise ValueError("CSN document must be a mapping")
        raw_definitions = csn.get("definitions", {})
        if not isinstance(raw_definitions, dict):
            raise ValueError("CSN 'definitions' must be a mapping")

        definitions: dict[str, Definition] = {}
        for name, node in raw_definitions.items():
            if not isinstance(node, dict):
                raise ValueError(f"Definition '{name}' must be a mapping")
            definitions[name] = Definition.from_csn(name, node)

        meta = csn.get("meta") or {}
        graph = cls(definitions, meta if isinstance(meta, dict) else {})
        graph.extra = {k: v for k, v in csn.items() if k not in ("definitions", "meta")}
        return graph

    @classmethod
    def load(cls, path: Path | str) -> SchemaGraph:
        """Load a CSN JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid CSN JSON.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            return cls.from_csn(json.load(f))

    def to_csn(self) -> dict[str, Any]:
        csn: dict[str, Any] = {}
        if self.meta:
            csn["meta"] = dict(self.meta)
        csn.update(self.extra)
        csn["definitions"] = {name: d.to_csn() for name, d in self.definitions.items()}
        return csn

    def dumps(self, indent: int | None = 2) -> str:
        """Serialize the graph as CSN JSON."""
        return json.dumps(self.to_csn(), indent=indent)

    @property
    def is_enhanced(self) -> bool:
        return bool(self.meta.get(ENHANCED_MARKER))

    def mark_enhanced(self) -> None:
        self.meta[ENHANCED_MARKER] = True

    def register(self, definition: Definition) -> None:
        """Register a definition."""
        if definition.name in self.definitions:
            raise ValueError(f"Definition '{definition.name}' is already defined")
        self.definitions[definition.name] = definition

    def get(self, name: str) -> Definition | None:
        """Get a definition by name."""
        return self.definitions.get(name)

    def get_or_raise(self, name: str) -> Definition:
        """Get a definition by name, raising if not found."""
        definition = self.definitions.get(name)
        if definition is None:
            raise KeyError(f"Definition '{name}' not found")
        return definition

    def list_definitions(self) -> list[str]:
        """List all registered definition names."""
        return list(self.definitions.keys())

    def entities(self) -> Iterator[Definition]:
        """Iterate over entity definitions in declaration order."""
        for definition in list(self.definitions.values()):
            if definition.is_entity:
                yield definition

    def parent_service_of(self, name: str) -> str | None:
        """Return the service owning a qualified name, if there is one.

        The owner is the name minus its last dot-separated segment, and only
        counts when that name is defined as a service.
        """
        parent, dot, _ = name.rpartition(".")
        if not dot or not parent:
            return None
        definition = self.definitions.get(parent)
        if definition is None or definition.kind is not DefinitionKind.SERVICE:
            return None
        return parent

    def __contains__(self, name: str) -> bool:
        return name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)
