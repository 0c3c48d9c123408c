"""Service runtime seams and the enum value help plugin."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from enum_value_help.config import Settings, get_settings
from enum_value_help.enricher import enrich
from enum_value_help.logging import get_logger
from enum_value_help.resolver import ReadRequest, resolve_value_help
from enum_value_help.schema import SchemaGraph
from enum_value_help.types import Definition

logger = get_logger(__name__)

AfterHandler = Callable[[list[dict[str, Any]], ReadRequest], None]


class Service:
    """A named service grouping the entities defined under its namespace."""

    def __init__(self, name: str, schema: SchemaGraph) -> None:
        self.name = name
        self.schema = schema
        self._after: dict[tuple[str, str], list[AfterHandler]] = {}

    @property
    def entities(self) -> dict[str, Definition]:
        """Entities directly inside the service, keyed by their short name."""
        prefix = f"{self.name}."
        result: dict[str, Definition] = {}
        for name, definition in self.schema.definitions.items():
            if not definition.is_entity or not name.startswith(prefix):
                continue
            short_name = name[len(prefix):]
            if "." not in short_name:
                result[short_name] = definition
        return result

    def after(self, event: str, entity: Definition | str, handler: AfterHandler) -> None:
        """Register a handler run after the default processing of an event."""
        entity_name = entity.name if isinstance(entity, Definition) else entity
        self._after.setdefault((event.upper(), entity_name), []).append(handler)

    def handlers_for(self, event: str, entity_name: str) -> list[AfterHandler]:
        return list(self._after.get((event.upper(), entity_name), []))

    def read(
        self,
        entity: Definition | str,
        request: ReadRequest | None = None,
        rows: list[dict[str, Any]] | None = None,
    ) -> list[dict[str, Any]]:
        """Run a READ: start from the default rows, then apply after-handlers.

        Args:
            entity: Target entity or its qualified name.
            request: The request; defaults to an unfiltered one.
            rows: Rows produced by default processing (empty when omitted).

        Returns:
            The row buffer after all handlers ran.
        """
        entity_name = entity.name if isinstance(entity, Definition) else entity
        if request is None:
            request = ReadRequest(target=entity_name)
        elif request.target is None:
            request.target = entity_name
        buffer = list(rows or [])
        for handler in self.handlers_for("READ", entity_name):
            handler(buffer, request)
        return buffer


class ApplicationService(Service):
    """Service serving application entities; the only kind value help attaches to."""


class EnumValueHelpPlugin:
    """Hooks enum value help into a host's model and service lifecycle.

    The host calls ``on_loaded`` once a model is loaded and ``on_served``
    once its services are bootstrapped.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._served: set[str] = set()

    def on_loaded(self, schema: SchemaGraph) -> SchemaGraph:
        logger.debug("model_loaded")
        enrich(schema, self.settings)
        return schema

    def on_served(self, services: Iterable[Service]) -> list[str]:
        """Register the READ handler on every application service exposing the value list.

        Returns:
            Names of the services a handler was registered on.
        """
        registered: list[str] = []
        for service in services:
            if not isinstance(service, ApplicationService):
                continue
            if service.name in self._served:
                continue
            view = service.entities.get(self.settings.value_list_entity)
            if view is None:
                continue

            logger.debug("value_help_handler_added", service=service.name, entity=view.name)
            service.after("READ", view, self._make_handler(service.schema))
            self._served.add(service.name)
            registered.append(service.name)
        return registered

    def _make_handler(self, schema: SchemaGraph) -> AfterHandler:
        def handler(rows: list[dict[str, Any]], request: ReadRequest) -> None:
            resolve_value_help(schema, rows, request)

        return handler


def application_services(schema: SchemaGraph) -> list[ApplicationService]:
    """Create an application service for every service definition of a schema."""
    return [
        ApplicationService(definition.name, schema)
        for definition in schema.definitions.values()
        if definition.is_service
    ]
