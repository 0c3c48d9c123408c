"""Tests for schema enrichment."""

from __future__ import annotations

import json

from structlog.testing import capture_logs

from enum_value_help.config import Settings
from enum_value_help.enricher import enrich, is_enum_value_help_enabled
from enum_value_help.schema import SchemaGraph
from enum_value_help.types import (
    AnnotationKey,
    ValueList,
    ValueListParameterConstant,
    ValueListParameterInOut,
)


def _value_list(schema: SchemaGraph, entity: str, field: str):
    return schema.get(entity).get_field(field).annotations.get(AnnotationKey.VALUE_LIST)


class TestValueListEntity:
    """Tests for the shared value-list entity."""

    def test_created_when_missing(self, shop_csn, settings):
        """The generic value-list entity is created with its three fields."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        view = schema.get("EnumValueHelpView")
        assert view.is_entity
        assert list(view.elements) == ["value", "entityName", "fieldName"]
        assert view.elements["value"].key
        assert all(f.type == "cds.String" for f in view.elements.values())
        assert view.annotations.get(AnnotationKey.READONLY) is True
        assert view.annotations.get(AnnotationKey.PERSISTENCE_SKIP) is True
        assert view.elements["value"].annotations.get(AnnotationKey.TITLE) == "Value"
        assert view.elements["fieldName"].annotations.get(AnnotationKey.CORE_COMPUTED) is False

    def test_author_definition_wins(self, shop_csn, settings):
        """A pre-existing definition of the same name is never replaced."""
        custom = {
            "kind": "entity",
            "elements": {"value": {"key": True, "type": "cds.String"}, "label": {"type": "cds.String"}},
        }
        shop_csn["definitions"]["EnumValueHelpView"] = custom
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        assert schema.get("EnumValueHelpView").to_csn() == custom

    def test_custom_name(self, shop_csn):
        """The value-list entity name comes from the settings."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, Settings(value_list_entity="Picklist"))

        assert "Picklist" in schema
        assert "EnumValueHelpView" not in schema
        assert "ShopService.Picklist" in schema
        assert _value_list(schema, "ShopService.Orders", "status").collection_path == "Picklist"


class TestFieldAnnotations:
    """Tests for annotating enum fields with a value list."""

    def test_value_list_descriptor(self, shop_csn, settings):
        """Marked fields point at the value list with three parameter bindings."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        assert _value_list(schema, "ShopService.Orders", "status") == ValueList(
            collection_path="EnumValueHelpView",
            parameters=[
                ValueListParameterInOut(local_data_property="status", value_list_property="value"),
                ValueListParameterConstant(value_list_property="entityName", constant="ShopService.Orders"),
                ValueListParameterConstant(value_list_property="fieldName", constant="status"),
            ],
        )

    def test_descriptor_csn_form(self, shop_csn, settings):
        """The descriptor dumps to its CSN form."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        node = schema.to_csn()["definitions"]["AdminService.Tickets"]["elements"]["state"]
        assert node["@Common.ValueList"] == {
            "CollectionPath": "EnumValueHelpView",
            "Parameters": [
                {
                    "$Type": "Common.ValueListParameterInOut",
                    "LocalDataProperty": "state",
                    "ValueListProperty": "value",
                },
                {
                    "$Type": "Common.ValueListParameterConstant",
                    "ValueListProperty": "entityName",
                    "Constant": "AdminService.Tickets",
                },
                {
                    "$Type": "Common.ValueListParameterConstant",
                    "ValueListProperty": "fieldName",
                    "Constant": "state",
                },
            ],
        }

    def test_fixed_values_flag(self, shop_csn, settings):
        """Only the fixed-values marker sets the fixed-values flag."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        orders = schema.get("ShopService.Orders")
        assert orders.get_field("priority").annotations.get(AnnotationKey.VALUE_LIST_WITH_FIXED_VALUES) is True
        assert not orders.get_field("status").annotations.has(AnnotationKey.VALUE_LIST_WITH_FIXED_VALUES)

    def test_unmarked_fields_untouched(self, shop_csn, settings):
        """Fields without a marker get no descriptor."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        orders = schema.get("ShopService.Orders")
        assert not orders.get_field("note").annotations.has(AnnotationKey.VALUE_LIST)
        assert not orders.get_field("ID").annotations.has(AnnotationKey.VALUE_LIST)

    def test_existing_descriptor_kept(self, shop_csn, settings):
        """A field's own value-list descriptor is not overwritten."""
        status = shop_csn["definitions"]["ShopService.Orders"]["elements"]["status"]
        status["@Common.ValueList"] = {"CollectionPath": "StatusCodes", "Parameters": []}
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        assert _value_list(schema, "ShopService.Orders", "status") == ValueList(
            collection_path="StatusCodes", parameters=[]
        )

    def test_falsy_field_marker_still_counts(self, settings):
        """Field markers count whenever they are present."""
        schema = SchemaGraph.from_csn(
            {"definitions": {"Items": {"kind": "entity", "elements": {"kind": {"@enumValueHelp": False}}}}}
        )
        enrich(schema, settings)
        assert _value_list(schema, "Items", "kind") is not None

    def test_processed_stamp(self, shop_csn, settings):
        """Enriched entities are stamped as processed."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        assert schema.get("ShopService.Orders").annotations.get(AnnotationKey.ENUM_VALUE_HELP_PROCESSED) is True
        assert not schema.get("ShopService.OrderHistory").annotations.has(AnnotationKey.ENUM_VALUE_HELP_PROCESSED)


class TestEligibility:
    """Tests for which entities are enriched."""

    def test_union_entities_skipped(self, shop_csn, settings):
        """UNION-backed entities are never enriched, whatever their annotations."""
        shop_csn["definitions"]["ShopService.OrderHistory"]["@enumValueHelp"] = True
        schema = SchemaGraph.from_csn(shop_csn)
        history = schema.get("ShopService.OrderHistory")
        assert not is_enum_value_help_enabled(history)

        enrich(schema, settings)
        assert not history.get_field("status").annotations.has(AnnotationKey.VALUE_LIST)

    def test_autoexposed_entities_skipped(self, settings):
        """Auto-exposed entities are not enriched."""
        schema = SchemaGraph.from_csn(
            {
                "definitions": {
                    "Svc": {"kind": "service"},
                    "Svc.Codes": {
                        "kind": "entity",
                        "@cds.autoexposed": True,
                        "elements": {"code": {"@enumValueHelp": True, "enum": {"A": {}}}},
                    },
                }
            }
        )
        enrich(schema, settings)
        assert _value_list(schema, "Svc.Codes", "code") is None
        assert "Svc.EnumValueHelpView" not in schema

    def test_entity_level_marker(self, settings):
        """A truthy entity marker alone makes the owning service get a projection."""
        schema = SchemaGraph.from_csn(
            {
                "definitions": {
                    "Svc": {"kind": "service"},
                    "Svc.Books": {"kind": "entity", "@enumValueHelp": True, "elements": {"title": {}}},
                    "Other": {"kind": "service"},
                    "Other.Books": {"kind": "entity", "@enumValueHelp": False, "elements": {"title": {}}},
                }
            }
        )
        assert enrich(schema, settings) == ["Svc"]
        assert _value_list(schema, "Svc.Books", "title") is None

    def test_non_entities_ignored(self, settings):
        """Markers on non-entity definitions are ignored."""
        schema = SchemaGraph.from_csn(
            {"definitions": {"T": {"kind": "type", "@enumValueHelp": True, "elements": {"a": {"@enumValueHelp": True}}}}}
        )
        enrich(schema, settings)
        assert _value_list(schema, "T", "a") is None


class TestAutoExposure:
    """Tests for per-service value-list projections."""

    def test_projection_per_owning_service(self, shop_csn, settings):
        """Two owning services get projections, the ownerless entity none."""
        schema = SchemaGraph.from_csn(shop_csn)
        before = set(schema.list_definitions())

        assert enrich(schema, settings) == ["AdminService", "ShopService"]

        added = set(schema.list_definitions()) - before
        assert added == {"EnumValueHelpView", "AdminService.EnumValueHelpView", "ShopService.EnumValueHelpView"}

    def test_projection_shape(self, shop_csn, settings):
        """Projections are read-only, auto-exposed and keyed by value."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)

        projection = schema.get("ShopService.EnumValueHelpView")
        assert projection.annotations.get(AnnotationKey.AUTOEXPOSE) is True
        assert projection.annotations.get(AnnotationKey.READONLY) is True
        assert list(projection.elements) == ["value", "entityName", "fieldName"]
        assert projection.elements["value"].key

    def test_existing_projection_kept(self, shop_csn, settings):
        """A projection the author defined is left alone."""
        custom = {"kind": "entity", "elements": {"value": {"key": True, "type": "cds.String"}}}
        shop_csn["definitions"]["ShopService.EnumValueHelpView"] = custom
        schema = SchemaGraph.from_csn(shop_csn)

        assert enrich(schema, settings) == ["AdminService"]
        assert schema.get("ShopService.EnumValueHelpView").to_csn() == custom

    def test_services_deduplicated(self, settings):
        """A service owning several entities gets one projection."""
        schema = SchemaGraph.from_csn(
            {
                "definitions": {
                    "Svc": {"kind": "service"},
                    "Svc.A": {"kind": "entity", "elements": {"x": {"@enumValueHelp": True}}},
                    "Svc.B": {"kind": "entity", "elements": {"y": {"@enumValueHelpFixedValues": True}}},
                }
            }
        )
        assert enrich(schema, settings) == ["Svc"]


class TestIdempotence:
    """Tests for repeated enrichment."""

    def test_second_run_is_a_no_op(self, shop_csn, settings):
        """Enriching twice yields the same document as enriching once."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)
        once = schema.dumps()

        assert enrich(schema, settings) == []
        assert schema.dumps() == once
        assert schema.is_enhanced

    def test_rerun_without_marker_does_not_duplicate(self, shop_csn, settings):
        """Even without the marker, nothing is added twice."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)
        once = schema.dumps()

        schema.meta.clear()
        enrich(schema, settings)
        assert schema.dumps() == once

    def test_reloaded_document_is_not_enriched_again(self, shop_csn, settings):
        """The marker survives a dump and reload."""
        schema = SchemaGraph.from_csn(shop_csn)
        enrich(schema, settings)
        reloaded = SchemaGraph.from_csn(json.loads(schema.dumps()))

        assert reloaded.is_enhanced
        assert enrich(reloaded, settings) == []
        assert reloaded.dumps() == schema.dumps()


class TestLogging:
    """Tests for enrichment log events."""

    def test_enrichment_events(self, shop_csn, settings):
        """Enrichment logs start, creation, exposure and finish events."""
        schema = SchemaGraph.from_csn(shop_csn)
        with capture_logs() as logs:
            enrich(schema, settings)

        events = [entry["event"] for entry in logs]
        assert events[0] == "enum_value_help_enrichment_started"
        assert "value_list_entity_created" in events
        assert events.count("value_list_entity_exposed") == 2
        assert events[-1] == "enum_value_help_enrichment_finished"
