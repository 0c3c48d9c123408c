"""Shared fixtures for the enum value help tests."""

from __future__ import annotations

import copy

import pytest
import structlog

from enum_value_help.config import Settings, get_settings

SHOP_CSN = {
    "$version": "2.0",
    "definitions": {
        "shop.Priority": {
            "kind": "type",
            "type": "cds.Integer",
            "enum": {"LOW": {"val": 1}, "HIGH": {"val": 3}, "URGENT": {}},
        },
        "ShopService": {"kind": "service"},
        "ShopService.Orders": {
            "kind": "entity",
            "elements": {
                "ID": {"key": True, "type": "cds.UUID"},
                "status": {
                    "type": "cds.String",
                    "length": 1,
                    "@enumValueHelp": True,
                    "enum": {"OPEN": {"val": "O"}, "CLOSED": {"val": "C"}},
                },
                "priority": {"type": "shop.Priority", "@enumValueHelpFixedValues": True},
                "note": {"type": "cds.String", "@title": "Note"},
            },
        },
        "ShopService.OrderHistory": {
            "kind": "entity",
            "query": {"SET": {"op": "union", "args": []}},
            "elements": {
                "status": {
                    "type": "cds.String",
                    "@enumValueHelp": True,
                    "enum": {"OPEN": {"val": "O"}},
                },
            },
        },
        "AdminService": {"kind": "service"},
        "AdminService.Tickets": {
            "kind": "entity",
            "elements": {
                "ID": {"key": True, "type": "cds.Integer"},
                "state": {"type": "cds.String", "@enumValueHelp": True, "enum": {"NEW": {}, "DONE": {}}},
            },
        },
        "shop.Catalog": {
            "kind": "entity",
            "elements": {
                "category": {"type": "cds.String", "@enumValueHelp": True, "enum": {"BOOK": {}, "GAME": {}}},
            },
        },
    },
}


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset cached settings and structlog configuration around each test."""
    get_settings.cache_clear()
    structlog.reset_defaults()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def shop_csn():
    """A fresh copy of the shop model."""
    return copy.deepcopy(SHOP_CSN)


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings(value_list_entity="EnumValueHelpView", log_level="INFO", log_format="console")
