"""Command line interface for enum value help."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from enum_value_help.config import get_settings
from enum_value_help.logging import setup_logging
from enum_value_help.parsing import parse_filter
from enum_value_help.resolver import ReadRequest
from enum_value_help.schema import SchemaGraph
from enum_value_help.service import EnumValueHelpPlugin, application_services


def run_enrich(model: Path, output: Path | None) -> int:
    """Enrich a CSN model and print or write the result."""
    schema = SchemaGraph.load(model)
    EnumValueHelpPlugin().on_loaded(schema)
    text = schema.dumps()
    if output is None:
        print(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")
    return 0


def run_values(
    model: Path,
    filter_text: str | None,
    entity_name: str | None,
    field_name: str | None,
    service_name: str | None,
) -> int:
    """Resolve value-list rows for an entity field and print them as JSON."""
    settings = get_settings()
    plugin = EnumValueHelpPlugin(settings)
    schema = plugin.on_loaded(SchemaGraph.load(model))
    services = application_services(schema)
    registered = plugin.on_served(services)
    if not registered:
        print("Error: No service exposes enum value help", file=sys.stderr)
        return 1

    if service_name is None:
        service_name = registered[0]
    elif service_name not in registered:
        print(f"Error: Service '{service_name}' does not expose enum value help", file=sys.stderr)
        return 1
    service = next(s for s in services if s.name == service_name)

    data = {}
    if entity_name:
        data["entityName"] = entity_name
    if field_name:
        data["fieldName"] = field_name
    where = parse_filter(filter_text) if filter_text else None
    request = ReadRequest(where=where, data=data)

    rows = service.read(f"{service_name}.{settings.value_list_entity}", request)
    print(json.dumps(rows, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    settings = get_settings()
    arg_parser = argparse.ArgumentParser(
        prog="enum-value-help",
        description="Generate and query enum value lists for CSN models",
    )
    arg_parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Minimum log level (default: %(default)s)",
    )
    arg_parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default=settings.log_format,
        help="Log output format (default: %(default)s)",
    )
    commands = arg_parser.add_subparsers(dest="command", required=True)

    enrich_parser = commands.add_parser("enrich", help="Print the enriched model")
    enrich_parser.add_argument("model", type=Path, help="CSN JSON file")
    enrich_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the enriched model to this file instead of stdout",
    )

    values_parser = commands.add_parser("values", help="Resolve value-list rows")
    values_parser.add_argument("model", type=Path, help="CSN JSON file")
    values_parser.add_argument(
        "--filter",
        dest="filter_text",
        help="Filter expression, e.g. \"entityName eq 'Shop.Orders' and fieldName eq 'status'\"",
    )
    values_parser.add_argument("--entity", help="Qualified entity name")
    values_parser.add_argument("--field", help="Field name")
    values_parser.add_argument("--service", help="Service to query (default: first exposing one)")

    args = arg_parser.parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    if not args.model.exists():
        print(f"Error: File not found: {args.model}", file=sys.stderr)
        return 1

    try:
        if args.command == "enrich":
            return run_enrich(args.model, args.output)
        return run_values(args.model, args.filter_text, args.entity, args.field, args.service)
    except SyntaxError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        return 1
    except (ValueError, KeyError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
