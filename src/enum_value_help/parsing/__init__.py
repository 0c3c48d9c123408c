"""Parsing module for textual filter expressions."""

from enum_value_help.parsing.filter_lexer import FilterLexer
from enum_value_help.parsing.filter_parser import FilterParser, parse_filter

__all__ = [
    "FilterLexer",
    "FilterParser",
    "parse_filter",
]
