"""Parser turning filter text into typed filter trees."""

from __future__ import annotations

import re
from typing import Any

import ply.yacc as yacc

from enum_value_help.filters import FilterTree, Group, Operator, Ref, Val
from enum_value_help.parsing.filter_lexer import FilterLexer


class FilterParser:
    """Parser for OData-style filter expressions.

    Produces the flat, CQN-shaped sequences that constraint extraction
    works on: ``a = 'x' and (b = 'y')`` becomes
    ``[Ref(a), EQ, Val('x'), AND, Group([Ref(b), EQ, Val('y')])]``.
    """

    tokens = FilterLexer.tokens

    # Operator precedence
    precedence = (
        ("left", "OR"),
        ("left", "AND"),
        ("right", "NOT"),
    )

    def __init__(self) -> None:
        self.lexer = FilterLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_filter(self, p: yacc.YaccProduction) -> None:
        """filter : expression"""
        p[0] = p[1]

    def p_expression_and(self, p: yacc.YaccProduction) -> None:
        """expression : expression AND expression"""
        p[0] = p[1] + [Operator.AND] + p[3]

    def p_expression_or(self, p: yacc.YaccProduction) -> None:
        """expression : expression OR expression"""
        p[0] = p[1] + [Operator.OR] + p[3]

    def p_expression_not(self, p: yacc.YaccProduction) -> None:
        """expression : NOT expression"""
        p[0] = [Operator.NOT] + p[2]

    def p_expression_paren(self, p: yacc.YaccProduction) -> None:
        """expression : LPAREN expression RPAREN"""
        p[0] = [Group(p[2])]

    def p_expression_equal(self, p: yacc.YaccProduction) -> None:
        """expression : operand EQ operand"""
        p[0] = [p[1], Operator.EQ, p[3]]

    def p_expression_not_equal(self, p: yacc.YaccProduction) -> None:
        """expression : operand NEQ operand"""
        p[0] = [p[1], Operator.NE, p[3]]

    def p_operand_ref(self, p: yacc.YaccProduction) -> None:
        """operand : IDENTIFIER"""
        p[0] = Ref(tuple(re.split(r"[./]", p[1])))

    def p_operand_literal(self, p: yacc.YaccProduction) -> None:
        """operand : STRING
                   | INTEGER
                   | FLOAT"""
        p[0] = Val(p[1])

    def p_operand_true(self, p: yacc.YaccProduction) -> None:
        """operand : TRUE"""
        p[0] = Val(True)

    def p_operand_false(self, p: yacc.YaccProduction) -> None:
        """operand : FALSE"""
        p[0] = Val(False)

    def p_operand_null(self, p: yacc.YaccProduction) -> None:
        """operand : NULL"""
        p[0] = Val(None)

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="filter", **kwargs)

    def parse(self, data: str) -> FilterTree:
        """Parse a filter string. Blank input yields an empty tree."""
        if not data.strip():
            return []
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)


def parse_filter(data: str) -> FilterTree:
    """Parse a filter string with a fresh parser."""
    return FilterParser().parse(data)
