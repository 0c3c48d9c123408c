"""Lexer for textual filter expressions."""

import codecs

import ply.lex as lex


class FilterLexer:
    """Lexer for tokenizing OData-style filter expressions."""

    # Reserved keywords (case-insensitive)
    reserved = {
        "and": "AND",
        "or": "OR",
        "not": "NOT",
        "eq": "EQ",
        "ne": "NEQ",
        "true": "TRUE",
        "false": "FALSE",
        "null": "NULL",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "STRING",
        "INTEGER",
        "FLOAT",
        "LPAREN",
        "RPAREN",
    ] + sorted(set(reserved.values()))

    # Simple tokens
    t_LPAREN = r"\("
    t_RPAREN = r"\)"

    # Ignored characters
    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_NEQ(self, t: lex.LexToken) -> lex.LexToken:
        r"!=|<>"
        return t

    def t_EQ(self, t: lex.LexToken) -> lex.LexToken:
        r"==?"
        return t

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+\.\d+"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'([^']|'')*'|\"([^\"\\]|\\.)*\""
        quote = t.value[0]
        body = t.value[1:-1]
        if quote == "'":
            # OData escapes a single quote by doubling it
            t.value = body.replace("''", "'")
        else:
            # non-ASCII characters pass through unicode_escape as backslash escapes
            t.value = codecs.decode(body.encode("latin-1", "backslashreplace"), "unicode_escape")
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_$][a-zA-Z0-9_$]*(?:[./][a-zA-Z_$][a-zA-Z0-9_$]*)*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
