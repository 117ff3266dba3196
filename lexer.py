"""
lexer.py - Public surface for callers that only want tokens and primitives.

The document assembler imports from here so it never depends on the
scanner internals in toml_parser.
"""

from toml_parser import (
    ErrorKind,
    ParseError,
    Token,
    lex,
    line_col,
    parse_bare_key,
    parse_comment,
    parse_quoted_string,
    parse_table_header,
)

__all__ = [
    "ErrorKind",
    "ParseError",
    "Token",
    "lex",
    "line_col",
    "parse_bare_key",
    "parse_comment",
    "parse_quoted_string",
    "parse_table_header",
]
