"""Tag Query - lexer and list parser for tag filter expressions

This package tokenizes the tag query language (tags, wildcard patterns,
AND/OR/NOT keywords and parentheses) into a pull-based token stream, and
parses plain tag lists from it.
"""

from .errors import (
    TagQueryError,
    LexerError,
    InvalidEncodingError,
    UnterminatedQuoteError,
    SourceReadError,
    ParseError,
    UnexpectedTokenError,
    UnexpectedEndOfInputError,
)
from .lexer import Lexer, LexResult, LexState, lex, tokenize
from .parser import Tag, expect, parse_list
from .tokens import Token, TokenType, format_token_types

__version__ = "0.1.0"

__all__ = [
    "Lexer",
    "LexResult",
    "LexState",
    "lex",
    "tokenize",
    "Tag",
    "expect",
    "parse_list",
    "Token",
    "TokenType",
    "format_token_types",
    "TagQueryError",
    "LexerError",
    "InvalidEncodingError",
    "UnterminatedQuoteError",
    "SourceReadError",
    "ParseError",
    "UnexpectedTokenError",
    "UnexpectedEndOfInputError",
]
