"""Error classes for lexing and parsing tag queries"""

from typing import Optional, Sequence, Tuple

from .tokens import Token, TokenType, format_token_types


class TagQueryError(Exception):
    """Base exception for tag query errors"""
    pass


class LexerError(TagQueryError):
    """Fatal tokenizer error; no further tokens can be pulled"""
    def __init__(self, message: str, offset: Optional[int] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.offset = offset
        self.line = line
        self.column = column
        super().__init__(message)


class InvalidEncodingError(LexerError):
    """Source bytes (or characters) are not valid in the source encoding"""
    pass


class UnterminatedQuoteError(LexerError, EOFError):
    """End of input reached inside a quoted string"""
    pass


class SourceReadError(LexerError):
    """The underlying source failed to read"""
    pass


class ParseError(TagQueryError):
    """A token stream does not match what the parser accepts"""
    pass


class UnexpectedTokenError(ParseError):
    """A token of an unacceptable kind was found"""
    def __init__(self, token: Token, expected: Sequence[TokenType]):
        self.token = token
        self.expected: Tuple[TokenType, ...] = tuple(expected)
        super().__init__(f"unexpected {token.type}, expected {format_token_types(self.expected)}")


class UnexpectedEndOfInputError(ParseError):
    """The token stream ended where a token was required"""
    def __init__(self, expected: Sequence[TokenType]):
        self.expected: Tuple[TokenType, ...] = tuple(expected)
        super().__init__(f"unexpected end of input, expected {format_token_types(self.expected)}")
