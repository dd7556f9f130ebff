"""Parsers consuming the tag query token stream"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .errors import UnexpectedEndOfInputError, UnexpectedTokenError
from .lexer import DEFAULT_CHUNK_SIZE, Lexer, Source
from .tokens import Token, TokenType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tag:
    """A literal tag name used as a filter criterion"""
    name: str

    def __str__(self) -> str:
        return self.name


def expect(token: Optional[Token], *types: TokenType) -> Token:
    """Check that a token is one of the acceptable kinds

    A missing token (None) means the stream has ended. Raises
    UnexpectedEndOfInputError or UnexpectedTokenError; returns the token
    otherwise.
    """
    if not types:
        raise ValueError("expect() requires at least one token type")

    if token is None:
        raise UnexpectedEndOfInputError(types)

    if token.type not in types:
        raise UnexpectedTokenError(token, types)

    return token


def parse_list(source: Union[Source, Lexer], encoding: str = "utf-8",
               chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[Tag]:
    """Parse a whitespace separated sequence of tags

    Only plain tags are accepted; patterns, keywords and parentheses raise
    UnexpectedTokenError. Empty input gives an empty list.
    """
    lexer = source if isinstance(source, Lexer) else Lexer(source, encoding, chunk_size)
    tags: List[Tag] = []

    while True:
        token = lexer.next_token()
        if token is None:
            break

        expect(token, TokenType.TAG)
        tags.append(Tag(token.value))

    logger.debug("parsed %d tags", len(tags))
    return tags
