"""Token vocabulary of the tag query language

Tokens are classified, positioned units of lexical input. Offsets are
zero-based UTF-8 byte offsets (half-open), lines and columns are 1-based.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Tuple


WILDCARD = "*"


class TokenType(Enum):
    """Token kinds, valued by the description used in diagnostics"""
    AND = "AND operator"
    OR = "OR operator"
    NOT = "NOT operator"
    TAG = "tag"
    PATTERN = "pattern"
    OPEN_GROUP = "opening parenthesis"
    CLOSE_GROUP = "closing parenthesis"

    def __str__(self) -> str:
        return self.value


# Matched against the lowercased text of a whole, unquoted, single-fragment token
KEYWORDS: Dict[str, TokenType] = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
}


@dataclass(frozen=True)
class Token:
    """A single token produced by the lexer

    `values` holds the literal fragments: one for a tag, N+1 around N
    wildcards for a pattern, none for keywords and parentheses.
    """
    type: TokenType
    values: Tuple[str, ...]
    start_offset: int
    end_offset: int
    line: int
    column: int

    @property
    def value(self) -> str:
        """The name of a tag token"""
        if self.type is not TokenType.TAG:
            raise AttributeError(f"{self.type} has no single value")
        return self.values[0]

    def __str__(self) -> str:
        return str(self.type)


def format_token_types(types: Iterable[TokenType]) -> str:
    """Join token descriptions: `a`, `a or b`, `a, b or c`"""
    descriptions = [str(t) for t in types]
    if len(descriptions) <= 1:
        return "".join(descriptions)
    return ", ".join(descriptions[:-1]) + " or " + descriptions[-1]
