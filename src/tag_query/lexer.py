"""Tag Query Lexer

This module turns tag query source text into a pull-based stream of tokens.
The lexer is a character-level state machine that is stepped only when a
token is requested, so no token is ever computed ahead of its consumer.

Quoting rules:
- `"..."` quotes a tag; `\\` makes the next character literal
- `*` splits a tag into pattern fragments, quoted or not
- `(` and `)` end an unquoted tag and are tokens of their own
- unquoted `and`, `or`, `not` (any case) are keywords
"""

import codecs
import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import IO, Iterator, List, Optional, Tuple, Union

from .errors import (
    InvalidEncodingError,
    LexerError,
    SourceReadError,
    TagQueryError,
    UnterminatedQuoteError,
)
from .tokens import KEYWORDS, WILDCARD, Token, TokenType

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096

Source = Union[str, bytes, bytearray, IO[str], IO[bytes]]

_GROUP_TOKENS = {
    "(": TokenType.OPEN_GROUP,
    ")": TokenType.CLOSE_GROUP,
}

# Latin-1 whitespace; the \x1c-\x1f separators are not whitespace
_LATIN1_SPACE = frozenset("\t\n\v\f\r \x85\xa0")


def _is_space(char: str) -> bool:
    if char <= "\xff":
        return char in _LATIN1_SPACE
    return char.isspace()


def _ends_line(previous: Optional[str], char: Optional[str]) -> bool:
    """Whether `char` starts a new line; LF, CRLF and a bare CR each end one line"""
    return previous == "\n" or (previous == "\r" and char != "\n")


class LexState(Enum):
    """Lexer states for the state machine"""
    BEGIN = 1
    QUOTED_STRING = 2
    UNQUOTED_STRING = 3


@dataclass(frozen=True)
class LexResult:
    """Outcome of a single pull: a token, an error, or neither at end of stream"""
    token: Optional[Token] = None
    error: Optional[TagQueryError] = None

    @property
    def is_end(self) -> bool:
        return self.token is None and self.error is None


class _SourceReader:
    """Reads a source one character at a time, fetching chunks lazily"""

    def __init__(self, source: Source, encoding: str, chunk_size: int):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        if isinstance(source, str):
            source = io.StringIO(source)
        elif isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))

        self._stream = source
        self._chunk_size = chunk_size
        self._decoder = codecs.getincrementaldecoder(encoding)("strict")
        self._text = ""
        self._position = 0
        self._eof = False
        self._error: Optional[UnicodeDecodeError] = None

    def read(self) -> Optional[str]:
        """Return the next character, or None at end of input

        Decoding errors are raised only once every character decoded
        before the bad input has been read.
        """
        while self._position >= len(self._text):
            if self._error is not None:
                raise self._error
            if self._eof:
                return None
            self._fill()

        char = self._text[self._position]
        self._position += 1
        return char

    def _fill(self) -> None:
        chunk = self._stream.read(self._chunk_size)
        self._position = 0

        if isinstance(chunk, str):
            self._text = chunk
            self._eof = not chunk
            return

        final = not chunk
        self._eof = final
        try:
            self._text = self._decoder.decode(bytes(chunk), final)
        except UnicodeDecodeError as e:
            # Keep the valid prefix so its tokens are still produced
            self._text = e.object[:e.start].decode(e.encoding)
            self._error = e


class Lexer:
    """Pull-based tokenizer for tag queries

    Each call to `next_token()` resumes the state machine where the previous
    call left it and runs only until one token is complete. A lexer is also
    an iterator over its tokens.

    Examples:
    - `foo "bar baz"` gives two tags
    - `foo*` gives the pattern `("foo", "")`
    - `(a OR b) AND NOT c` gives groups, keywords and tags
    """

    def __init__(self, source: Source, encoding: str = "utf-8",
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Create a lexer over a str, bytes, or a text/binary file object

        `encoding` is used to decode byte sources; offsets are always
        counted in UTF-8 bytes.
        """
        self._reader = _SourceReader(source, encoding, chunk_size)
        self._state = LexState.BEGIN
        self._buffer: List[str] = []
        self._values: List[str] = []
        self._token_start: Tuple[int, int, int] = (0, 1, 1)
        self._current: Optional[str] = None
        self._previous: Optional[str] = None
        self._current_offset = 0
        self._offset = 0
        self._line = 1
        self._column = 0
        self._reuse_current = False
        self._exhausted = False
        self._failed = False

    @property
    def state(self) -> LexState:
        return self._state

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    def next_token(self) -> Optional[Token]:
        """Return the next token, or None once the source is exhausted

        Raises a LexerError subclass on fatal errors. After that the lexer
        refuses to be pulled again.
        """
        if self._failed:
            raise LexerError("lexer cannot be pulled after a fatal error")
        if self._exhausted:
            return None

        try:
            token = self._scan()
        except LexerError as e:
            self._failed = True
            logger.debug("lexing failed: %s", e)
            raise

        if token is None:
            self._exhausted = True
            logger.debug("end of token stream at offset %d", self._offset)
        else:
            logger.debug("token %s %r at %d:%d", token.type.name, token.values,
                         token.line, token.column)
        return token

    def next_result(self) -> LexResult:
        """Pull the next token as a tagged result instead of raising"""
        try:
            token = self.next_token()
        except TagQueryError as e:
            return LexResult(error=e)
        return LexResult(token=token)

    def _scan(self) -> Optional[Token]:
        if self._state == LexState.QUOTED_STRING:
            return self._quoted_string()
        if self._state == LexState.UNQUOTED_STRING:
            return self._unquoted_string()
        return self._begin()

    def _begin(self) -> Optional[Token]:
        self._state = LexState.BEGIN

        while self._advance():
            char = self._current
            if _is_space(char):
                continue

            if char in _GROUP_TOKENS:
                self._start_token()
                return self._end_token(_GROUP_TOKENS[char], self._offset)

            self._start_token()
            if char == '"':
                self._state = LexState.QUOTED_STRING
                return self._quoted_string()

            self._state = LexState.UNQUOTED_STRING
            return self._unquoted_string()

        return None

    def _quoted_string(self) -> Token:
        # The opening quote is the current character
        while True:
            self._must_advance()
            char = self._current

            if char == '"':
                self._capture_value()
                self._state = LexState.BEGIN
                return self._end_token(self._classify(), self._offset)
            elif char == WILDCARD:
                self._capture_value()
            elif char == "\\":
                self._must_advance()
                self._buffer.append(self._current)
            else:
                self._buffer.append(char)

    def _unquoted_string(self) -> Token:
        # The first character of the tag is the current character
        while True:
            char = self._current

            if char == WILDCARD:
                self._capture_value()
            elif char == '"':
                token = self._end_unquoted_string(self._current_offset)
                self._start_token()
                self._state = LexState.QUOTED_STRING
                return token
            elif char in _GROUP_TOKENS:
                token = self._end_unquoted_string(self._current_offset)
                self._state = LexState.BEGIN
                self._reuse_current = True
                return token
            else:
                self._buffer.append(char)

            if not self._advance():
                self._state = LexState.BEGIN
                return self._end_unquoted_string(self._offset)

            if _is_space(self._current):
                self._state = LexState.BEGIN
                return self._end_unquoted_string(self._current_offset)

    def _end_unquoted_string(self, end_offset: int) -> Token:
        if not self._values:
            keyword = KEYWORDS.get("".join(self._buffer).lower())
            if keyword is not None:
                self._buffer.clear()
                return self._end_token(keyword, end_offset)

        self._capture_value()
        return self._end_token(self._classify(), end_offset)

    def _classify(self) -> TokenType:
        return TokenType.TAG if len(self._values) == 1 else TokenType.PATTERN

    def _advance(self) -> bool:
        """Consume one character; return False at end of input"""
        if self._reuse_current:
            self._reuse_current = False
            return True

        try:
            char = self._reader.read()
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(
                f"invalid {e.encoding} input at offset {self._offset}",
                self._offset, *self._next_position()) from e
        except OSError as e:
            raise SourceReadError(
                f"failed to read source at offset {self._offset}: {e}",
                self._offset, *self._next_position()) from e

        if char is None:
            self._current_offset = self._offset
            return False

        try:
            width = len(char.encode("utf-8"))
        except UnicodeEncodeError as e:
            raise InvalidEncodingError(
                f"invalid character {char!r} at offset {self._offset}",
                self._offset, *self._next_position()) from e

        self._previous = self._current
        self._current = char
        self._current_offset = self._offset
        self._offset += width
        self._column += 1

        if _ends_line(self._previous, char):
            self._line += 1
            self._column = 1

        return True

    def _next_position(self) -> Tuple[int, int]:
        """Line and column of the character after the current one"""
        if _ends_line(self._current, None):
            return self._line + 1, 1
        return self._line, self._column + 1

    def _must_advance(self) -> None:
        if not self._advance():
            offset, line, column = self._token_start
            raise UnterminatedQuoteError(
                f"unexpected end of input, unterminated quoted string "
                f"starting at line {line}, column {column}",
                offset, line, column)

    def _start_token(self) -> None:
        self._token_start = (self._current_offset, self._line, self._column)
        self._buffer.clear()
        self._values = []

    def _capture_value(self) -> None:
        self._values.append("".join(self._buffer))
        self._buffer.clear()

    def _end_token(self, token_type: TokenType, end_offset: int) -> Token:
        offset, line, column = self._token_start
        token = Token(token_type, tuple(self._values), offset, end_offset, line, column)
        self._values = []
        return token


def lex(source: Source, encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Token]:
    """Iterate over every token of a source, lazily

    The source and options are checked here, before the first token.
    """
    return Lexer(source, encoding, chunk_size)


def tokenize(source: Source, encoding: str = "utf-8",
             chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[Token]:
    """Tokenize a whole source into a list"""
    return list(Lexer(source, encoding, chunk_size))
