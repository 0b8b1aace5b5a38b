"""
DDL Lexical Layer
=================

Token-level recognisers for the DDL, built on the backtracking Cursor.
The grammar calls these directly; there is no separate token buffer.

Token Categories
----------------
- Keywords: struct, byte, uint8, uint16, uint32 (reserved everywhere)
- Identifiers: [A-Za-z_][A-Za-z0-9_]*, excluding keywords
- Integer literals: decimal digits only
- Tag literals: ' followed by exactly four raw characters and '
- Punctuation: : { } [ ] = | * ,

Comments
--------
- Single-line: // comment

Whitespace and comments may separate any two tokens; each recogniser
skips them after a successful match.

Example Usage
-------------
>>> from binddl.lexer import DDLLexer
>>> for token in DDLLexer("struct hhea : 4 { version: uint32 }").tokenize():
...     print(token)
Token(KEYWORD, 'struct', 1:1)
Token(IDENTIFIER, 'hhea', 1:8)
Token(PUNCT, ':', 1:13)
Token(NUMBER, 4, 1:15)
Token(PUNCT, '{', 1:17)
Token(IDENTIFIER, 'version', 1:19)
Token(PUNCT, ':', 1:26)
Token(KEYWORD, 'uint32', 1:28)
Token(PUNCT, '}', 1:35)
Token(EOF, 1:36)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from binddl.cursor import Cursor
from binddl.errors import DDLSyntaxError, InvalidCharacterError, SourceLocation


# =============================================================================
# Keywords and Punctuation
# =============================================================================

class Keyword(Enum):
    """Reserved words. The value of each member is its spelling."""
    STRUCT = "struct"
    BYTE = "byte"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"


KEYWORDS: dict[str, Keyword] = {keyword.value: keyword for keyword in Keyword}

PUNCTUATION = (":", "{", "}", "[", "]", "=", "|", "*", ",")


# =============================================================================
# Token Data Class
# =============================================================================

class DDLTokenType(Enum):
    KEYWORD = auto()
    IDENTIFIER = auto()
    NUMBER = auto()
    TAG = auto()
    PUNCT = auto()
    EOF = auto()


@dataclass(frozen=True)
class DDLToken:
    """
    A single token, as produced by DDLLexer.tokenize().

    Attributes:
        type: The DDLTokenType classification
        value: Spelling for keywords, identifiers and punctuation, int for
            numbers, the four raw characters for tags, None for EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: DDLTokenType
    value: str | int | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class DDLLexer(Cursor):
    """
    Cursor specialised with the DDL's lexical rules.

    Every recogniser either consumes one token plus any following
    whitespace and comments, or raises NoMatch and leaves the offset
    where it failed (callers use attempt() to restore it).
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def skip_insignificant(self) -> None:
        self.skip_ws_comments()

    def skip_ws_comments(self) -> None:
        """
        Skip any interleaving of whitespace and // line comments.

        Never fails; may consume nothing.
        """
        while True:
            self.whitespace()
            if not self.startswith("//"):
                return
            self.skip_to_eol()

    def identifier(self, expected: str = "identifier") -> str:
        """Consume an identifier that is not a reserved keyword."""
        start = self.pos
        name = self.match_identifier(self.IDENT_START, self.IDENT_CHARS, expected)
        if name in KEYWORDS:
            self.fail(expected, offset=start)
        return name

    def keyword(self, keyword: Keyword, expected: Optional[str] = None) -> Keyword:
        """Consume keyword unless it is only the prefix of a longer word."""
        self.match_keyword(self.IDENT_CHARS, keyword.value, expected)
        return keyword

    def tag_literal(self, expected: str = "tag literal") -> str:
        """
        Consume a tag literal and return its four characters verbatim.

        Any character may appear between the quotes, including quotes and
        whitespace; there are no escapes.
        """
        self.next_char("'", expected)
        chars = "".join(
            self.next_char(expected="tag literal character") for _ in range(4)
        )
        self.next_char("'", "closing quote of tag literal")
        self.skip_insignificant()
        return chars

    # =========================================================================
    # Token Stream
    # =========================================================================

    def tokenize(self) -> Iterator[DDLToken]:
        """
        Generate tokens from the current position to the end of source.

        Yields:
            DDLToken objects, ending with an EOF token

        Raises:
            DDLSyntaxError: If text that starts no token is encountered
        """
        self.skip_ws_comments()
        while not self.at_end():
            yield self._scan_token()
        yield self._make_token(DDLTokenType.EOF, None, self.pos)

    def _make_token(self, token_type: DDLTokenType, value, offset: int) -> DDLToken:
        location = self.location(offset)
        return DDLToken(
            type=token_type,
            value=value,
            line=location.line,
            column=location.column,
            filename=self.filename,
        )

    def _scan_token(self) -> DDLToken:
        start = self.pos
        char = self.peek()

        if char in self.IDENT_START:
            name = self.match_identifier(self.IDENT_START, self.IDENT_CHARS)
            if name in KEYWORDS:
                return self._make_token(DDLTokenType.KEYWORD, name, start)
            return self._make_token(DDLTokenType.IDENTIFIER, name, start)

        if char in string.digits:
            return self._make_token(DDLTokenType.NUMBER, self.int_literal(), start)

        if char == "'":
            chars = self.attempt(self.tag_literal)
            if chars is None:
                location = self.location(start)
                raise DDLSyntaxError(
                    "malformed tag literal",
                    location,
                    hint="a tag literal is exactly four characters between single quotes",
                    source_line=self.source_line(location.line),
                )
            return self._make_token(DDLTokenType.TAG, chars, start)

        for punct in PUNCTUATION:
            if self.startswith(punct):
                self.punct(punct)
                return self._make_token(DDLTokenType.PUNCT, punct, start)

        location = self.location(start)
        raise InvalidCharacterError(char, location, self.source_line(location.line))
