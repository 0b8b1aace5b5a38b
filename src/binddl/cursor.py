"""
Backtracking Text Cursor
========================

A small parsing utility: a position-tracking cursor over a string with
the combinators a hand-written recursive descent parser needs.

Failure Model
-------------
There are two kinds of failure:

- **Ordinary mismatch.** A primitive that does not match raises the
  internal ``NoMatch`` exception. ``attempt`` (and the combinators built
  on it) catch ``NoMatch``, restore the saved offset and let the caller try
  something else. Every mismatch is noted together with what was expected
  there, so the parse driver can report the *furthest* failure point, which
  is almost always where the author made the mistake.

- **Named failure.** ``fail_with_message`` raises ``DDLSemanticError``.
  Nothing in this module catches it, so it cuts through all pending
  alternatives and ends the parse with its own message.

Insignificant Text
------------------
Token-level primitives (``punct``, ``match_keyword``, ``match_identifier``,
``int_literal``) skip insignificant text *after* a successful match by
calling ``skip_insignificant``. The default skips whitespace; subclasses
override it to skip comments as well.

Example
-------
>>> cursor = Cursor("a , b , c")
>>> cursor.separated_list(",", lambda: cursor.match_identifier("abc", "abc"))
['a', 'b', 'c']
"""

import bisect
import string
from typing import Callable, NoReturn, Optional, TypeVar

from binddl.errors import DDLSemanticError, DDLSyntaxError, SourceLocation


T = TypeVar("T")


class NoMatch(Exception):
    """
    Raised by a production that does not match at the current offset.

    This is control flow, not an error report: it never escapes the
    parser. The driver converts an unhandled NoMatch into a
    DDLSyntaxError located at the furthest failure.
    """
    pass


def describe_expected(expected: list[str]) -> str:
    """
    Join expectation descriptions for an error message.

    >>> describe_expected(["'{'", "identifier", "':'"])
    "'{', identifier or ':'"
    """
    if not expected:
        return "valid input"
    if len(expected) == 1:
        return expected[0]
    return ", ".join(expected[:-1]) + " or " + expected[-1]


class Cursor:
    """
    Position-tracking cursor over an immutable source string.

    Productions are zero-argument callables (usually bound methods) that
    either return a non-None value and advance the cursor, or raise
    NoMatch. Combinators rely on the non-None convention to tell a match
    from a failed attempt.

    Attributes:
        source: The text being parsed
        filename: Name used in source locations
        pos: Current offset into source
    """

    WHITESPACE = " \t\r\n\f\v"

    # Default int() string conversion limit of CPython
    MAX_INT_DIGITS = 4300

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self.pos = 0

        # Offsets at which each line starts, for offset -> line/column
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

        # Furthest failure seen so far and what was expected there
        self._furthest = 0
        self._expected: list[str] = []

    # =========================================================================
    # Position
    # =========================================================================

    def at_end(self) -> bool:
        """Check if the whole source has been consumed."""
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or "" past the end."""
        pos = self.pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def startswith(self, text: str) -> bool:
        """Check if the unconsumed input starts with text."""
        return self.source.startswith(text, self.pos)

    def mark(self) -> int:
        """Return the current offset so it can be restored with reset()."""
        return self.pos

    def reset(self, mark: int) -> None:
        self.pos = mark

    @property
    def remaining(self) -> str:
        """The unconsumed input."""
        return self.source[self.pos:]

    def location(self, offset: Optional[int] = None) -> SourceLocation:
        """
        Convert an offset (default: current position) to a SourceLocation.

        Lines and columns are 1-indexed; columns count characters.
        """
        if offset is None:
            offset = self.pos
        index = bisect.bisect_right(self._line_starts, offset) - 1
        return SourceLocation(
            self.filename,
            index + 1,
            offset - self._line_starts[index] + 1,
        )

    def source_line(self, line: int) -> Optional[str]:
        """Text of a 1-indexed line without its line terminator."""
        if not 0 < line <= len(self._line_starts):
            return None
        start = self._line_starts[line - 1]
        end = self.source.find("\n", start)
        if end == -1:
            end = len(self.source)
        return self.source[start:end].rstrip("\r")

    # =========================================================================
    # Failure
    # =========================================================================

    def fail(self, expected: str, offset: Optional[int] = None) -> NoReturn:
        """
        Fail the current production with an ordinary mismatch.

        Args:
            expected: Description of what would have matched here
            offset: Where the mismatch happened (default: current position)
        """
        if offset is None:
            offset = self.pos
        self._note_expected(expected, offset)
        raise NoMatch(expected)

    def _note_expected(self, expected: str, offset: int) -> None:
        """Track the furthest failure offset and its expectations."""
        if offset > self._furthest:
            self._furthest = offset
            self._expected = [expected]
        elif offset == self._furthest and expected not in self._expected:
            self._expected.append(expected)

    def fail_with_message(
        self,
        message: str,
        offset: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> NoReturn:
        """
        Abort the parse with a named failure.

        Raises:
            DDLSemanticError: Always; no enclosing attempt() will catch it
        """
        location = self.location(offset)
        raise DDLSemanticError(
            message,
            location,
            hint=hint,
            source_line=self.source_line(location.line),
        )

    def syntax_error(self) -> DDLSyntaxError:
        """Build the error describing the furthest failure seen so far."""
        location = self.location(self._furthest)
        if self._furthest >= len(self.source):
            found = "end of input"
        else:
            found = repr(self.source[self._furthest])
        return DDLSyntaxError(
            f"expected {describe_expected(self._expected)}",
            location,
            hint=f"found {found}",
            source_line=self.source_line(location.line),
            expected=list(self._expected),
        )

    # =========================================================================
    # Combinators
    # =========================================================================

    def attempt(self, production: Callable[..., T], *args) -> Optional[T]:
        """
        Run production; on mismatch restore the offset and return None.
        """
        saved = self.pos
        try:
            return production(*args)
        except NoMatch:
            self.pos = saved
            return None

    def first_of(self, *alternatives: Callable[[], T]) -> T:
        """
        Ordered choice: return the result of the first alternative that
        matches. Order matters; the first match commits.
        """
        for alternative in alternatives:
            result = self.attempt(alternative)
            if result is not None:
                return result
        raise NoMatch()

    def zero_or_more(self, production: Callable[[], T]) -> list[T]:
        items = []
        while True:
            item = self.attempt(production)
            if item is None:
                return items
            items.append(item)

    def one_or_more(self, production: Callable[[], T]) -> list[T]:
        """Like zero_or_more, but the first production must match."""
        first = production()
        return [first] + self.zero_or_more(production)

    def separated_list(
        self,
        separator: str,
        production: Callable[[], T],
    ) -> list[T]:
        """
        Zero or more productions separated by a punctuation string.

        A separator is only consumed together with the production that
        follows it, so a trailing separator is left unconsumed.
        """
        first = self.attempt(production)
        if first is None:
            return []

        items = [first]
        while True:
            saved = self.pos
            try:
                self.punct(separator)
                item = production()
            except NoMatch:
                self.pos = saved
                return items
            items.append(item)

    def comma_separated_list(self, production: Callable[[], T]) -> list[T]:
        return self.separated_list(",", production)

    # =========================================================================
    # Primitives
    # =========================================================================

    def skip_insignificant(self) -> None:
        """Skip text allowed between tokens. Subclasses add comments."""
        self.whitespace()

    def whitespace(self) -> None:
        """Consume a run of whitespace (possibly empty)."""
        while not self.at_end() and self.source[self.pos] in self.WHITESPACE:
            self.pos += 1

    def skip_to_eol(self) -> None:
        """Consume up to and including the next newline (or to the end)."""
        end = self.source.find("\n", self.pos)
        self.pos = len(self.source) if end == -1 else end + 1

    def next_char(
        self,
        char: Optional[str] = None,
        expected: Optional[str] = None,
    ) -> str:
        """
        Consume one raw character, optionally requiring it to equal char.

        No insignificant text is skipped.
        """
        current = self.peek()
        if not current or (char is not None and current != char):
            if expected is None:
                expected = repr(char) if char is not None else "a character"
            self.fail(expected)
        self.pos += 1
        return current

    def literal(self, text: str, expected: Optional[str] = None) -> str:
        """Consume text exactly, without skipping anything afterwards."""
        if not self.startswith(text):
            self.fail(expected or f"'{text}'")
        self.pos += len(text)
        return text

    def punct(self, text: str, expected: Optional[str] = None) -> str:
        """Consume punctuation text, then skip insignificant text."""
        self.literal(text, expected)
        self.skip_insignificant()
        return text

    def match_keyword(
        self,
        ident_chars: str,
        text: str,
        expected: Optional[str] = None,
    ) -> str:
        """
        Consume keyword text when it is not followed by an identifier
        character, then skip insignificant text.
        """
        following = self.peek(len(text))
        if not self.startswith(text) or (following and following in ident_chars):
            self.fail(expected or f"'{text}'")
        self.pos += len(text)
        self.skip_insignificant()
        return text

    def match_identifier(
        self,
        init_chars: str,
        ident_chars: str,
        expected: str = "identifier",
    ) -> str:
        """
        Consume a maximal identifier, then skip insignificant text.

        Args:
            init_chars: Characters allowed first
            ident_chars: Characters allowed after the first
        """
        first = self.peek()
        if not first or first not in init_chars:
            self.fail(expected)

        start = self.pos
        self.pos += 1
        while not self.at_end() and self.source[self.pos] in ident_chars:
            self.pos += 1
        name = self.source[start:self.pos]

        self.skip_insignificant()
        return name

    def int_literal(self, expected: str = "integer literal") -> int:
        """
        Consume a run of decimal digits, then skip insignificant text.

        Raises:
            DDLSemanticError: If the run is longer than MAX_INT_DIGITS
        """
        start = self.pos
        while not self.at_end() and self.source[self.pos] in string.digits:
            self.pos += 1
        if self.pos == start:
            self.fail(expected)

        digits = self.pos - start
        if digits > self.MAX_INT_DIGITS:
            self.fail_with_message(
                "integer literal too large",
                start,
                hint=f"literal has {digits} digits, at most {self.MAX_INT_DIGITS} are allowed",
            )

        value = int(self.source[start:self.pos])
        self.skip_insignificant()
        return value

    def expect_end(self) -> None:
        """Fail unless the whole source has been consumed."""
        if not self.at_end():
            self.fail("end of input")
