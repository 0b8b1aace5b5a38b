"""
binddl Error Hierarchy
======================

This module defines the exception hierarchy for the DDL parser.
All exceptions inherit from DDLError, allowing callers to catch every
parse-related error with a single except clause.

Exception Hierarchy
-------------------
DDLError (base)
├── DDLSyntaxError - source text does not match the grammar
│   └── InvalidCharacterError - character that starts no token
└── DDLSemanticError - named failure raised while reducing a production
                       (e.g. a declared struct size that does not match)

Error Message Format
--------------------
All errors include source location information when it is known:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    head.ddl:3:12: error: specified struct size does not match fields
        struct head : 8 { version: uint32 }
                                          ^
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in DDL source text.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, counted in characters)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception
# =============================================================================

class DDLError(Exception):
    """
    Base exception for all DDL errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the line holding the error
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            tables.ddl:2:5: error: expected identifier
                struct { a: uint8 }
                       ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            # Tabs are kept so the caret lines up in terminals
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                prefix = "".join(
                    c if c == "\t" else " "
                    for c in self.source_line[:self.location.column - 1]
                )
                parts.append(f"    {prefix}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors
# =============================================================================

class DDLSyntaxError(DDLError):
    """
    The source text does not match the DDL grammar.

    Raised by the parse driver when no derivation succeeds. The location
    is the furthest point the parser reached, and ``expected`` lists what
    would have been accepted there.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        expected: Optional[list[str]] = None,
    ):
        self.expected = expected or []
        super().__init__(message, location, hint=hint, source_line=source_line)


class InvalidCharacterError(DDLSyntaxError):
    """A character that cannot start any DDL token."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character {char!r} (U+{ord(char):04X})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Semantic Errors
# =============================================================================

class DDLSemanticError(DDLError):
    """
    A named failure.

    The text was well-formed up to this point but a check attached to a
    production failed. Named failures are never retried by backtracking:
    they abort the whole parse with their own message.

    Examples:
        - a declared struct size that is not a fixed-size type
        - a declared struct size that differs from the sum of its fields
    """
    pass
