"""
DDL Recursive Descent Parser
============================

This module parses DDL source text into a tuple of StructDef nodes.

Grammar (EBNF)
--------------
document        ::= struct_def+
struct_def      ::= 'struct' struct_def_body
struct_def_body ::= IDENTIFIER (':' size_spec)? '{' field_defs '}'
size_spec       ::= NUMBER | field_type | IDENTIFIER
field_defs      ::= (field_def (',' field_def)*)?
field_def       ::= IDENTIFIER ':' field_type
field_type      ::= 'struct' ('[' array_size ']')? '{' field_defs '}'
                  | word_type ('[' array_size ']')? field_values
array_size      ::= NUMBER | IDENTIFIER
field_values    ::= ('=' field_value ('|' field_value)*)?
word_type       ::= 'byte' | 'uint8' | 'uint16' | 'uint32'
field_value     ::= '*' | NUMBER | TAG

Alternatives are tried in the order written and the first one whose
leading token matches commits. For example, 'struct' in a field type
always selects the nested struct branch.

Size Checks
-----------
A struct may declare its byte size after a colon. The size is checked
as soon as the field list has been read:

- the annotation must describe a fixed size, otherwise the parse fails
  with "specified struct size must be fixed";
- the fields must add up to exactly that size, otherwise the parse fails
  with "specified struct size does not match fields".

These are named failures: they stop the parse immediately instead of
letting the parser backtrack and try something else. Inline structs
nested deeper than ParseOptions.max_depth fail the same way with
"struct nesting too deep".

Example Usage
-------------
>>> from binddl.parser import parse
>>> result = parse("struct maxp : 6 { version: uint32, numGlyphs: uint16 }")
>>> result.unwrap()[0].declared_size
6
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

from binddl.ast import (
    AnyValue,
    ArrayFieldType,
    ArraySize,
    FieldDef,
    FieldType,
    FieldValue,
    FixedSize,
    IntValue,
    StructDef,
    StructFieldType,
    TagValue,
    VariableSize,
    WordFieldType,
    WordType,
    fixed_size,
    total_fixed_size,
)
from binddl.cursor import NoMatch
from binddl.errors import DDLError, DDLSyntaxError, SourceLocation
from binddl.lexer import DDLLexer, Keyword


logger = logging.getLogger(__name__)


# Word type keywords in the order they are tried
WORD_TYPE_KEYWORDS: tuple[tuple[Keyword, WordType], ...] = (
    (Keyword.BYTE, WordType.UINT8),
    (Keyword.UINT8, WordType.UINT8),
    (Keyword.UINT16, WordType.UINT16),
    (Keyword.UINT32, WordType.UINT32),
)

SIZE_MUST_BE_FIXED = "specified struct size must be fixed"
SIZE_DOES_NOT_MATCH = "specified struct size does not match fields"
NESTING_TOO_DEEP = "struct nesting too deep"


# =============================================================================
# Options and Results
# =============================================================================

@dataclass
class ParseOptions:
    """
    Parser configuration options.

    Attributes:
        filename: Name reported in source locations
        require_eof: If True, text left over after the last struct
            definition is an error. By default parsing stops at the first
            point where no further struct definition can start and the
            rest is returned as ParseOk.remaining, so DDL can be embedded
            at the start of a larger file.
        max_depth: Maximum nesting of inline struct types. Deeper input
            fails with "struct nesting too deep" instead of exhausting the
            interpreter stack.
    """
    filename: str = "<input>"
    require_eof: bool = False
    max_depth: int = 100


@dataclass(frozen=True)
class ParseOk:
    """
    Successful parse.

    Attributes:
        structs: The struct definitions, in source order
        remaining: Unconsumed trailing text ("" if the input was consumed)
    """
    structs: tuple[StructDef, ...]
    remaining: str = ""

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> tuple[StructDef, ...]:
        return self.structs


@dataclass(frozen=True)
class ParseError:
    """
    Failed parse.

    Attributes:
        message: Error description without location
        location: Where the error was detected
        error: The exception carrying the full formatted report
    """
    message: str
    location: SourceLocation
    error: Optional[DDLError] = field(default=None, compare=False, repr=False)

    @property
    def ok(self) -> bool:
        return False

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def unwrap(self) -> tuple[StructDef, ...]:
        """
        Raises:
            DDLError: Always
        """
        if self.error is not None:
            raise self.error
        raise DDLSyntaxError(self.message, self.location)


ParseResult = Union[ParseOk, ParseError]


# =============================================================================
# Parser
# =============================================================================

class DDLParser:
    """
    Recursive descent parser for the DDL.

    Each production either returns its AST node (never None) or raises
    NoMatch so that the caller can try the next alternative. A parser
    instance parses one source string once.

    Attributes:
        options: Parser configuration
    """

    def __init__(self, source: str, options: Optional[ParseOptions] = None):
        self.options = options or ParseOptions()
        self._lex = DDLLexer(source, self.options.filename)
        self._depth = 0

    @property
    def remaining(self) -> str:
        """Text not consumed by the last call to parse()."""
        return self._lex.remaining

    def parse(self) -> tuple[StructDef, ...]:
        """
        Parse the whole document.

        Returns:
            The struct definitions in source order

        Raises:
            DDLSyntaxError: If not even one struct definition can be parsed,
                or require_eof is set and text is left over
            DDLSemanticError: If a declared struct size is wrong, or inline
                structs nest deeper than options.max_depth
        """
        lex = self._lex
        lex.skip_ws_comments()
        try:
            structs = lex.one_or_more(self._parse_struct_def)
            if self.options.require_eof:
                lex.expect_end()
        except NoMatch:
            raise lex.syntax_error() from None
        return tuple(structs)

    # =========================================================================
    # Struct Definitions
    # =========================================================================

    def _parse_struct_def(self) -> StructDef:
        self._lex.keyword(Keyword.STRUCT, "struct definition")
        return self._parse_struct_def_body()

    def _parse_struct_def_body(self) -> StructDef:
        """
        Parse name, optional size annotation and field list, then check
        the annotation against the fields.
        """
        lex = self._lex
        location = lex.location()
        name = lex.identifier("struct name")

        declared_size = None
        if lex.attempt(lex.punct, ":") is not None:
            declared_size = self._parse_size_spec()

        lex.punct("{")
        fields = self._parse_field_defs()
        close = lex.mark()
        lex.punct("}")

        computed = total_fixed_size(fields)
        if declared_size is not None and computed != declared_size:
            if computed is None:
                hint = f"fields of '{name}' have variable size"
            else:
                hint = f"fields of '{name}' add up to {computed} bytes, not {declared_size}"
            lex.fail_with_message(SIZE_DOES_NOT_MATCH, close, hint=hint)

        logger.debug(
            f"Parsed struct '{name}' ({len(fields)} fields, "
            f"size {computed if computed is not None else 'variable'})"
        )
        return StructDef(name, declared_size, fields, location=location)

    def _parse_size_spec(self) -> int:
        """
        Parse the size annotation after ':' and return it in bytes.

        An integer literal is the size itself. A field type stands for its
        own fixed size. Anything that does not have a fixed size is a
        named failure, reported just after the annotation where the
        struct body should begin.
        """
        lex = self._lex

        size = lex.attempt(lex.int_literal, "struct size")
        if size is not None:
            return size

        field_type = lex.attempt(self._parse_field_type)
        if field_type is not None:
            size = fixed_size(field_type)
            if size is None:
                lex.fail_with_message(
                    SIZE_MUST_BE_FIXED,
                    hint="arrays with a variable length have no fixed size",
                )
            return size

        lex.identifier("struct size")
        lex.fail_with_message(
            SIZE_MUST_BE_FIXED,
            hint="give the size as a number of bytes or as a fixed-size type",
        )

    # =========================================================================
    # Fields
    # =========================================================================

    def _parse_field_defs(self) -> tuple[FieldDef, ...]:
        return tuple(self._lex.comma_separated_list(self._parse_field_def))

    def _parse_field_def(self) -> FieldDef:
        lex = self._lex
        location = lex.location()
        name = lex.identifier("field name")
        lex.punct(":")
        field_type = self._parse_field_type()
        return FieldDef(name, field_type, location=location)

    def _parse_field_type(self) -> FieldType:
        lex = self._lex
        start = lex.mark()

        # Nested struct, optionally repeated; takes no value list
        if lex.attempt(lex.keyword, Keyword.STRUCT, "field type") is not None:
            if self._depth >= self.options.max_depth:
                lex.fail_with_message(
                    NESTING_TOO_DEEP,
                    start,
                    hint=f"at most {self.options.max_depth} levels of inline struct are allowed",
                )
            self._depth += 1
            try:
                array_size = self._parse_optional_array_size()
                lex.punct("{")
                struct_type = StructFieldType(self._parse_field_defs())
                lex.punct("}")
            finally:
                self._depth -= 1
            if array_size is None:
                return struct_type
            return ArrayFieldType(array_size, struct_type)

        word_type = self._parse_word_type()
        array_size = self._parse_optional_array_size()
        values = self._parse_field_values()
        if array_size is None:
            return WordFieldType(word_type, values)
        return ArrayFieldType(array_size, WordFieldType(word_type), values)

    def _parse_word_type(self) -> WordType:
        lex = self._lex
        for keyword, word_type in WORD_TYPE_KEYWORDS:
            if lex.attempt(lex.keyword, keyword, "field type") is not None:
                return word_type
        lex.fail("field type")

    # =========================================================================
    # Array Sizes
    # =========================================================================

    def _parse_optional_array_size(self) -> Optional[ArraySize]:
        lex = self._lex
        if lex.attempt(lex.punct, "[") is None:
            return None
        array_size = self._parse_array_size()
        lex.punct("]")
        return array_size

    def _parse_array_size(self) -> ArraySize:
        return self._lex.first_of(self._parse_fixed_size, self._parse_variable_size)

    def _parse_fixed_size(self) -> FixedSize:
        return FixedSize(self._lex.int_literal("array size"))

    def _parse_variable_size(self) -> VariableSize:
        return VariableSize(self._lex.identifier("array size"))

    # =========================================================================
    # Allowed Values
    # =========================================================================

    def _parse_field_values(self) -> tuple[FieldValue, ...]:
        lex = self._lex
        if lex.attempt(lex.punct, "=") is None:
            return ()
        values = lex.separated_list("|", self._parse_field_value)
        if not values:
            lex.fail("field value")
        return tuple(values)

    def _parse_field_value(self) -> FieldValue:
        return self._lex.first_of(
            self._parse_any_value,
            self._parse_int_value,
            self._parse_tag_value,
        )

    def _parse_any_value(self) -> AnyValue:
        self._lex.punct("*", "field value")
        return AnyValue()

    def _parse_int_value(self) -> IntValue:
        return IntValue(self._lex.int_literal("field value"))

    def _parse_tag_value(self) -> TagValue:
        return TagValue(self._lex.tag_literal("field value"))


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(source: str, options: Optional[ParseOptions] = None) -> ParseResult:
    """
    Parse DDL source text.

    Never raises for bad input: every failure is returned as a ParseError
    carrying the message and the line/column where it was detected.

    Args:
        source: The DDL text
        options: Parser configuration (uses defaults if None)

    Returns:
        ParseOk with the struct definitions, or ParseError
    """
    options = options or ParseOptions()
    parser = DDLParser(source, options)
    try:
        structs = parser.parse()
    except DDLError as e:
        logger.debug(f"Parse of {options.filename} failed at {e.location}: {e.message}")
        return ParseError(e.message, e.location, error=e)

    logger.debug(f"Parsed {len(structs)} struct definitions from {options.filename}")
    return ParseOk(structs, parser.remaining)


def parse_source(source: str, filename: str = "<input>") -> tuple[StructDef, ...]:
    """
    Parse DDL source text into struct definitions.

    Raises:
        DDLError: If parsing fails
    """
    return DDLParser(source, ParseOptions(filename=filename)).parse()


def parse_file(
    filepath: Union[str, Path],
    options: Optional[ParseOptions] = None,
) -> ParseResult:
    """
    Parse a UTF-8 DDL file. The path is used as the filename in locations.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {filepath}")

    source = path.read_text(encoding="utf-8")
    options = replace(options or ParseOptions(), filename=str(path))
    return parse(source, options)
