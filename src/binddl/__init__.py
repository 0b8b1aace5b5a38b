"""
binddl - Parser for a Binary Record Description Language
========================================================

This package parses a small schema language ("DDL") that describes the
layout of binary records, such as the tables of a font file or the
chunks of a container format, into an abstract syntax tree.

A DDL document is a list of struct definitions:

    // Font header
    struct head : 8 {
        version: uint32 = 65536,
        tag: uint32 = 'true' | 'OTTO'
    }

Each field is a word (``byte``/``uint8``, ``uint16``, ``uint32``), an array
of words with a fixed or named length, or an inline ``struct``. A size
written after the struct name is checked against the fields.

Main Components
---------------
- **cursor**: generic backtracking text cursor and combinators
- **lexer**: DDL tokens (identifiers, keywords, literals, comments)
- **parser**: recursive descent grammar and the ``parse`` entry point
- **ast**: immutable AST node types and size computation
- **printer**: canonical DDL printer and AST debug dump
- **cli**: the ``ddlc`` command-line tool

Quick Start
-----------
>>> from binddl import parse
>>> result = parse("struct maxp { version: uint32, numGlyphs: uint16 }")
>>> result.ok
True
>>> [f.name for f in result.structs[0].fields]
['version', 'numGlyphs']
"""

__version__ = "0.3.0"

from binddl.errors import (
    DDLError,
    DDLSyntaxError,
    DDLSemanticError,
    InvalidCharacterError,
    SourceLocation,
)
from binddl.ast import (
    WordType,
    FixedSize,
    VariableSize,
    AnyValue,
    IntValue,
    TagValue,
    WordFieldType,
    ArrayFieldType,
    StructFieldType,
    FieldDef,
    StructDef,
    fixed_size,
    total_fixed_size,
)
from binddl.parser import (
    DDLParser,
    ParseOptions,
    ParseOk,
    ParseError,
    parse,
    parse_source,
    parse_file,
)
from binddl.printer import ASTPrinter, format_document

__all__ = [
    "__version__",
    # Errors
    "DDLError",
    "DDLSyntaxError",
    "DDLSemanticError",
    "InvalidCharacterError",
    "SourceLocation",
    # AST
    "WordType",
    "FixedSize",
    "VariableSize",
    "AnyValue",
    "IntValue",
    "TagValue",
    "WordFieldType",
    "ArrayFieldType",
    "StructFieldType",
    "FieldDef",
    "StructDef",
    "fixed_size",
    "total_fixed_size",
    # Parser
    "DDLParser",
    "ParseOptions",
    "ParseOk",
    "ParseError",
    "parse",
    "parse_source",
    "parse_file",
    # Printing
    "ASTPrinter",
    "format_document",
]
