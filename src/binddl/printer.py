"""
Canonical DDL Printer
=====================

Renders struct definitions back to DDL source text in one canonical
layout:

    struct head : 14 {
        version: uint32 = 1,
        flags: uint16,
        glyphs: struct[4] {
            id: uint16
        }
    }

Parsing the printed text gives back a tree equal to the one printed.
Comments and original layout are not preserved, ``byte`` is written as
``uint8`` and a declared size is written as a number of bytes.
"""

from typing import Iterable

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
    WordFieldType,
)


INDENT = "    "


def format_document(structs: Iterable[StructDef]) -> str:
    """Format struct definitions separated by blank lines."""
    return "\n\n".join(format_struct(struct) for struct in structs) + "\n"


def format_struct(struct: StructDef) -> str:
    header = f"struct {struct.name}"
    if struct.declared_size is not None:
        header += f" : {struct.declared_size}"
    return header + " " + _format_body(struct.fields, 0)


def format_field_type(field_type: FieldType, level: int = 0) -> str:
    """
    Format a field type. ``level`` is the indentation depth of the field
    holding it, used for nested struct bodies.
    """
    if isinstance(field_type, StructFieldType):
        return "struct " + _format_body(field_type.fields, level)

    if isinstance(field_type, ArrayFieldType):
        size = format_array_size(field_type.size)
        element = field_type.element
        if isinstance(element, StructFieldType):
            return f"struct[{size}] " + _format_body(element.fields, level)
        text = f"{element.word_type.keyword}[{size}]"
    elif isinstance(field_type, WordFieldType):
        text = field_type.word_type.keyword
    else:
        raise TypeError(f"not a field type: {field_type!r}")

    if field_type.values:
        text += " = " + " | ".join(format_value(v) for v in field_type.values)
    return text


def format_array_size(size: ArraySize) -> str:
    if isinstance(size, FixedSize):
        return str(size.count)
    return size.name


def format_value(value: FieldValue) -> str:
    if isinstance(value, AnyValue):
        return "*"
    if isinstance(value, IntValue):
        return str(value.value)
    return f"'{value.chars}'"


def _format_body(fields: tuple[FieldDef, ...], level: int) -> str:
    if not fields:
        return "{ }"
    inner = INDENT * (level + 1)
    lines = [
        f"{inner}{f.name}: {format_field_type(f.type, level + 1)}"
        for f in fields
    ]
    return "{\n" + ",\n".join(lines) + "\n" + INDENT * level + "}"


# =============================================================================
# Debug Printer
# =============================================================================

class ASTPrinter:
    """
    Pretty printer for AST debugging.

    Produces an indented tree, one node per line:

        Struct: head (declared size 6)
          Field: version uint32 = 1
          Field: flags uint16

    Usage:
        printer = ASTPrinter()
        print(printer.print(structs))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, structs: Iterable[StructDef]) -> str:
        """Print a sequence of struct definitions and return as string."""
        self.output = []
        self.indent_level = 0
        for struct in structs:
            self.visit(struct)
        return "\n".join(self.output)

    def visit(self, node) -> None:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        visitor(node)

    def generic_visit(self, node) -> None:
        self._emit(repr(node))

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def visit_StructDef(self, node: StructDef):
        size = node.fixed_size
        if node.declared_size is not None:
            detail = f"declared size {node.declared_size}"
        elif size is not None:
            detail = f"size {size}"
        else:
            detail = "variable size"
        self._emit(f"Struct: {node.name} ({detail})")
        self._visit_fields(node.fields)

    def visit_FieldDef(self, node: FieldDef):
        field_type = node.type
        if isinstance(field_type, StructFieldType):
            self._emit(f"Field: {node.name} struct")
            self._visit_fields(field_type.fields)
        elif isinstance(field_type, ArrayFieldType) and isinstance(
            field_type.element, StructFieldType
        ):
            self._emit(f"Field: {node.name} struct[{format_array_size(field_type.size)}]")
            self._visit_fields(field_type.element.fields)
        else:
            self._emit(f"Field: {node.name} {format_field_type(field_type)}")

    def _visit_fields(self, fields: tuple[FieldDef, ...]) -> None:
        self.indent_level += 1
        for field_def in fields:
            self.visit(field_def)
        self.indent_level -= 1
