"""
DDL Abstract Syntax Tree
========================

This module defines the value types produced by the DDL parser, plus the
size computations that the parser uses to check declared struct sizes.

Node Hierarchy
--------------
StructDef - a named top-level record
└── FieldDef - one named field of a record
    └── FieldType
        ├── WordFieldType - scalar of fixed width (uint8/uint16/uint32)
        ├── ArrayFieldType - repeated element with a fixed or variable count
        └── StructFieldType - anonymous nested record

ArraySize is FixedSize or VariableSize; FieldValue is AnyValue, IntValue
or TagValue.

Design Notes
------------
- All nodes are frozen dataclasses; ordered lists are tuples
- ``location`` is carried for diagnostics only and does not take part in
  equality, so two trees parsed from differently formatted text compare
  equal
- The surface keyword ``byte`` is an alias: it produces WordType.UINT8
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from binddl.errors import SourceLocation


# =============================================================================
# Scalars
# =============================================================================

class WordType(Enum):
    """
    Scalar word types. The value of each member is its size in bytes.
    """
    UINT8 = 1
    UINT16 = 2
    UINT32 = 4

    @property
    def size(self) -> int:
        return self.value

    @property
    def keyword(self) -> str:
        """Canonical DDL spelling (``byte`` is never produced)."""
        return self.name.lower()


# =============================================================================
# Array Sizes
# =============================================================================

@dataclass(frozen=True)
class FixedSize:
    """Array bound given as an integer literal."""
    count: int


@dataclass(frozen=True)
class VariableSize:
    """
    Array bound naming another field or an external length source.

    The name is not resolved at parse time.
    """
    name: str


ArraySize = Union[FixedSize, VariableSize]


# =============================================================================
# Allowed Values
# =============================================================================

@dataclass(frozen=True)
class AnyValue:
    """Wildcard value ``*``."""
    pass


@dataclass(frozen=True)
class IntValue:
    value: int


@dataclass(frozen=True)
class TagValue:
    """
    Four-character tag literal such as ``'head'``.

    The characters are kept exactly as written; nothing is unescaped.
    """
    chars: str

    def __post_init__(self):
        if len(self.chars) != 4:
            raise ValueError(f"tag literal must have 4 characters, got {self.chars!r}")

    @property
    def packed(self) -> int:
        """
        The tag as a big-endian 32-bit integer, e.g. 'true' -> 0x74727565.

        Raises:
            ValueError: If a character is outside the range 0..255
        """
        try:
            return int.from_bytes(self.chars.encode("latin-1"), "big")
        except UnicodeEncodeError:
            raise ValueError(
                f"tag {self.chars!r} contains a character that does not fit in a byte"
            ) from None


FieldValue = Union[AnyValue, IntValue, TagValue]


# =============================================================================
# Field Types
# =============================================================================

@dataclass(frozen=True)
class WordFieldType:
    """
    A scalar field.

    Attributes:
        word_type: Width of the scalar
        values: Allowed values; empty means unconstrained
    """
    word_type: WordType
    values: tuple[FieldValue, ...] = ()


@dataclass(frozen=True)
class ArrayFieldType:
    """
    A repeated element.

    Attributes:
        size: Fixed or variable element count
        element: Element type (a word or an inline struct)
        values: Allowed values for each element; only used for word elements
    """
    size: ArraySize
    element: "FieldType"
    values: tuple[FieldValue, ...] = ()


@dataclass(frozen=True)
class StructFieldType:
    """An anonymous nested record."""
    fields: tuple["FieldDef", ...] = ()


FieldType = Union[WordFieldType, ArrayFieldType, StructFieldType]


# =============================================================================
# Definitions
# =============================================================================

@dataclass(frozen=True)
class FieldDef:
    """
    A named field. Names are not required to be unique.
    """
    name: str
    type: FieldType
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class StructDef:
    """
    A top-level record definition.

    Attributes:
        name: Struct name
        declared_size: Size written after ':' in the source, if any. When
            present it always equals total_fixed_size(fields).
        fields: Ordered field definitions
        location: Position of the struct name
    """
    name: str
    declared_size: Optional[int] = None
    fields: tuple[FieldDef, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    @property
    def fixed_size(self) -> Optional[int]:
        """Computed size of the record, or None if any field is variable."""
        return total_fixed_size(self.fields)


# =============================================================================
# Size Computation
# =============================================================================

def fixed_size(field_type: FieldType) -> Optional[int]:
    """
    Return the size in bytes of a field type, or None if it is not fixed.

    A word is always fixed. A fixed-count array is fixed when its element
    is. A variable-count array never is. A nested struct is fixed when
    all of its fields are.
    """
    if isinstance(field_type, WordFieldType):
        return field_type.word_type.size

    if isinstance(field_type, ArrayFieldType):
        if not isinstance(field_type.size, FixedSize):
            return None
        element_size = fixed_size(field_type.element)
        if element_size is None:
            return None
        return field_type.size.count * element_size

    if isinstance(field_type, StructFieldType):
        return total_fixed_size(field_type.fields)

    raise TypeError(f"not a field type: {field_type!r}")


def total_fixed_size(fields: Iterable[FieldDef]) -> Optional[int]:
    """Sum of the fixed sizes of fields, or None if any is not fixed."""
    total = 0
    for field_def in fields:
        size = fixed_size(field_def.type)
        if size is None:
            return None
        total += size
    return total

