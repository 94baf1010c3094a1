"""Core value and token types for the Wispy template engine.

Value Kinds:
Every value that flows through the resolver is paired with a `Kind` so
tags and filters can dispatch on shape without repeated isinstance chains:

    NULL      None
    BOOL      True / False
    INT       int (bool excluded)
    FLOAT     float
    STRING    str
    SEQUENCE  list / tuple
    MAPPING   any collections.abc.Mapping (dict, LoopContext, ...)
    OBJECT    anything else (opaque host object)

Tokens:
The scanner does not build an AST. A `Token` only records offsets into the
template source; the driver slices the source itself.

"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, NamedTuple


class Kind(Enum):
    """Reflected kind of a template value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OBJECT = "object"

    @property
    def is_scalar(self) -> bool:
        """True for kinds whose textual form cannot carry markup."""
        return self in (Kind.NULL, Kind.BOOL, Kind.INT, Kind.FLOAT)


def kind_of(value: Any) -> Kind:
    """Return the Kind of a value.

    Order matters: bool is a subclass of int and str is a sequence.
    """
    if value is None:
        return Kind.NULL
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, int):
        return Kind.INT
    if isinstance(value, float):
        return Kind.FLOAT
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, (list, tuple)):
        return Kind.SEQUENCE
    if isinstance(value, Mapping):
        return Kind.MAPPING
    return Kind.OBJECT


class TokenType(Enum):
    """Construct recognized by the scanner."""

    VARIABLE = "variable"
    BLOCK = "block"
    COMMENT = "comment"


class Token(NamedTuple):
    """Offsets of one sentinel-delimited construct.

    Attributes:
        type: Which construct was found
        start: Offset of the opening sentinel
        end: Offset one past the closing sentinel (or past the opener
            when the construct is unclosed)
        inner_start: Offset of the first character after the opener
        inner_end: Offset of the closing sentinel (equal to inner_start
            when unclosed)
        closed: False when the matching closer was not found
    """

    type: TokenType
    start: int
    end: int
    inner_start: int
    inner_end: int
    closed: bool = True
