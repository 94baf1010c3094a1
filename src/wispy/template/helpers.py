"""Pure value helpers shared by the driver, tags and filters.

None of these touch a RenderContext; they depend only on their arguments.
"""

from __future__ import annotations

from typing import Any

from wispy._types import Kind, kind_of


def is_truthy(value: Any) -> bool:
    """Template truthiness.

    Falsy: None, False, 0, 0.0, "", empty sequence, empty mapping.
    Everything else, including any non-null host object, is truthy.
    """
    kind = kind_of(value)
    if kind is Kind.NULL:
        return False
    if kind in (Kind.BOOL, Kind.INT, Kind.FLOAT):
        return value != 0
    if kind in (Kind.STRING, Kind.SEQUENCE, Kind.MAPPING):
        return len(value) > 0
    return True


def format_value(value: Any) -> str:
    """Default textual form of a value.

    Example:
        >>> format_value(None), format_value(True), format_value(3.0)
        ('', 'true', '3')
        >>> format_value(["a", 1, 2.5])
        '[a, 1, 2.5]'
    """
    kind = kind_of(value)
    if kind is Kind.NULL:
        return ""
    if kind is Kind.STRING:
        return value
    if kind is Kind.BOOL:
        return "true" if value else "false"
    if kind is Kind.INT:
        return str(value)
    if kind is Kind.FLOAT:
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    if kind is Kind.SEQUENCE:
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if kind is Kind.MAPPING:
        return "{" + ", ".join(f"{key}: {format_value(item)}" for key, item in value.items()) + "}"
    return str(value)
