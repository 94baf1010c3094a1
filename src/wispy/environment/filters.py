"""Built-in filters for Wispy templates.

Filters transform a resolved value inside ``{{ }}`` and tag expressions:
`{{ value | filter }}` or `{{ value | filter: arg1, arg2 }}`

Every filter has the signature ``(value, kind, args) -> value``: ``kind`` is
the reflected `Kind` of ``value`` and ``args`` are the raw argument tokens,
quotes included. Filters are pure; they never see the render context.

Categories:
**String Case**:
    - `upcase` / `downcase`: Unicode case conversion
    - `capitalize`: First character upper-cased, the rest untouched

**String Cleanup**:
    - `trim`: Strip surrounding whitespace
    - `strip`: Remove every ``<...>`` tag span

**String Editing**:
    - `append(s)` / `prepend(s)`: Concatenate on the right / left
    - `remove(s)`: Delete every occurrence
    - `replace(old, new)`: Replace every occurrence
    - `truncate(n, ellipsis="...")`: Cut to n characters

**Collections**:
    - `split(delim)`: String to a list of trimmed pieces
    - `join(delim)`: List to a string
    - `slice(start, end=len)`: Half-open range of a string or list

**Fallback**:
    - `default(value)`: Replace None, "" or an empty list

Kind Handling:
A filter given a kind it does not handle returns the value unchanged.
Arguments that cannot be read (``truncate: "ten"``) raise
`FilterArgumentError`, which the resolver reports as a
``filter-type-mismatch`` diagnostic.

Custom Filters:
    >>> env.filters["shout"] = lambda value, kind, args: f"{value}!"
    >>> # {{ greeting | shout }}

"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

from wispy._types import Kind
from wispy.environment.exceptions import FilterArgumentError
from wispy.lexer import unquote
from wispy.template.helpers import format_value

FilterFunc = Callable[[Any, Kind, Sequence[str]], Any]

_TAG_SPAN_RE = re.compile(r"<[^>]*>")


def _string_arg(name: str, args: Sequence[str], index: int) -> str:
    if len(args) <= index:
        raise FilterArgumentError(name, f"expected at least {index + 1} argument(s), got {len(args)}")
    return unquote(args[index])


def _int_arg(name: str, args: Sequence[str], index: int) -> int:
    if len(args) <= index:
        raise FilterArgumentError(name, f"expected at least {index + 1} argument(s), got {len(args)}")
    raw = unquote(args[index]).strip()
    try:
        return int(raw)
    except ValueError:
        raise FilterArgumentError(name, f"argument {index + 1} must be an integer, got {args[index]!r}") from None


def _filter_upcase(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    return value.upper()


def _filter_downcase(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    return value.lower()


def _filter_capitalize(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    """Upper-case the first character only (unlike ``str.capitalize``)."""
    if kind is not Kind.STRING or not value:
        return value
    return value[0].upper() + value[1:]


def _filter_trim(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    return value.strip()


def _filter_strip(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    return _TAG_SPAN_RE.sub("", value)


def _filter_append(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    return value + _string_arg("append", args, 0)


def _filter_prepend(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    return _string_arg("prepend", args, 0) + value


def _filter_remove(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    target = _string_arg("remove", args, 0)
    if not target:
        return value
    return value.replace(target, "")


def _filter_replace(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.STRING:
        return value
    old = _string_arg("replace", args, 0)
    new = _string_arg("replace", args, 1)
    if not old:
        return value
    return value.replace(old, new)


def _filter_split(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    """Split on a delimiter, trimming each piece.

    Example:
        >>> _filter_split("John, Paul,George", Kind.STRING, ['","'])
        ['John', 'Paul', 'George']
    """
    if kind is not Kind.STRING:
        return value
    delimiter = _string_arg("split", args, 0)
    if not delimiter:
        # Empty delimiter splits into characters
        return list(value)
    return [piece.strip() for piece in value.split(delimiter)]


def _filter_join(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is not Kind.SEQUENCE:
        return value
    delimiter = unquote(args[0]) if args else ""
    return delimiter.join(format_value(item) for item in value)


def _filter_truncate(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    """Cut to ``n`` characters and append an ellipsis when anything was cut.

    Lengths count code points, so multi-byte characters are never split.
    """
    if kind is not Kind.STRING:
        return value
    length = _int_arg("truncate", args, 0)
    if length < 0:
        raise FilterArgumentError("truncate", f"length must not be negative, got {length}")
    if len(value) <= length:
        return value
    ellipsis = unquote(args[1]) if len(args) > 1 else "..."
    return value[:length] + ellipsis


def _filter_slice(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    """Half-open ``[start, end)`` range with clamped bounds.

    Bounds outside the value are clamped; ``end < start`` swaps them, so
    ``slice: 5, 2`` is the same as ``slice: 2, 5``.
    """
    if kind not in (Kind.STRING, Kind.SEQUENCE):
        return value
    size = len(value)
    start = _int_arg("slice", args, 0)
    end = _int_arg("slice", args, 1) if len(args) > 1 else size
    start = min(max(start, 0), size)
    end = min(max(end, 0), size)
    if end < start:
        start, end = end, start
    result = value[start:end]
    if isinstance(result, tuple):
        return list(result)
    return result


def _filter_default(value: Any, kind: Kind, args: Sequence[str]) -> Any:
    if kind is Kind.NULL or (kind in (Kind.STRING, Kind.SEQUENCE) and len(value) == 0):
        return _string_arg("default", args, 0)
    return value


DEFAULT_FILTERS: dict[str, FilterFunc] = {
    "append": _filter_append,
    "capitalize": _filter_capitalize,
    "default": _filter_default,
    "downcase": _filter_downcase,
    "join": _filter_join,
    "prepend": _filter_prepend,
    "remove": _filter_remove,
    "replace": _filter_replace,
    "slice": _filter_slice,
    "split": _filter_split,
    "strip": _filter_strip,
    "trim": _filter_trim,
    "truncate": _filter_truncate,
    "upcase": _filter_upcase,
}
