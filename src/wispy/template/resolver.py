"""Expression resolution: literals, dot notation and filter chains.

Grammar:
    expr   := source ( "|" filter )*
    filter := name ( ":" arg ( "," arg )* )?
    source := literal | dotted-name

A source wrapped in matching quotes is a string literal (quotes stripped,
not sanitized: it is author-controlled). Anything else is a dotted name
looked up in the context data. Splitting on ``|`` and ``,`` ignores
separators inside quotes; filter arguments keep their quotes and each
filter decides how to read them.

Resolution Rules:
    - Each dot descends into a Mapping; hitting anything else yields None
    - Missing keys yield None; unresolved names are never diagnostics
    - A string reached through dot notation is sanitized before it is returned
    - Filters apply left to right, to None as well (so ``default`` works)

Every call returns ``(value, kind, diagnostics)``.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from wispy._types import Kind, kind_of
from wispy.environment.exceptions import Diagnostic, ErrorCode, FilterArgumentError
from wispy.lexer import is_quoted, split_outside_quotes

if TYPE_CHECKING:
    from wispy.utils.html import Sanitizer

# Errors a misbehaving custom filter may raise; reported, not propagated
_FILTER_FAULTS = (FilterArgumentError, TypeError, ValueError, AttributeError, IndexError, KeyError)


@dataclass(frozen=True, slots=True)
class FilterCall:
    """One parsed pipeline stage: filter name plus raw (still quoted) args."""

    name: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Pipeline:
    """A parsed expression: the source token and its filter stages."""

    source: str
    filters: tuple[FilterCall, ...] = ()


def parse_filter(text: str) -> FilterCall:
    """Parse ``name: arg1, arg2`` into a FilterCall.

    Example:
        >>> parse_filter('replace: "world", "universe"')
        FilterCall(name='replace', args=('"world"', '"universe"'))
    """
    head = split_outside_quotes(text, ":")
    name = head[0].strip()
    if len(head) == 1:
        return FilterCall(name)
    # Only the first unquoted colon separates the name; later ones belong to args
    rest = text[len(head[0]) + 1 :]
    args = tuple(arg.strip() for arg in split_outside_quotes(rest, ","))
    if args == ("",):
        args = ()
    return FilterCall(name, args)


@lru_cache(maxsize=1024)
def parse_pipeline(expression: str) -> Pipeline:
    """Split an expression into its source and filter stages (memoized)."""
    stages = split_outside_quotes(expression.strip(), "|")
    source = stages[0].strip()
    filters = tuple(parse_filter(stage.strip()) for stage in stages[1:])
    return Pipeline(source, filters)


def resolve_path(data: Mapping[str, Any] | None, name: str) -> Any:
    """Walk a dotted name through nested mappings; None on any dead end."""
    if not name or data is None:
        return None
    current: Any = data
    for part in name.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def resolve_source(source: str, data: Mapping[str, Any] | None, sanitizer: Sanitizer) -> Any:
    """Resolve a literal or a dotted name, sanitizing strings from data."""
    if not source:
        return None
    if is_quoted(source):
        return source[1:-1]
    value = resolve_path(data, source)
    if isinstance(value, str):
        return sanitizer.sanitize(value)
    return value


def apply_filters(
    value: Any,
    filters: tuple[FilterCall, ...],
    registry: Mapping[str, Any],
    position: int | None = None,
) -> tuple[Any, list[Diagnostic]]:
    """Run the filter stages over value, collecting diagnostics."""
    diagnostics: list[Diagnostic] = []
    for call in filters:
        func = registry.get(call.name)
        if func is None:
            diagnostics.append(
                Diagnostic(ErrorCode.UNKNOWN_FILTER, f"unknown filter '{call.name}'", position)
            )
            continue
        try:
            value = func(value, kind_of(value), call.args)
        except _FILTER_FAULTS as exc:
            diagnostics.append(
                Diagnostic(
                    ErrorCode.FILTER_TYPE_MISMATCH,
                    f"filter '{call.name}' rejected {kind_of(value).value} input: {exc}",
                    position,
                )
            )
    return value, diagnostics


def resolve_expression(
    expression: str,
    data: Mapping[str, Any] | None,
    filters: Mapping[str, Any],
    sanitizer: Sanitizer,
    position: int | None = None,
) -> tuple[Any, Kind, list[Diagnostic]]:
    """Evaluate ``source | filter ...`` against data.

    Example:
        >>> resolve_expression('name | upcase', {"name": "ada"}, DEFAULT_FILTERS, UGC_SANITIZER)
        ('ADA', <Kind.STRING: 'string'>, [])
    """
    pipeline = parse_pipeline(expression)
    value = resolve_source(pipeline.source, data, sanitizer)
    if pipeline.filters:
        value, diagnostics = apply_filters(value, pipeline.filters, filters, position)
    else:
        diagnostics = []
    return value, kind_of(value), diagnostics
