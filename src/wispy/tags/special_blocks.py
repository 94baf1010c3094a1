"""Special tags: ``verbatim`` and ``meta``.

    {% verbatim %}{{ shown as-is }}{% endverbatim %}
    {% meta name="description" content=page.summary %}

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wispy.document import MetaTag
from wispy.environment.exceptions import Diagnostic
from wispy.lexer import is_quoted
from wispy.tags.base import TagResult, invalid_arguments, seek_end, unterminated
from wispy.template.helpers import format_value

if TYPE_CHECKING:
    from wispy.render_context import RenderContext

_META_FIELDS = {
    "name": "name",
    "content": "content",
    "property": "property",
    "http-equiv": "http_equiv",
    "charset": "charset",
}


def verbatim_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Copy the body to the output untouched; nothing inside is scanned."""
    found = seek_end(source, pos, "verbatim", ctx.engine.lexer)
    if found is None:
        return pos, [unterminated("verbatim", pos)]
    body_end, after = found
    out.append(source[pos:body_end])
    return after, []


def meta_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Record a ``<meta>`` descriptor on the context; writes no output.

    Arguments are ``key=value`` pairs. Quoted values are literals; anything
    else is resolved like a variable expression (``content=page.summary``).
    Keys other than name, content, property, http-equiv and charset become
    extra attributes.
    """
    usage = 'meta name="<name>" content=<expression> [key=value ...]'
    diagnostics: list[Diagnostic] = []
    values: dict[str, str] = {}
    extra: dict[str, str] = {}
    for arg in args:
        key, sep, raw = arg.partition("=")
        if not sep or not key:
            return pos, [invalid_arguments("meta", usage, pos)]
        if is_quoted(raw):
            text = raw[1:-1]
        else:
            value, _, found = ctx.engine.resolve(raw, ctx, pos)
            diagnostics.extend(found)
            text = format_value(value)
        if key in _META_FIELDS:
            values[_META_FIELDS[key]] = text
        else:
            extra[key] = text

    if not any(values.get(field) for field in ("name", "property", "http_equiv", "charset")):
        return pos, [*diagnostics, invalid_arguments("meta", usage, pos)]
    ctx.meta_tags.append(MetaTag(attributes=extra, **values))
    return pos, diagnostics
