"""Control flow tags: ``if`` and ``for``.

    {% if user.active %}...{% else %}...{% endif %}
    {% if not items %}nothing yet{% endif %}
    {% for post in posts %}{{ loop.index }}. {{ post.title }}{% endfor %}

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from wispy._types import Kind
from wispy.environment.exceptions import Diagnostic, ErrorCode
from wispy.tags.base import TagResult, find_else, invalid_arguments, seek_end, unterminated
from wispy.template.helpers import is_truthy
from wispy.template.loop_context import LoopContext

if TYPE_CHECKING:
    from wispy.render_context import RenderContext


def if_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Render the body when the condition is truthy, else the ``else`` branch.

    Unresolved names are falsy and never reported.
    """
    env = ctx.engine
    found = seek_end(source, pos, "if", env.lexer)
    if found is None:
        return pos, [unterminated("if", pos)]
    body_end, after = found

    negate = bool(args) and args[0] == "not"
    condition = args[1:] if negate else args
    if not condition:
        return after, [invalid_arguments("if", "if [not] <expression>", pos)]

    value, _, diagnostics = env.resolve(" ".join(condition), ctx, pos)
    branch = find_else(source, pos, body_end, env.lexer)
    if is_truthy(value) != negate:
        body = source[pos : branch[0] if branch else body_end]
    else:
        body = source[branch[1] : body_end] if branch else ""
    if body:
        diagnostics.extend(env.render_fragment(body, ctx, out))
    return after, diagnostics


def _iteration_items(value: Any, kind: Kind) -> list[Any] | None:
    if kind is Kind.SEQUENCE:
        return list(value)
    if kind is Kind.MAPPING:
        return list(value.values())
    if kind is Kind.STRING:
        return list(value)
    return None


def for_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Render the body once per element, each in a cloned context.

    Sequences iterate in order, mappings over their values, strings over
    characters. None renders nothing; other kinds report ``not-iterable``.
    The body also sees ``loop`` (see `LoopContext`).
    """
    env = ctx.engine
    found = seek_end(source, pos, "for", env.lexer)
    if found is None:
        return pos, [unterminated("for", pos)]
    body_end, after = found

    if len(args) < 3 or args[1] != "in" or not args[0]:
        return after, [invalid_arguments("for", "for <name> in <expression>", pos)]
    target = args[0]

    value, kind, diagnostics = env.resolve(" ".join(args[2:]), ctx, pos)
    if kind is Kind.NULL:
        return after, diagnostics
    items = _iteration_items(value, kind)
    if items is None:
        diagnostics.append(
            Diagnostic(ErrorCode.NOT_ITERABLE, f"cannot iterate over {kind.value} in 'for {target}'", pos)
        )
        return after, diagnostics

    body = source[pos:body_end]
    for index, item in enumerate(items):
        inner = env.clone(ctx, {target: item, "loop": LoopContext(items, index)})
        diagnostics.extend(env.render_fragment(body, inner, out))
    return after, diagnostics
