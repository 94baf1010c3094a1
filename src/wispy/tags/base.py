"""Shared plumbing for tag renderers.

Every tag has the same shape:

    tag(ctx, out, args, source, pos) -> (new_pos, diagnostics)

    ctx     the RenderContext (``ctx.engine`` is the driving Environment)
    out     the shared output buffer (list of str, joined once at the end)
    args    argument tokens after the tag name, quotes preserved
    source  the full source currently being rendered
    pos     offset immediately after the tag's closing ``%}``

and returns the offset the driver resumes at. Body tags find their own
terminator with `seek_end`, which counts nesting depth and treats
``verbatim`` bodies as opaque.

"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from functools import lru_cache
from typing import TYPE_CHECKING

from wispy._types import Token, TokenType
from wispy.environment.exceptions import Diagnostic, ErrorCode
from wispy.lexer import Delimiters, Lexer, split_fields

if TYPE_CHECKING:
    from wispy.render_context import RenderContext

TagResult = tuple[int, list[Diagnostic]]
TagFunc = Callable[["RenderContext", list[str], list[str], str, int], TagResult]


@lru_cache(maxsize=16)
def _verbatim_end_re(delimiters: Delimiters) -> re.Pattern[str]:
    return re.compile(
        re.escape(delimiters.block_start) + r"\s*endverbatim\s*" + re.escape(delimiters.block_end)
    )


def find_verbatim_end(source: str, pos: int, lexer: Lexer) -> tuple[int, int] | None:
    """Locate the first ``endverbatim`` tag at or after pos.

    Nothing inside a verbatim body is scanned, so comments and variables
    there cannot hide the terminator.
    """
    match = _verbatim_end_re(lexer.delimiters).search(source, pos)
    if match is None:
        return None
    return match.start(), match.end()


def iter_block_tags(
    source: str,
    pos: int,
    lexer: Lexer,
    stop: int | None = None,
) -> Iterator[tuple[Token, list[str]]]:
    """Yield closed, non-empty block tags from pos, stepping over verbatim bodies.

    Variables and comments are skipped whole; an unclosed opener is stepped
    over. Scanning ends at ``stop`` or when a verbatim body never ends.
    """
    cursor = pos
    while True:
        token = lexer.next_token(source, cursor)
        if token is None or (stop is not None and token.start >= stop):
            return
        if not token.closed:
            cursor = token.inner_start
            continue
        cursor = token.end
        if token.type is not TokenType.BLOCK:
            continue
        fields = split_fields(source[token.inner_start : token.inner_end])
        if not fields:
            continue
        if fields[0] == "verbatim":
            skipped = find_verbatim_end(source, cursor, lexer)
            if skipped is None:
                return
            cursor = skipped[1]
            continue
        yield token, fields


def seek_end(source: str, pos: int, name: str, lexer: Lexer) -> tuple[int, int] | None:
    """Find the ``end<name>`` tag matching an opener that ended at pos.

    Returns ``(body_end, after)``: the offset where the terminator starts
    (so the body is ``source[pos:body_end]``) and the offset just past it.
    None means the source ended first.

    Example:
        >>> src = "{% if a %}{% if b %}x{% endif %}y{% endif %}z"
        >>> seek_end(src, 10, "if", Lexer())
        (33, 44)
    """
    if name == "verbatim":
        return find_verbatim_end(source, pos, lexer)
    end_name = "end" + name
    depth = 1
    for token, fields in iter_block_tags(source, pos, lexer):
        head = fields[0]
        if head == name:
            depth += 1
        elif head == end_name:
            depth -= 1
            if depth == 0:
                return token.start, token.end
    return None


def find_else(source: str, start: int, stop: int, lexer: Lexer) -> tuple[int, int] | None:
    """Locate the top-level ``else`` of an ``if`` body spanning [start, stop).

    ``else`` tags belonging to nested ``if`` blocks are ignored.
    """
    depth = 0
    for token, fields in iter_block_tags(source, start, lexer, stop):
        head = fields[0]
        if head == "if":
            depth += 1
        elif head == "endif":
            depth -= 1
        elif head == "else" and depth == 0:
            return token.start, token.end
    return None


def unterminated(name: str, position: int) -> Diagnostic:
    return Diagnostic(
        ErrorCode.UNTERMINATED,
        f"'{name}' has no matching 'end{name}' before the end of the template",
        position,
        tag=name,
    )


def invalid_arguments(name: str, usage: str, position: int) -> Diagnostic:
    return Diagnostic(ErrorCode.INVALID_TAG_ARGUMENTS, f"'{name}' expects: {usage}", position, tag=name)


def render_nested(ctx: RenderContext, fragment: str, out: list[str], position: int) -> list[Diagnostic]:
    """Render a block/template fragment one level deeper, enforcing the depth limit."""
    engine = ctx.engine
    if ctx.depth >= engine.max_render_depth:
        return [
            Diagnostic(
                ErrorCode.RENDER_DEPTH_EXCEEDED,
                f"nested render depth exceeded {engine.max_render_depth}",
                position,
            )
        ]
    ctx.depth += 1
    try:
        return engine.render_fragment(fragment, ctx, out)
    finally:
        ctx.depth -= 1
