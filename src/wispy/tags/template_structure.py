"""Template structure tags: ``define``, ``block``, ``render`` and ``include``.

``define`` stores a raw fragment under a name; ``block`` renders the stored
fragment or its own default body; ``render`` and ``include`` pull in a
defined block or another template file.

    {% define "sidebar" %}<aside>{{ links }}</aside>{% enddefine %}
    {% block "sidebar" %}<aside>default</aside>{% endblock %}
    {% render "sidebar" %}
    {% render "@app/nav" %}            loads app/nav.html
    {% include "partials/footer.html" %}

Template names starting with ``@app/`` or ``@marketing/`` are rewritten to
``app/<rest>.html`` / ``marketing/<rest>.html`` and loaded through the
environment's loader with the request host as hint. Loaded sources are
cached on the context for the rest of the render.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wispy.environment.exceptions import Diagnostic, ErrorCode, TemplateError
from wispy.lexer import unquote
from wispy.tags.base import TagResult, invalid_arguments, render_nested, seek_end, unterminated

if TYPE_CHECKING:
    from wispy.render_context import RenderContext

_PATH_PREFIXES = {"@app/": "app/", "@marketing/": "marketing/"}


def template_path(name: str) -> str | None:
    """Rewrite ``@app/x`` / ``@marketing/x`` to a loader path, else None.

    Example:
        >>> template_path("@app/dashboard"), template_path("@marketing/hero.html")
        ('app/dashboard.html', 'marketing/hero.html')
        >>> template_path("sidebar") is None
        True
    """
    for prefix, directory in _PATH_PREFIXES.items():
        if name.startswith(prefix):
            rest = name[len(prefix) :]
            if not rest:
                return None
            if not rest.endswith(".html"):
                rest += ".html"
            return directory + rest
    return None


def _render_template(ctx: RenderContext, out: list[str], path: str, pos: int) -> list[Diagnostic]:
    try:
        fragment = ctx.engine.load_template(path, ctx)
    except (TemplateError, OSError, ValueError) as exc:
        return [Diagnostic(ErrorCode.TEMPLATE_NOT_FOUND, str(exc), pos)]
    return render_nested(ctx, fragment, out, pos)


def define_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Store the raw body under a name; a later ``define`` of the same name wins."""
    found = seek_end(source, pos, "define", ctx.engine.lexer)
    if found is None:
        return pos, [unterminated("define", pos)]
    body_end, after = found
    name = unquote(args[0]) if args else ""
    if not name:
        return after, [invalid_arguments("define", 'define "<name>"', pos)]
    ctx.blocks[name] = source[pos:body_end]
    return after, []


def block_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Render the defined block, falling back to the default body.

    Without an ``endblock`` the tag acts self-closing: the defined block (if
    any) is still rendered after the unterminated diagnostic.
    """
    name = unquote(args[0]) if args else ""
    found = seek_end(source, pos, "block", ctx.engine.lexer)
    if found is None:
        diagnostics = [unterminated("block", pos)]
        if name in ctx.blocks:
            diagnostics.extend(render_nested(ctx, ctx.blocks[name], out, pos))
        return pos, diagnostics
    body_end, after = found
    if not name:
        return after, [invalid_arguments("block", 'block "<name>" ... endblock', pos)]
    fragment = ctx.blocks.get(name, source[pos:body_end])
    if not fragment:
        return after, []
    return after, render_nested(ctx, fragment, out, pos)


def render_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Render a defined block by name, or a template for ``@app/`` / ``@marketing/`` names."""
    name = unquote(args[0]) if args else ""
    if not name:
        return pos, [invalid_arguments("render", 'render "<block name>" | "@app/<template>"', pos)]
    path = template_path(name)
    if path is not None:
        return pos, _render_template(ctx, out, path, pos)
    if name not in ctx.blocks:
        return pos, [Diagnostic(ErrorCode.UNDEFINED_BLOCK, f"no block named '{name}' has been defined", pos)]
    return pos, render_nested(ctx, ctx.blocks[name], out, pos)


def include_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Render another template by path with the current context."""
    name = unquote(args[0]) if args else ""
    if not name:
        return pos, [invalid_arguments("include", 'include "<path>"', pos)]
    return pos, _render_template(ctx, out, template_path(name) or name, pos)
