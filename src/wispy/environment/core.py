"""Core Environment class for Wispy template rendering.

The Environment is the engine driver: it owns the tag and filter
registries, the scanner, the sanitizer and the loader, and exposes:

    render(source, ctx)          → (output, diagnostics)
    clone(ctx, overlay)          → inner-scope RenderContext
    new_context(data, request=)  → fresh RenderContext bound to this engine

Render Loop:
The driver walks the source with a cursor, asking the lexer for the next
sentinel each time:

    text           copied to the output
    {{ expr }}     resolved, sanitized, formatted, appended
    {# ... #}      skipped
    {% tag ... %}  dispatched to the tag, which returns the new cursor

Malformed constructs become diagnostics and the cursor always moves
forward, so rendering is linear in the size of the source and never raises
for template faults.

Thread-Safety:
An Environment is shareable between threads once configured. Registries
are copy-on-write and each render reads them once; all mutable state lives
on the RenderContext, which belongs to a single render.

"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from wispy._types import Kind, TokenType
from wispy.environment.exceptions import Diagnostic, ErrorCode, TemplateNotFoundError
from wispy.environment.filters import DEFAULT_FILTERS
from wispy.environment.loaders import Loader, SiteLoader
from wispy.environment.registry import Registry
from wispy.lexer import Delimiters, Lexer, split_fields
from wispy.render_context import RenderContext, RequestHint
from wispy.tags import DEFAULT_TAGS
from wispy.template.helpers import format_value
from wispy.template.resolver import resolve_expression
from wispy.utils.html import UGC_SANITIZER, Sanitizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_RENDER_DEPTH = 50

_UNCLOSED = {
    TokenType.VARIABLE: ErrorCode.UNCLOSED_VARIABLE,
    TokenType.BLOCK: ErrorCode.UNCLOSED_TAG,
    TokenType.COMMENT: ErrorCode.UNCLOSED_COMMENT,
}


class Environment:
    """Central configuration and driver for template rendering.

    Args:
        tags: Tag name → renderer; None uses the built-in tags
        filters: Filter name → function; None uses the built-in filters
        loader: Template source for ``render``/``include`` paths
        delimiters: Sentinels recognized by the scanner
        sanitizer: HTML policy applied to every string value
        sites_root: Directory holding one folder per tenant host. Used for
            inline assets and, when no loader is given, as a `SiteLoader`
        site_root: ``ctx -> Path | None`` yielding the tenant root for inline
            assets; overrides the ``sites_root`` lookup
        max_render_depth: Nested ``render``/``include``/``block`` limit

    Example:
        >>> env = Environment()
        >>> env.render("Hello {{ name }}!", env.new_context({"name": "Alice"}))
        ('Hello Alice!', [])

    Custom Filters and Tags:
        >>> env.filters["shout"] = lambda value, kind, args: f"{value}!"
        >>> env.render("{{ 'hi' | shout }}")[0]
        'hi!'
    """

    def __init__(
        self,
        tags: Mapping[str, Callable[..., Any]] | None = None,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        *,
        loader: Loader | None = None,
        delimiters: Delimiters | None = None,
        sanitizer: Sanitizer | None = None,
        sites_root: str | Path | None = None,
        site_root: Callable[[RenderContext], Path | None] | None = None,
        max_render_depth: int = DEFAULT_MAX_RENDER_DEPTH,
    ):
        if max_render_depth < 1:
            raise ValueError(f"max_render_depth must be at least 1, got {max_render_depth}")
        self._tags: dict[str, Callable[..., Any]] = dict(DEFAULT_TAGS if tags is None else tags)
        self._filters: dict[str, Callable[..., Any]] = dict(DEFAULT_FILTERS if filters is None else filters)
        self.lexer = Lexer(delimiters)
        self.sanitizer = sanitizer or UGC_SANITIZER
        self.sites_root = Path(sites_root) if sites_root is not None else None
        self._sites = SiteLoader(self.sites_root) if self.sites_root is not None else None
        self.loader = loader if loader is not None else self._sites
        self.site_root = site_root
        self.max_render_depth = max_render_depth

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> Environment:
        """Build an Environment from ``WISPY_*`` variables.

        Reads ``WISPY_TEMPLATE_DELIMITER_OPEN`` / ``WISPY_TEMPLATE_DELIMITER_CLOSE``
        (single open/close characters, see `Delimiters.from_pair`),
        ``WISPY_SITES_ROOT`` and ``WISPY_MAX_RENDER_DEPTH``. Keyword overrides win.

        Raises:
            ValueError: If ``WISPY_MAX_RENDER_DEPTH`` is not an integer.
        """
        environ = os.environ if environ is None else environ
        config: dict[str, Any] = {}
        open_char = environ.get("WISPY_TEMPLATE_DELIMITER_OPEN", "")
        close_char = environ.get("WISPY_TEMPLATE_DELIMITER_CLOSE", "")
        if open_char or close_char:
            config["delimiters"] = Delimiters.from_pair(open_char or "{", close_char or "}")
        if environ.get("WISPY_SITES_ROOT"):
            config["sites_root"] = environ["WISPY_SITES_ROOT"]
        depth = environ.get("WISPY_MAX_RENDER_DEPTH", "").strip()
        if depth:
            try:
                config["max_render_depth"] = int(depth)
            except ValueError:
                raise ValueError(f"WISPY_MAX_RENDER_DEPTH must be an integer, got {depth!r}") from None
        config.update(overrides)
        return cls(**config)

    @property
    def filters(self) -> Registry:
        """Filter registry; supports ``env.filters["name"] = func``."""
        return Registry(self, "_filters", "filter")

    @property
    def tags(self) -> Registry:
        """Tag registry; supports ``env.tags["name"] = func``."""
        return Registry(self, "_tags", "tag")

    # ─────────────────────────────────────────────────────────────────────────
    # Contexts
    # ─────────────────────────────────────────────────────────────────────────

    def new_context(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        request: RequestHint | None = None,
    ) -> RenderContext:
        """Create a context with empty side-effect collections, bound to this engine."""
        return RenderContext(data=dict(data or {}), engine=self, request=request)

    def clone(self, ctx: RenderContext, overlay: Mapping[str, Any] | None = None) -> RenderContext:
        """Inner-scope context: copied data plus overlay, shared side effects."""
        return ctx.child_context(overlay)

    # ─────────────────────────────────────────────────────────────────────────
    # Services for tags
    # ─────────────────────────────────────────────────────────────────────────

    def resolve(
        self, expression: str, ctx: RenderContext, position: int | None = None
    ) -> tuple[Any, Kind, list[Diagnostic]]:
        """Evaluate ``source | filter ...`` against the context's data."""
        return resolve_expression(expression, ctx.data, self._filters, self.sanitizer, position)

    def load_template(self, name: str, ctx: RenderContext) -> str:
        """Template source by loader path, cached on the context for the render.

        Raises:
            TemplateNotFoundError: If no loader is configured or it has no such template.
        """
        cached = ctx.template_cache.get(name)
        if cached is not None:
            return cached
        if self.loader is None:
            raise TemplateNotFoundError(f"Template '{name}' not found: no loader configured")
        source = self.loader.load(name, ctx.host_hint)
        ctx.template_cache[name] = source
        return source

    def site_root_for(self, ctx: RenderContext) -> Path | None:
        """Tenant directory that inline assets are read from, if known."""
        if self.site_root is not None:
            return self.site_root(ctx)
        if self._sites is None or not ctx.host_hint:
            return None
        return self._sites.tenant_root(ctx.host_hint)

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render(self, source: str, ctx: RenderContext | None = None) -> tuple[str, list[Diagnostic]]:
        """Render template source.

        Diagnostics are returned and also appended to ``ctx.errors``.

        Example:
            >>> env.render("{% for x in xs %}[{{ x }}]{% endfor %}", env.new_context({"xs": ["a", "b"]}))
            ('[a][b]', [])
        """
        if ctx is None:
            ctx = self.new_context()
        elif ctx.engine is None:
            ctx.engine = self
        out: list[str] = []
        diagnostics = self.render_fragment(source, ctx, out)
        for diagnostic in diagnostics:
            logger.debug("template %s at offset %s: %s", diagnostic.kind, diagnostic.position, diagnostic.message)
        ctx.errors.extend(diagnostics)
        return "".join(out), diagnostics

    def render_fragment(self, source: str, ctx: RenderContext, out: list[str]) -> list[Diagnostic]:
        """Render source into a shared buffer and return its diagnostics.

        Used by tags for bodies, blocks and loaded templates. Diagnostics are
        not recorded on the context here; the top-level `render` does that
        once for the whole tree.
        """
        diagnostics: list[Diagnostic] = []
        lexer = self.lexer
        tags = self._tags
        pos = 0
        end = len(source)

        while pos < end:
            token = lexer.next_token(source, pos)
            if token is None:
                out.append(source[pos:])
                break
            if token.start > pos:
                out.append(source[pos : token.start])

            if not token.closed:
                diagnostics.append(
                    Diagnostic(_UNCLOSED[token.type], f"unclosed {token.type.value} opener", token.start)
                )
                pos = token.inner_start
                continue

            if token.type is TokenType.COMMENT:
                pos = token.end
                continue

            inner = source[token.inner_start : token.inner_end]
            if token.type is TokenType.VARIABLE:
                diagnostics.extend(self._write_value(inner, ctx, out, token.start))
                pos = token.end
                continue

            fields = split_fields(inner)
            if not fields:
                diagnostics.append(Diagnostic(ErrorCode.UNKNOWN_TAG, "empty tag", token.start))
                pos = token.end
                continue
            tag = tags.get(fields[0])
            if tag is None:
                diagnostics.append(Diagnostic(ErrorCode.UNKNOWN_TAG, f"unknown tag '{fields[0]}'", token.start))
                pos = token.end
                continue
            new_pos, found = tag(ctx, out, fields[1:], source, token.end)
            diagnostics.extend(found)
            pos = max(new_pos, token.end)

        return diagnostics

    def _write_value(self, expression: str, ctx: RenderContext, out: list[str], position: int) -> list[Diagnostic]:
        value, kind, diagnostics = self.resolve(expression, ctx, position)
        if kind is Kind.NULL:
            return diagnostics
        if kind is Kind.STRING:
            out.append(self.sanitizer.sanitize(value))
        elif kind.is_scalar:
            out.append(format_value(value))
        else:
            out.append(self.sanitizer.sanitize(format_value(value)))
        return diagnostics

    def __repr__(self) -> str:
        return (
            f"<Environment tags={len(self._tags)} filters={len(self._filters)} "
            f"loader={type(self.loader).__name__ if self.loader else None}>"
        )
