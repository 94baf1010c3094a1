"""Wispy RenderContext: per-render state shared across nested renders.

A RenderContext is created for each top-level `Environment.render()` call
and handed to every tag, every nested fragment and every loop iteration
during that call.

Sharing Model:
`child_context(overlay)` (what ``Environment.clone`` and the ``for`` tag
use) returns a *new* context whose ``data`` is a shallow copy of the
parent's merged with the overlay. Everything else is shared by reference:

    data              copied + overlay   (loop variables stay local)
    blocks            shared             (a define inside a loop is visible after it)
    template_cache    shared
    imported_assets   shared             (dedup spans the whole render)
    document_tags     shared
    meta_tags         shared
    errors            shared

A context never points at another context, so there is no parent chain to
walk and no lookup cost for deep nesting.

Thread Safety:
A RenderContext belongs to exactly one render. The shared collections are
mutated during recursion and must not be handed to a parallel render;
create a fresh context per render instead.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wispy.document import DocumentTag, MetaTag
    from wispy.environment.core import Environment
    from wispy.environment.exceptions import Diagnostic


@dataclass(frozen=True, slots=True)
class RequestHint:
    """Request-scoped facts a host exposes to tags.

    Attributes:
        host: Host name of the tenant being served (selects templates/assets)
        values: Any other request-scoped values (locale, user id, CSRF token)
    """

    host: str = ""
    values: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)


@dataclass
class RenderContext:
    """Per-render state: user data plus the side-effect collections.

    Attributes:
        data: Primary variable namespace, read with dot notation
        engine: Environment driving this render (tags recurse through it)
        blocks: name → raw template fragment, written by ``define``
        template_cache: template name → raw source, filled by ``render``/``include``
        imported_assets: ``"<path>|<kind>"`` keys guarding asset dedup
        document_tags: Deferred head/footer tags for the host document
        meta_tags: Deferred meta descriptors for the host document
        errors: Diagnostics accumulated by the render (append-only)
        request: Optional request descriptor (host name and values)
        depth: Current nesting of render/include/block (recursion guard)
    """

    data: dict[str, Any] = field(default_factory=dict)
    engine: Environment | None = None
    blocks: dict[str, str] = field(default_factory=dict)
    template_cache: dict[str, str] = field(default_factory=dict)
    imported_assets: set[str] = field(default_factory=set)
    document_tags: list[DocumentTag] = field(default_factory=list)
    meta_tags: list[MetaTag] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)
    request: RequestHint | None = None
    depth: int = 0

    @property
    def host_hint(self) -> str:
        """Host name for loaders, or empty string without a request."""
        return self.request.host if self.request is not None else ""

    def child_context(self, overlay: Mapping[str, Any] | None = None) -> RenderContext:
        """Create an inner-scope context.

        ``data`` is copied and merged with ``overlay``; all side-effect
        collections are the parent's own objects, so writes propagate.

        Example:
            >>> ctx = RenderContext(data={"x": 1})
            >>> inner = ctx.child_context({"x": 2})
            >>> inner.data["x"], ctx.data["x"]
            (2, 1)
            >>> inner.blocks is ctx.blocks
            True
        """
        data = dict(self.data)
        if overlay:
            data.update(overlay)
        return RenderContext(
            data=data,
            engine=self.engine,
            blocks=self.blocks,
            template_cache=self.template_cache,
            imported_assets=self.imported_assets,
            document_tags=self.document_tags,
            meta_tags=self.meta_tags,
            errors=self.errors,
            request=self.request,
            depth=self.depth,
        )
