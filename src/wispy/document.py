"""Host-side document assembly from a finished render.

A render leaves two deferred collections on its context:

    ctx.document_tags   <link>/<style>/<script> records from ``asset``
    ctx.meta_tags       <meta> records from ``meta``

`build_document()` turns the rendered body plus those collections into a
complete page:

    <!DOCTYPE html>
    <html lang="en">
    <head>
    <title>...</title>
    <meta ...>              page meta, then template meta, then defaults
    <link ...>/<style>      head tags, ascending priority
    </head>
    <body>
    ...body...
    <script ...>            pre-footer tags, ascending priority
    </body>
    </html>

Inline tag contents are emitted verbatim (they are author-controlled
files); attribute values and meta content are escaped.

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from wispy.utils.html import html_escape

if TYPE_CHECKING:
    from wispy.render_context import RenderContext

HEAD = "head"
PRE_FOOTER = "pre-footer"
LOCATIONS = (HEAD, PRE_FOOTER)

DEFAULT_TITLE = "Untitled Document"


def _format_attributes(attributes: dict[str, str | None]) -> str:
    parts = []
    for name, value in attributes.items():
        if value is None:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{html_escape(value)}"')
    return "".join(parts)


@dataclass(slots=True)
class DocumentTag:
    """A deferred element for the document head or footer.

    Attributes:
        kind: What the tag carries: ``link``, ``style`` or ``script``
        name: Element name written to the document
        location: ``head`` or ``pre-footer``
        contents: Inner text for non-void elements (inline assets)
        priority: Sort key within a location; lower is emitted first
        attributes: Attribute name → value; None writes a bare boolean attribute
        self_closing: True for void elements (no contents, no end tag)
    """

    kind: str
    name: str
    location: str = HEAD
    contents: str = ""
    priority: int = 50
    attributes: dict[str, str | None] = field(default_factory=dict)
    self_closing: bool = False

    def to_html(self) -> str:
        """Serialize as one element.

        Example:
            >>> DocumentTag("link", "link", attributes={"rel": "stylesheet", "href": "/a.css"},
            ...             self_closing=True).to_html()
            '<link rel="stylesheet" href="/a.css">'
        """
        start = f"<{self.name}{_format_attributes(self.attributes)}>"
        if self.self_closing:
            return start
        return f"{start}{self.contents}</{self.name}>"


@dataclass(slots=True)
class MetaTag:
    """A ``<meta>`` descriptor."""

    name: str = ""
    content: str = ""
    property: str = ""
    http_equiv: str = ""
    charset: str = ""
    attributes: dict[str, str] = field(default_factory=dict)

    def to_html(self) -> str:
        if self.charset or self.name == "charset":
            return f'<meta charset="{html_escape(self.charset or self.content)}">'
        attributes: dict[str, str | None] = {}
        if self.name:
            attributes["name"] = self.name
        if self.property:
            attributes["property"] = self.property
        if self.http_equiv:
            attributes["http-equiv"] = self.http_equiv
        attributes["content"] = self.content
        attributes.update(self.attributes)
        return f"<meta{_format_attributes(attributes)}>"


def sorted_document_tags(tags: Iterable[DocumentTag], location: str | None = None) -> list[DocumentTag]:
    """Tags for one location (or all), ordered by priority.

    The sort is stable, so equal priorities keep registration order.
    """
    selected = [tag for tag in tags if location is None or tag.location == location]
    return sorted(selected, key=lambda tag: tag.priority)


def construct_meta_tags(
    page_meta: Iterable[MetaTag] = (),
    ctx_meta: Iterable[MetaTag] = (),
) -> list[MetaTag]:
    """Merge page and template meta, adding viewport, charset and title when absent."""
    tags = [*page_meta, *ctx_meta]
    present = {tag.name for tag in tags}
    if any(tag.charset for tag in tags):
        present.add("charset")
    if "viewport" not in present:
        tags.append(MetaTag(name="viewport", content="width=device-width, initial-scale=1"))
    if "charset" not in present:
        tags.append(MetaTag(charset="UTF-8"))
    if "title" not in present:
        tags.append(MetaTag(name="title", content=DEFAULT_TITLE))
    return tags


def build_document(
    body: str,
    ctx: RenderContext,
    title: str = "",
    lang: str = "en",
    page_meta: Iterable[MetaTag] = (),
) -> str:
    """Assemble the final HTML page around a rendered body."""
    meta = construct_meta_tags(page_meta, ctx.meta_tags)
    if not title:
        title = next((tag.content for tag in meta if tag.name == "title"), DEFAULT_TITLE)

    lines = ["<!DOCTYPE html>", f'<html lang="{html_escape(lang or "en")}">', "<head>"]
    lines.append(f"<title>{html_escape(title)}</title>")
    lines.extend(tag.to_html() for tag in meta)
    lines.extend(tag.to_html() for tag in sorted_document_tags(ctx.document_tags, HEAD))
    lines.append("</head>")
    lines.append("<body>")
    lines.append(body)
    lines.extend(tag.to_html() for tag in sorted_document_tags(ctx.document_tags, PRE_FOOTER))
    lines.append("</body>")
    lines.append("</html>")
    return "\n".join(lines)
