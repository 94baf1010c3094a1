"""The ``asset`` tag: deduplicated CSS/JS registration.

    {% asset "css" "assets/main.css" %}
    {% asset "css-inline" "assets/critical.css" %}
    {% asset "js" "https://cdn.example.com/app.js" location=pre-footer defer %}
    {% asset "js-inline" "public/boot.js" location=head %}

Nothing is written to the output. Each accepted asset appends one
`DocumentTag` to ``ctx.document_tags``; the host places those when it
assembles the page (see `wispy.document`).

Path Rules:
    - ``https://`` URLs are allowed for external kinds only
    - Local paths must start with ``assets/``, ``public/``, ``/assets/`` or
      ``/public/``; the leading slash is dropped for the dedup key
    - ``..`` segments and backslashes are rejected

Dedup:
The key is ``"<path>|<kind>"`` in ``ctx.imported_assets``. The same key
twice is skipped silently; the same path under another kind is an
``asset-kind-conflict``. A key is recorded only once the asset has been
accepted, so a failed inline read can be retried later in the render.

Tag Priorities (lower is emitted first):

    kind          head   pre-footer
    css             15       -
    css-inline      20       -
    js              20      25
    js-inline       25      30

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from wispy.document import HEAD, LOCATIONS, PRE_FOOTER, DocumentTag
from wispy.environment.exceptions import Diagnostic, ErrorCode
from wispy.environment.loaders import safe_join
from wispy.lexer import unquote
from wispy.tags.base import TagResult, invalid_arguments

if TYPE_CHECKING:
    from wispy.render_context import RenderContext

logger = logging.getLogger(__name__)

ASSET_KINDS = ("css", "css-inline", "js", "js-inline")
ALLOWED_PREFIXES = ("assets/", "public/", "/assets/", "/public/")
_JS_FLAGS = ("defer", "async")

_USAGE = 'asset "<css|css-inline|js|js-inline>" "<path>" [location=head|pre-footer] [defer] [async]'


def is_remote(path: str) -> bool:
    return path.lower().startswith("https://")


def normalize_asset_path(path: str, inline: bool) -> str:
    """Validate an asset path and return its canonical form.

    Raises:
        ValueError: If the path is not an allowed remote URL or local path.

    Example:
        >>> normalize_asset_path("/assets/site.css", inline=False)
        'assets/site.css'
    """
    if is_remote(path):
        if inline:
            raise ValueError(f"remote asset '{path}' cannot be inlined")
        if not urlsplit(path).netloc:
            raise ValueError(f"remote asset '{path}' has no host")
        return path
    if not path.startswith(ALLOWED_PREFIXES):
        raise ValueError(
            f"asset path '{path}' must start with assets/, public/, /assets/ or /public/, "
            "or be an https:// URL"
        )
    if "\\" in path or "\x00" in path or ".." in path.split("/"):
        raise ValueError(f"asset path '{path}' must not contain '..' segments or backslashes")
    return path.lstrip("/")


def _conflicting_kind(imported: set[str], path: str, kind: str) -> str | None:
    for other in ASSET_KINDS:
        if other != kind and f"{path}|{other}" in imported:
            return other
    return None


def _read_inline(ctx: RenderContext, path: str, pos: int) -> tuple[str | None, Diagnostic | None]:
    root = ctx.engine.site_root_for(ctx)
    if root is None:
        return None, Diagnostic(
            ErrorCode.ASSET_READ_FAILED, f"cannot inline '{path}': no site root for this render", pos
        )
    full_path = safe_join(root, path)
    if full_path is None:
        return None, Diagnostic(ErrorCode.ASSET_PATH_INVALID, f"asset path '{path}' escapes the site root", pos)
    try:
        return full_path.read_text("utf-8"), None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("failed to read inline asset %s: %s", full_path, exc)
        return None, Diagnostic(ErrorCode.ASSET_READ_FAILED, f"failed to read asset '{path}': {exc}", pos)


def _build_tag(kind: str, path: str, location: str, flags: list[str], contents: str) -> DocumentTag:
    footer = location == PRE_FOOTER
    if kind == "css":
        return DocumentTag(
            kind="link",
            name="link",
            location=HEAD,
            priority=15,
            attributes={"rel": "stylesheet", "href": path if is_remote(path) else "/" + path, "type": "text/css"},
            self_closing=True,
        )
    if kind == "css-inline":
        return DocumentTag(
            kind="style",
            name="style",
            location=HEAD,
            contents=contents,
            priority=20,
            attributes={"type": "text/css"},
        )
    if kind == "js":
        attributes: dict[str, str | None] = {
            "src": path if is_remote(path) else "/" + path,
            "type": "text/javascript",
        }
        attributes.update(dict.fromkeys(flags))
        return DocumentTag(
            kind="script",
            name="script",
            location=location,
            priority=25 if footer else 20,
            attributes=attributes,
        )
    return DocumentTag(
        kind="script",
        name="script",
        location=location,
        contents=contents,
        priority=30 if footer else 25,
        attributes={"type": "text/javascript"},
    )


def asset_tag(ctx: RenderContext, out: list[str], args: list[str], source: str, pos: int) -> TagResult:
    """Register a stylesheet or script once per render."""
    if len(args) < 2:
        return pos, [invalid_arguments("asset", _USAGE, pos)]
    kind = unquote(args[0])
    raw_path = unquote(args[1])
    if kind not in ASSET_KINDS:
        return pos, [
            Diagnostic(
                ErrorCode.INVALID_ASSET_KIND,
                f"invalid asset kind '{kind}', expected one of: {', '.join(ASSET_KINDS)}",
                pos,
            )
        ]
    inline = kind.endswith("-inline")
    is_js = kind.startswith("js")

    location = HEAD
    flags: list[str] = []
    for option in args[2:]:
        key, sep, value = option.partition("=")
        if sep and key == "location":
            location = unquote(value)
            if location not in LOCATIONS:
                return pos, [invalid_arguments("asset", _USAGE, pos)]
        elif not sep and option in _JS_FLAGS and kind == "js":
            flags.append(option)
        else:
            return pos, [invalid_arguments("asset", _USAGE, pos)]
    if not is_js:
        location = HEAD

    try:
        path = normalize_asset_path(raw_path, inline)
    except ValueError as exc:
        return pos, [Diagnostic(ErrorCode.ASSET_PATH_INVALID, str(exc), pos)]

    key = f"{path}|{kind}"
    if key in ctx.imported_assets:
        return pos, []
    other = _conflicting_kind(ctx.imported_assets, path, kind)
    if other is not None:
        return pos, [
            Diagnostic(
                ErrorCode.ASSET_KIND_CONFLICT,
                f"asset '{path}' already imported as '{other}', cannot import as '{kind}'",
                pos,
            )
        ]

    contents = ""
    if inline:
        text, problem = _read_inline(ctx, path, pos)
        if problem is not None:
            return pos, [problem]
        contents = text or ""

    ctx.imported_assets.add(key)
    ctx.document_tags.append(_build_tag(kind, path, location, flags, contents))
    return pos, []
