"""HTML sanitizing and escaping.

Every string value the resolver produces passes through a `Sanitizer`
before it reaches the output buffer. The default policy (`UGC_SANITIZER`)
is the "user-generated content" ruleset: inline formatting, lists, tables,
links and images survive; scripts, styles, embedded documents and every
event-handler attribute do not.

Algorithm:
    1. Parse with ``html.parser.HTMLParser`` (character references decoded)
    2. Drop ``script``/``style``/``iframe``/... together with their contents
    3. Keep allow-listed elements, filtering their attributes
    4. Re-escape all text and attribute values
    5. Close any element the input left open

Because references are decoded before re-escaping, sanitizing is
idempotent: ``sanitize(sanitize(x)) == sanitize(x)``.

Thread-Safety:
A Sanitizer is immutable after construction; each call builds its own
parser. The memo cache is a ``functools.lru_cache``, which is thread-safe.

"""

from __future__ import annotations

import html
import re
from functools import lru_cache
from html.parser import HTMLParser
from urllib.parse import urlsplit

from wispy.utils.constants import (
    DROP_CONTENT_ELEMENTS,
    ELEMENT_ATTRIBUTES,
    GLOBAL_ATTRIBUTES,
    NUMERIC_ATTRIBUTES,
    REQUIRED_ATTRIBUTE,
    UGC_ELEMENTS,
    URL_ATTRIBUTES,
    URL_SCHEMES,
    VOID_ELEMENTS,
)

_ID_RE = re.compile(r"^[A-Za-z][\w\-:.]{0,127}$")
_NUMERIC_RE = re.compile(r"^\d{1,5}%?$")
_MARKUP_CHARS = frozenset("<>&")
_TAG_RE = re.compile(r"<[^>]*>?")


def html_escape(value: object) -> str:
    """Escape text for use in element content or a quoted attribute."""
    return html.escape(str(value), quote=True)


def _clean_url(value: str) -> str | None:
    """Return the URL if its scheme is allowed, else None.

    Whitespace and control characters are ignored when reading the scheme,
    so ``java\\tscript:`` and `` javascript:`` are caught too.
    """
    compact = "".join(ch for ch in value if ch > " " and ch != "\x7f")
    try:
        scheme = urlsplit(compact).scheme.lower()
    except ValueError:
        return None
    if scheme and scheme not in URL_SCHEMES:
        return None
    return value.strip()


class _PolicyParser(HTMLParser):
    """Single-use parser that writes the sanitized document to ``out``."""

    def __init__(self, sanitizer: Sanitizer):
        super().__init__(convert_charrefs=True)
        self._sanitizer = sanitizer
        self.out: list[str] = []
        # (tag, emitted) for every open allow-listed or dropped element
        self._stack: list[tuple[str, bool]] = []
        self._skip_tag: str | None = None
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._skip_tag is not None:
            if tag == self._skip_tag:
                self._skip_depth += 1
            return
        if tag in self._sanitizer.drop_content:
            self._skip_tag = tag
            self._skip_depth = 1
            return
        if tag not in self._sanitizer.elements:
            return
        clean = self._sanitizer.clean_attributes(tag, attrs)
        required = REQUIRED_ATTRIBUTE.get(tag)
        emitted = required is None or any(name == required for name, _ in clean)
        if emitted:
            if tag == "a":
                clean.append(("rel", "nofollow"))
            self.out.append(_format_start(tag, clean))
        if tag not in VOID_ELEMENTS:
            self._stack.append((tag, emitted))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.handle_starttag(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if self._skip_tag is not None:
            if tag == self._skip_tag:
                self._skip_depth -= 1
                if self._skip_depth == 0:
                    self._skip_tag = None
            return
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index][0] == tag:
                # Close everything opened inside the matched element too
                for open_tag, emitted in reversed(self._stack[index:]):
                    if emitted:
                        self.out.append(f"</{open_tag}>")
                del self._stack[index:]
                return

    def handle_data(self, data: str) -> None:
        if self._skip_tag is None:
            self.out.append(html.escape(data, quote=False))

    def finish(self) -> str:
        self.close()
        for tag, emitted in reversed(self._stack):
            if emitted:
                self.out.append(f"</{tag}>")
        self._stack.clear()
        return "".join(self.out)


def _format_start(tag: str, attrs: list[tuple[str, str | None]]) -> str:
    parts = [f"<{tag}"]
    for name, value in attrs:
        if value is None:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{html_escape(value)}"')
    parts.append(">")
    return "".join(parts)


class Sanitizer:
    """Allow-list HTML sanitizer.

    Example:
        >>> UGC_SANITIZER.sanitize('<b>hi</b><script>alert(1)</script>')
        '<b>hi</b>'
        >>> UGC_SANITIZER.sanitize('<img src=x onerror=alert(1)>')
        '<img src="x">'
        >>> UGC_SANITIZER.sanitize("<a href='javascript:alert(1)'>link</a>")
        'link'
    """

    __slots__ = ("_cached", "drop_content", "element_attributes", "elements", "global_attributes")

    def __init__(
        self,
        elements: frozenset[str] = UGC_ELEMENTS,
        global_attributes: frozenset[str] = GLOBAL_ATTRIBUTES,
        element_attributes: dict[str, frozenset[str]] | None = None,
        drop_content: frozenset[str] = DROP_CONTENT_ELEMENTS,
        cache_size: int = 2048,
    ):
        self.elements = frozenset(elements)
        self.global_attributes = frozenset(global_attributes)
        self.element_attributes = dict(ELEMENT_ATTRIBUTES if element_attributes is None else element_attributes)
        self.drop_content = frozenset(drop_content)
        self._cached = lru_cache(maxsize=cache_size)(self._sanitize)

    def clean_attributes(self, tag: str, attrs: list[tuple[str, str | None]]) -> list[tuple[str, str | None]]:
        """Filter attributes down to what the policy allows for ``tag``."""
        allowed = self.element_attributes.get(tag, frozenset())
        clean: list[tuple[str, str | None]] = []
        seen: set[str] = set()
        for name, value in attrs:
            if name in seen or (name not in self.global_attributes and name not in allowed):
                continue
            if name in URL_ATTRIBUTES:
                value = _clean_url(value) if value is not None else None
                if value is None:
                    continue
            elif name == "id":
                if value is None or not _ID_RE.match(value):
                    continue
            elif name in NUMERIC_ATTRIBUTES:
                if value is None or not _NUMERIC_RE.match(value.strip()):
                    continue
                value = value.strip()
            seen.add(name)
            clean.append((name, value))
        return clean

    def sanitize(self, text: str) -> str:
        """Return ``text`` with everything outside the policy removed."""
        if not text or _MARKUP_CHARS.isdisjoint(text):
            return text
        return self._cached(text)

    def _sanitize(self, text: str) -> str:
        parser = _PolicyParser(self)
        try:
            parser.feed(text)
            return parser.finish()
        except AssertionError:
            # Parsers before 3.13 reject unknown ``<![...[`` sections; drop all markup
            return html.escape(_TAG_RE.sub("", text), quote=False)


UGC_SANITIZER = Sanitizer()
