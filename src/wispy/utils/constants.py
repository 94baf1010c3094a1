"""HTML policy tables for the user-generated-content sanitizer.

Kept apart from html.py so the policy can be read (and reviewed) on its own.
"""

from __future__ import annotations

# Elements kept as markup. Anything else is dropped, keeping its text.
UGC_ELEMENTS: frozenset[str] = frozenset(
    {
        # Inline formatting
        "a", "abbr", "acronym", "b", "bdi", "bdo", "cite", "code", "del", "dfn",
        "em", "i", "ins", "kbd", "mark", "q", "s", "samp", "small", "span",
        "strike", "strong", "sub", "sup", "time", "tt", "u", "var",
        # Ruby annotations
        "rp", "rt", "ruby",
        # Block structure
        "address", "article", "aside", "blockquote", "details", "div",
        "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
        "header", "hgroup", "nav", "p", "pre", "section", "summary",
        # Lists
        "dd", "dl", "dt", "li", "ol", "ul",
        # Tables
        "caption", "col", "colgroup", "table", "tbody", "td", "tfoot", "th",
        "thead", "tr",
        # Void
        "br", "hr", "img", "wbr",
    }
)

# Elements that never take an end tag.
VOID_ELEMENTS: frozenset[str] = frozenset({"br", "col", "hr", "img", "wbr"})

# Elements removed together with everything inside them.
DROP_CONTENT_ELEMENTS: frozenset[str] = frozenset(
    {"embed", "iframe", "noscript", "object", "script", "style", "template"}
)

# Elements dropped (text kept) when the named attribute did not survive.
REQUIRED_ATTRIBUTE: dict[str, str] = {"a": "href", "img": "src"}

# Attributes holding small integers or percentages.
NUMERIC_ATTRIBUTES: frozenset[str] = frozenset(
    {"colspan", "height", "rowspan", "span", "start", "width"}
)

# Attributes allowed on every permitted element.
GLOBAL_ATTRIBUTES: frozenset[str] = frozenset({"dir", "id", "lang", "title"})

# Per-element attribute allowances.
ELEMENT_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href"}),
    "blockquote": frozenset({"cite"}),
    "col": frozenset({"span", "width"}),
    "colgroup": frozenset({"span", "width"}),
    "del": frozenset({"cite", "datetime"}),
    "details": frozenset({"open"}),
    "img": frozenset({"align", "alt", "height", "src", "width"}),
    "ins": frozenset({"cite", "datetime"}),
    "ol": frozenset({"reversed", "start", "type"}),
    "q": frozenset({"cite"}),
    "table": frozenset({"summary"}),
    "td": frozenset({"abbr", "align", "colspan", "headers", "rowspan", "valign"}),
    "th": frozenset({"abbr", "align", "colspan", "headers", "rowspan", "scope", "valign"}),
    "time": frozenset({"datetime"}),
    "ul": frozenset({"type"}),
}

# Attributes whose value is a URL and must pass the scheme check.
URL_ATTRIBUTES: frozenset[str] = frozenset({"cite", "href", "src"})

# Schemes accepted in URL attributes; relative URLs have no scheme.
URL_SCHEMES: frozenset[str] = frozenset({"http", "https", "mailto"})
