"""Sentinel scanner for Wispy templates.

The scanner recognizes three constructs by their two-character openers and
reports them as offset-only `Token` records:

    {{ ... }}   variable interpolation
    {% ... %}   block tag
    {# ... #}   comment (non-greedy, no nesting)

It never builds a tree. The driver asks for the next token at a cursor,
handles it, and resumes wherever the handler says; tags that own a body
(``if``, ``for``, ...) move the cursor past their terminator themselves.

Complexity:
    `next_token()` is one compiled-regex search for the earliest opener plus
    one ``str.find`` for its closer, so a full pass is linear in source length.

Also provides the small string helpers shared by tags and the resolver:
quote-respecting field splitting, quote stripping, and offset → line/column.

"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from wispy._types import Token, TokenType

_QUOTES = frozenset("\"'")


@dataclass(frozen=True, slots=True)
class Delimiters:
    """The six sentinels recognized by the scanner."""

    variable_start: str = "{{"
    variable_end: str = "}}"
    block_start: str = "{%"
    block_end: str = "%}"
    comment_start: str = "{#"
    comment_end: str = "#}"

    def __post_init__(self) -> None:
        openers = (self.variable_start, self.block_start, self.comment_start)
        closers = (self.variable_end, self.block_end, self.comment_end)
        if not all(openers) or not all(closers):
            raise ValueError("template delimiters must be non-empty strings")
        if len(set(openers)) != 3:
            raise ValueError(f"template openers must be distinct, got {openers!r}")

    @classmethod
    def from_pair(cls, open_char: str = "{", close_char: str = "}") -> Delimiters:
        """Build delimiters from a single open/close pair.

        ``from_pair("{", "}")`` yields the defaults; ``from_pair("<", ">")``
        yields ``<{ }>``, ``<% %>`` and ``<# #>``.
        """
        return cls(
            variable_start=open_char + "{",
            variable_end="}" + close_char,
            block_start=open_char + "%",
            block_end="%" + close_char,
            comment_start=open_char + "#",
            comment_end="#" + close_char,
        )


DEFAULT_DELIMITERS = Delimiters()


class Lexer:
    """Find sentinel-delimited constructs in template source.

    Lexers are immutable after construction and safe to share between
    threads; all per-scan state lives in the caller's cursor.

    Example:
        >>> lexer = Lexer()
        >>> tok = lexer.next_token("Hi {{ name }}!", 0)
        >>> tok.type, tok.start, tok.end
        (<TokenType.VARIABLE: 'variable'>, 3, 13)
    """

    __slots__ = ("_closers", "_opener_re", "_openers", "delimiters")

    def __init__(self, delimiters: Delimiters | None = None):
        self.delimiters = delimiters or DEFAULT_DELIMITERS
        d = self.delimiters
        self._openers: dict[str, TokenType] = {
            d.variable_start: TokenType.VARIABLE,
            d.block_start: TokenType.BLOCK,
            d.comment_start: TokenType.COMMENT,
        }
        self._closers: dict[TokenType, str] = {
            TokenType.VARIABLE: d.variable_end,
            TokenType.BLOCK: d.block_end,
            TokenType.COMMENT: d.comment_end,
        }
        # Longest opener first so a configurable opener that prefixes another wins
        alternatives = sorted(self._openers, key=len, reverse=True)
        self._opener_re = re.compile("|".join(re.escape(o) for o in alternatives))

    def next_token(self, source: str, pos: int) -> Token | None:
        """Return the earliest construct at or after ``pos``, or None."""
        match = self._opener_re.search(source, pos)
        if match is None:
            return None
        token_type = self._openers[match.group()]
        start = match.start()
        inner_start = match.end()
        closer = self._closers[token_type]
        inner_end = source.find(closer, inner_start)
        if inner_end == -1:
            return Token(token_type, start, inner_start, inner_start, inner_start, closed=False)
        return Token(token_type, start, inner_end + len(closer), inner_start, inner_end)

    def tokens(self, source: str, pos: int = 0) -> Iterator[Token]:
        """Yield every construct in order, stepping over unclosed openers."""
        while True:
            token = self.next_token(source, pos)
            if token is None:
                return
            yield token
            pos = token.end

    def block_tags(self, source: str, pos: int = 0) -> Iterator[tuple[Token, list[str]]]:
        """Yield closed block tags with their split fields.

        Variables and comments are stepped over so a ``{% ... %}`` spelled
        inside a comment never counts as a tag.
        """
        for token in self.tokens(source, pos):
            if token.type is not TokenType.BLOCK or not token.closed:
                continue
            yield token, split_fields(source[token.inner_start : token.inner_end])


def split_fields(text: str) -> list[str]:
    """Split on whitespace outside quotes, keeping the quotes.

    Example:
        >>> split_fields('asset "css" "my file.css"  location=head')
        ['asset', '"css"', '"my file.css"', 'location=head']
    """
    fields: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for char in text:
        if quote is not None:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in _QUOTES:
            quote = char
            current.append(char)
        elif char.isspace():
            if current:
                fields.append("".join(current))
                current.clear()
        else:
            current.append(char)
    if current:
        fields.append("".join(current))
    return fields


def split_outside_quotes(text: str, separator: str) -> list[str]:
    """Split on a single-character separator that is not inside quotes.

    Used for ``|`` between pipeline stages and ``,`` between filter
    arguments. Pieces are returned untrimmed.
    """
    parts: list[str] = []
    start = 0
    quote: str | None = None
    for i, char in enumerate(text):
        if quote is not None:
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == separator:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return parts


def is_quoted(text: str) -> bool:
    """True if text is wrapped in one pair of matching quotes."""
    return len(text) >= 2 and text[0] in _QUOTES and text[0] == text[-1]


def unquote(text: str) -> str:
    """Strip one pair of matching surrounding quotes, if present."""
    if is_quoted(text):
        return text[1:-1]
    return text


def line_col(source: str, pos: int) -> tuple[int, int]:
    """Map an offset to a 1-based line and 0-based column."""
    pos = max(0, min(pos, len(source)))
    line = source.count("\n", 0, pos) + 1
    column = pos - (source.rfind("\n", 0, pos) + 1)
    return line, column
