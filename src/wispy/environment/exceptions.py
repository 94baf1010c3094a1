"""Diagnostics and exceptions for the Wispy template engine.

Rendering never aborts. Every recoverable fault becomes a `Diagnostic`
that is returned from `Environment.render()` and appended to the context's
``errors`` list, and the offending construct renders as an empty string.

Diagnostic Kinds:
    unclosed-variable / unclosed-tag / unclosed-comment
    unknown-tag / unknown-filter
    unterminated-<tag>            nested block seek hit end of source
    invalid-tag-arguments         tag called with missing/ill-formed arguments
    not-iterable                  for over an unsupported kind
    template-not-found            loader failure for render/include
    undefined-block               render of a block nobody defined
    render-depth-exceeded         nested render/include/block too deep
    invalid-asset-kind / asset-path-invalid / asset-kind-conflict / asset-read-failed
    filter-type-mismatch          filter rejected its arguments

Exception Hierarchy:
The few places that raise (loaders, filter argument coercion, hosts that
opt into strictness) use:

TemplateError (base)
├── TemplateNotFoundError     # Loader could not supply a template
├── FilterArgumentError       # Filter argument could not be coerced
└── TemplateDiagnosticsError  # raise_for_diagnostics() on a non-empty list

Unresolved variables are *not* diagnostics: they render empty.

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from wispy.environment import terminal
from wispy.lexer import line_col


class ErrorCode(Enum):
    """Diagnostic kinds, grouped by the stage that reports them."""

    # Scanner
    UNCLOSED_VARIABLE = "unclosed-variable"
    UNCLOSED_TAG = "unclosed-tag"
    UNCLOSED_COMMENT = "unclosed-comment"

    # Tags
    UNKNOWN_TAG = "unknown-tag"
    UNTERMINATED = "unterminated"
    INVALID_TAG_ARGUMENTS = "invalid-tag-arguments"
    NOT_ITERABLE = "not-iterable"

    # Filters
    UNKNOWN_FILTER = "unknown-filter"
    FILTER_TYPE_MISMATCH = "filter-type-mismatch"

    # Template loading / composition
    TEMPLATE_NOT_FOUND = "template-not-found"
    UNDEFINED_BLOCK = "undefined-block"
    RENDER_DEPTH_EXCEEDED = "render-depth-exceeded"

    # Assets
    INVALID_ASSET_KIND = "invalid-asset-kind"
    ASSET_PATH_INVALID = "asset-path-invalid"
    ASSET_KIND_CONFLICT = "asset-kind-conflict"
    ASSET_READ_FAILED = "asset-read-failed"

    @property
    def category(self) -> str:
        """Stage that reports this code: lexer, tag, filter, template or asset."""
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorCode.UNCLOSED_VARIABLE: "lexer",
    ErrorCode.UNCLOSED_TAG: "lexer",
    ErrorCode.UNCLOSED_COMMENT: "lexer",
    ErrorCode.UNKNOWN_TAG: "tag",
    ErrorCode.UNTERMINATED: "tag",
    ErrorCode.INVALID_TAG_ARGUMENTS: "tag",
    ErrorCode.NOT_ITERABLE: "tag",
    ErrorCode.UNKNOWN_FILTER: "filter",
    ErrorCode.FILTER_TYPE_MISMATCH: "filter",
    ErrorCode.TEMPLATE_NOT_FOUND: "template",
    ErrorCode.UNDEFINED_BLOCK: "template",
    ErrorCode.RENDER_DEPTH_EXCEEDED: "template",
    ErrorCode.INVALID_ASSET_KIND: "asset",
    ErrorCode.ASSET_PATH_INVALID: "asset",
    ErrorCode.ASSET_KIND_CONFLICT: "asset",
    ErrorCode.ASSET_READ_FAILED: "asset",
}


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template lines around a diagnostic, for terminal display.

    Attributes:
        lines: (line_number, line_content) pairs around the fault
        error_line: 1-based line of the fault
        column: Optional 0-based column for the caret
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(terminal.format_source_line(lineno, content, is_error=lineno == self.error_line))
            if lineno == self.error_line and self.column is not None:
                caret = " " * self.column + "^"
                parts.append(f"{terminal.dim_text('     |')} {terminal.kind(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 1,
    column: int | None = None,
) -> SourceSnippet:
    """Collect ``context_lines`` lines either side of ``error_line``."""
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A non-fatal rendering fault.

    Attributes:
        code: What went wrong
        message: Human-readable description
        position: Offset into the source being rendered when it was raised.
            Offsets from nested renders are relative to the fragment.
        tag: Tag name for tag-scoped codes (``unterminated-<tag>``)
    """

    code: ErrorCode
    message: str
    position: int | None = None
    tag: str | None = None

    @property
    def kind(self) -> str:
        """Kebab-case kind, e.g. ``unknown-filter`` or ``unterminated-for``."""
        if self.code is ErrorCode.UNTERMINATED and self.tag:
            return f"{self.code.value}-{self.tag}"
        return self.code.value

    def __str__(self) -> str:
        if self.position is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind}: {self.message} (at offset {self.position})"

    def format(self, source: str | None = None, name: str | None = None) -> str:
        """Format as a terminal diagnostic, with a snippet when source is given.

        Example output::

            unknown-filter: unknown filter 'upcasee'
              --> page.html:3:4
               |
            >  3 | {{ name | upcasee }}
                 |     ^
               |
        """
        parts = [f"{terminal.kind(self.kind)}: {self.message}"]
        if source is not None and self.position is not None:
            line, column = line_col(source, self.position)
            where = f"{name or '<template>'}:{line}:{column}"
            parts.append(f"  --> {terminal.location(where)}")
            parts.append(build_source_snippet(source, line, column=column).format())
        return "\n".join(parts)


class TemplateError(Exception):
    """Base exception for all Wispy template errors."""

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """One-line summary prefixed with the error code, if any."""
        text = str(self)
        if self.code is not None and not text.startswith(self.code.value):
            text = f"{self.code.value}: {text}"
        return text


class TemplateNotFoundError(TemplateError):
    """A loader could not supply the requested template.

    Example:
        >>> DictLoader({}).load("app/nav.html")
        TemplateNotFoundError: Template 'app/nav.html' not found
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class FilterArgumentError(TemplateError):
    """A filter argument could not be interpreted.

    Raised by filters, caught by the resolver and turned into a
    ``filter-type-mismatch`` diagnostic; the value passes through unchanged.
    """

    code: ErrorCode | None = ErrorCode.FILTER_TYPE_MISMATCH

    def __init__(self, filter_name: str, message: str):
        self.filter_name = filter_name
        super().__init__(f"{filter_name}: {message}")


class TemplateDiagnosticsError(TemplateError):
    """Raised by `raise_for_diagnostics` when a render reported faults."""

    def __init__(self, diagnostics: Sequence[Diagnostic], source: str | None = None):
        self.diagnostics = tuple(diagnostics)
        self.source = source
        count = len(self.diagnostics)
        lines = [f"{count} template diagnostic{'s' if count != 1 else ''}:"]
        lines.extend(f"  - {diag}" for diag in self.diagnostics)
        super().__init__("\n".join(lines))


def raise_for_diagnostics(diagnostics: Sequence[Diagnostic], source: str | None = None) -> None:
    """Raise `TemplateDiagnosticsError` if any diagnostics were reported.

    For hosts (tests, build steps) that want a render with faults to fail:

        >>> html, diags = env.render(source, ctx)
        >>> raise_for_diagnostics(diags, source)
    """
    if diagnostics:
        raise TemplateDiagnosticsError(diagnostics, source)
