"""Wispy: streaming template engine for multi-tenant sites.

A pure-Python text template engine: no AST, no compilation step. The
driver scans the source once, interpolating values and dispatching tags
as it goes, and every fault becomes a diagnostic instead of an exception.

Quickstart:
    >>> from wispy import Environment
    >>> env = Environment()
    >>> env.render("Hello {{ name }}!", env.new_context({"name": "Alice"}))
    ('Hello Alice!', [])

Multi-tenant templates and assets:
    >>> from wispy import Environment, RequestHint
    >>> env = Environment(sites_root="sites/")
    >>> ctx = env.new_context({"user": user}, request=RequestHint(host="example.com"))
    >>> body, diagnostics = env.render('{% render "@app/dashboard" %}', ctx)
    >>> page = build_document(body, ctx, title="Dashboard")

Syntax:
    {{ user.name | default: "guest" | upcase }}
    {% if user.admin %}...{% else %}...{% endif %}
    {% for post in posts %}{{ loop.index }}: {{ post.title }}{% endfor %}
    {% define "sidebar" %}...{% enddefine %}  {% block "sidebar" %}...{% endblock %}
    {% render "@app/nav" %}  {% include "partials/footer.html" %}
    {% asset "css" "assets/site.css" %}  {% meta name="description" content=page.summary %}
    {% verbatim %}{{ literally }}{% endverbatim %}
    {# comment #}

Architecture:
Template Source → Lexer (offsets) → Driver → Tags / Resolver → Filters → Sanitizer → Output

1. **Lexer**: finds the next ``{{``/``{%``/``{#`` and its closer
2. **Driver**: `Environment.render()` walks the source with a cursor
3. **Resolver**: literals, dot notation, filter pipelines
4. **Tags**: own their bodies; seek their terminators with nesting depth
5. **Sanitizer**: every string value from data passes the UGC HTML policy

Thread-Safety:
Environments, registries and sanitizers are safe to share. Each render
gets its own `RenderContext`; clones of it share the side-effect
collections (blocks, assets, meta, errors) by reference, never across
renders.

Lenient Rendering:
Unresolved variables render as empty strings and are not diagnostics.
Hosts that want faults to fail call `raise_for_diagnostics()`.

"""

from wispy._types import Kind, Token, TokenType, kind_of
from wispy.environment import (
    DEFAULT_FILTERS,
    ChoiceLoader,
    Diagnostic,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FilterArgumentError,
    FunctionLoader,
    Loader,
    SiteLoader,
    SourceSnippet,
    TemplateDiagnosticsError,
    TemplateError,
    TemplateNotFoundError,
    build_source_snippet,
    raise_for_diagnostics,
)
from wispy.document import DocumentTag, MetaTag, build_document, construct_meta_tags, sorted_document_tags
from wispy.lexer import Delimiters, Lexer
from wispy.render_context import RenderContext, RequestHint
from wispy.tags import DEFAULT_TAGS
from wispy.template import LoopContext
from wispy.utils.html import UGC_SANITIZER, Sanitizer, html_escape

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_FILTERS",
    "DEFAULT_TAGS",
    "UGC_SANITIZER",
    "ChoiceLoader",
    "Delimiters",
    "Diagnostic",
    "DictLoader",
    "DocumentTag",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FilterArgumentError",
    "FunctionLoader",
    "Kind",
    "Lexer",
    "Loader",
    "LoopContext",
    "MetaTag",
    "RenderContext",
    "RequestHint",
    "Sanitizer",
    "SiteLoader",
    "SourceSnippet",
    "TemplateDiagnosticsError",
    "TemplateError",
    "TemplateNotFoundError",
    "Token",
    "TokenType",
    "__version__",
    "build_document",
    "build_source_snippet",
    "construct_meta_tags",
    "html_escape",
    "kind_of",
    "raise_for_diagnostics",
    "sorted_document_tags",
]
