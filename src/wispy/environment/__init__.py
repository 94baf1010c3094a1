"""Wispy environment package: the engine driver and its collaborators.

Re-exports the public symbols so that ``from wispy.environment import
Environment`` works without knowing the module layout.

"""

from wispy.environment.exceptions import (
    Diagnostic,
    ErrorCode,
    FilterArgumentError,
    SourceSnippet,
    TemplateDiagnosticsError,
    TemplateError,
    TemplateNotFoundError,
    build_source_snippet,
    raise_for_diagnostics,
)
from wispy.environment.filters import DEFAULT_FILTERS
from wispy.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
    SiteLoader,
)
from wispy.environment.core import Environment

__all__ = [
    "DEFAULT_FILTERS",
    "ChoiceLoader",
    "Diagnostic",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FilterArgumentError",
    "FunctionLoader",
    "Loader",
    "SiteLoader",
    "SourceSnippet",
    "TemplateDiagnosticsError",
    "TemplateError",
    "TemplateNotFoundError",
    "build_source_snippet",
    "raise_for_diagnostics",
]
