"""Wispy template package: value helpers, expression resolution, loop metadata.

Re-exports all public symbols so that ``from wispy.template import LoopContext``
works without knowing the module layout.

"""

from wispy.template.helpers import format_value, is_truthy
from wispy.template.loop_context import LoopContext
from wispy.template.resolver import FilterCall, Pipeline, parse_pipeline, resolve_expression

__all__ = [
    "FilterCall",
    "LoopContext",
    "Pipeline",
    "format_value",
    "is_truthy",
    "parse_pipeline",
    "resolve_expression",
]
