"""ANSI styling for diagnostic output.

Colors are applied only when writing to a TTY, and the user can override
the decision with the conventional environment variables:

    NO_COLOR     disable colors (https://no-color.org/)
    FORCE_COLOR  enable colors even when not a TTY (wins over NO_COLOR)

"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
}

Style = Literal["reset", "bold", "dim", "yellow", "cyan", "bright_red", "bright_green", "bright_yellow"]

_ANSI_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _detect_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stderr.isatty()


_USE_COLORS = _detect_colors()


def supports_color() -> bool:
    """Whether styled output is enabled for this process."""
    return _USE_COLORS


def colorize(text: str, *styles: Style) -> str:
    """Wrap text in ANSI codes, or return it unchanged when colors are off."""
    if not _USE_COLORS or not styles:
        return text
    prefix = "".join(_CODES.get(style, "") for style in styles)
    if not prefix:
        return text
    return f"{prefix}{text}{_CODES['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences.

    Example:
        >>> strip_colors("\\033[91mboom\\033[0m")
        'boom'
    """
    return _ANSI_RE.sub("", text)


def kind(text: str) -> str:
    """Diagnostic kind label (bright red, bold)."""
    return colorize(text, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format one numbered source line, marking the offending line with ``>``."""
    marker = ">" if is_error else " "
    number = colorize(f"{marker}{lineno:>3}", "yellow")
    body = colorize(content, "bright_red") if is_error else dim_text(content)
    return f"{number} | {body}"
