"""Built-in tags for Wispy templates.

The tags package is organized by concern:
- control_flow: if (with else / not), for (with loop metadata)
- template_structure: define, block, render, include
- special_blocks: verbatim, meta
- assets: asset (deduplicated CSS/JS registration)

Shared seeking and recursion helpers live in `wispy.tags.base`.

Custom Tags:
    >>> def shout(ctx, out, args, source, pos):
    ...     out.append(" ".join(args).upper())
    ...     return pos, []
    >>> env.tags["shout"] = shout
    >>> # {% shout hello there %}

"""

from __future__ import annotations

from wispy.tags.assets import asset_tag
from wispy.tags.base import TagFunc, TagResult, seek_end
from wispy.tags.control_flow import for_tag, if_tag
from wispy.tags.special_blocks import meta_tag, verbatim_tag
from wispy.tags.template_structure import block_tag, define_tag, include_tag, render_tag

DEFAULT_TAGS: dict[str, TagFunc] = {
    "asset": asset_tag,
    "block": block_tag,
    "define": define_tag,
    "for": for_tag,
    "if": if_tag,
    "include": include_tag,
    "meta": meta_tag,
    "render": render_tag,
    "verbatim": verbatim_tag,
}

__all__ = [
    "DEFAULT_TAGS",
    "TagFunc",
    "TagResult",
    "seek_end",
]
