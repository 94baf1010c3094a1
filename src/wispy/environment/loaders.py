"""Template loaders for the ``render`` and ``include`` tags.

Loaders map a logical template name (already rewritten from ``@app/...``
to ``app/....html``) plus a host hint to template source. They implement
`load(name, host_hint)` and raise `TemplateNotFoundError` on a miss.

Built-in Loaders:
- `SiteLoader`: Multi-tenant; one template tree per host under a sites root
- `FileSystemLoader`: Fixed directories, host hint ignored
- `DictLoader`: In-memory mapping (testing/embedded)
- `ChoiceLoader`: Try multiple loaders in order (tenant override, shared fallback)
- `FunctionLoader`: Wrap a callable as a loader

Custom Loaders:
Anything with a matching ``load`` method works:
    ```python
    class DatabaseLoader:
        def load(self, name: str, host_hint: str = "") -> str:
            row = db.query("SELECT body FROM templates WHERE host = ? AND name = ?",
                           host_hint, name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.body
    ```

Path Safety:
File-backed loaders refuse names that would resolve outside their root
(``../secrets.html``, absolute paths), reporting them as not found.

Thread-Safety:
All built-in loaders are safe for concurrent `load()` calls; they hold no
mutable state. Caching is the render context's job (``template_cache``).

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from wispy.environment.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class Loader(Protocol):
    """Protocol implemented by every template loader."""

    def load(self, name: str, host_hint: str = "") -> str: ...


def safe_join(root: Path, name: str) -> Path | None:
    """Join name onto root, or None if the result escapes root."""
    if not name or "\\" in name or "\x00" in name:
        return None
    candidate = Path(name)
    if candidate.is_absolute():
        return None
    root = root.resolve()
    path = (root / candidate).resolve()
    if path != root and root not in path.parents:
        return None
    return path


class FileSystemLoader:
    """Load templates from one or more fixed directories.

    Directories are searched in order and the first file found wins. The
    host hint is ignored, which makes this the loader for shared templates.

    Example:
        >>> loader = FileSystemLoader(["themes/custom/", "themes/default/"])
        >>> loader.load("app/nav.html")
    """

    __slots__ = ("_encoding", "_paths")

    def __init__(self, paths: str | Path | list[str | Path], encoding: str = "utf-8"):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    def load(self, name: str, host_hint: str = "") -> str:
        for base in self._paths:
            path = safe_join(base, name)
            if path is not None and path.is_file():
                return path.read_text(self._encoding)
        logger.debug("template %r not found in %s", name, self._paths)
        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        """All ``.html`` files under the search paths, relative to their root."""
        templates: set[str] = set()
        for base in self._paths:
            if base.is_dir():
                templates.update(path.relative_to(base).as_posix() for path in base.rglob("*.html"))
        return sorted(templates)


class SiteLoader:
    """Load templates from the tenant's own tree, selected by host.

    Layout::

        <sites_root>/
            example.com/
                templates/
                    app/dashboard.html
                    marketing/hero.html
            shop.example.org/
                templates/...

    The host hint picks the tenant. A missing or malformed host (empty,
    containing path separators, ``..``) is a miss, never a fallback to
    another tenant.
    """

    __slots__ = ("_encoding", "_root", "_templates_dir")

    def __init__(
        self,
        sites_root: str | Path,
        templates_dir: str = "templates",
        encoding: str = "utf-8",
    ):
        self._root = Path(sites_root)
        self._templates_dir = templates_dir
        self._encoding = encoding

    def tenant_root(self, host_hint: str) -> Path | None:
        """Directory holding the host's site, or None for an unusable host."""
        host = host_hint.split(":", 1)[0].strip().lower()
        if not host or host.startswith(".") or "/" in host or "\\" in host:
            return None
        return safe_join(self._root, host)

    def load(self, name: str, host_hint: str = "") -> str:
        site = self.tenant_root(host_hint)
        if site is None:
            raise TemplateNotFoundError(f"Template '{name}': no site for host {host_hint!r}")
        path = safe_join(site / self._templates_dir, name)
        if path is None or not path.is_file():
            logger.debug("template %r not found for host %r", name, host_hint)
            raise TemplateNotFoundError(f"Template '{name}' not found for host '{host_hint}'")
        return path.read_text(self._encoding)


class DictLoader:
    """Load templates from an in-memory mapping of name → source.

    Example:
        >>> env = Environment(loader=DictLoader({"app/nav.html": "<nav>{{ site }}</nav>"}))
        >>> env.render('{% render "@app/nav" %}', env.new_context({"site": "Docs"}))[0]
        '<nav>Docs</nav>'
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def load(self, name: str, host_hint: str = "") -> str:
        try:
            return self._mapping[name]
        except KeyError:
            from difflib import get_close_matches

            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, list(self._mapping), n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            raise TemplateNotFoundError(msg) from None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping)


class ChoiceLoader:
    """Try loaders in order; the first one that finds the template wins.

    The usual multi-tenant arrangement is a per-host tree with a shared
    fallback:

        >>> loader = ChoiceLoader([SiteLoader("sites/"), FileSystemLoader("shared/")])
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: list[Loader]):
        self._loaders = list(loaders)

    def load(self, name: str, host_hint: str = "") -> str:
        for loader in self._loaders:
            try:
                return loader.load(name, host_hint)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        templates: set[str] = set()
        for loader in self._loaders:
            if hasattr(loader, "list_templates"):
                templates.update(loader.list_templates())
        return sorted(templates)


class FunctionLoader:
    """Wrap ``load_func(name, host_hint) -> str | None`` as a loader.

    Returning None means not found.
    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str, str], str | None]):
        self._load_func = load_func

    def load(self, name: str, host_hint: str = "") -> str:
        source = self._load_func(name, host_hint)
        if source is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        return source
