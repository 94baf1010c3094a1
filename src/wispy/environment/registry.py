"""Tag and filter registries for the Wispy environment.

Both registries are dict-like views over an attribute of the Environment.
Reads go straight to the current dict; writes build a new dict and swap it
in (copy-on-write), so a render that already grabbed the dict never sees a
half-applied update.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wispy.environment.core import Environment


class Registry:
    """Copy-on-write, dict-like registry of named callables.

    Supports:
        - env.filters['shout'] = func
        - env.tags.update({'card': render_card})
        - func = env.filters['upcase']
        - 'if' in env.tags
        - del env.filters['strip']
    """

    __slots__ = ("_attr", "_env", "_label")

    def __init__(self, env: Environment, attr: str, label: str):
        self._env = env
        self._attr = attr
        self._label = label

    def _get_dict(self) -> dict[str, Callable[..., Any]]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Callable[..., Any]]) -> None:
        setattr(self._env, self._attr, d)

    def _check(self, name: str, func: Any) -> None:
        if not isinstance(name, str) or not name or any(c.isspace() for c in name):
            raise ValueError(f"{self._label} name must be a non-empty word, got {name!r}")
        if not callable(func):
            raise TypeError(f"{self._label} {name!r} must be callable, got {type(func).__name__}")

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._get_dict()[name]

    def __setitem__(self, name: str, func: Callable[..., Any]) -> None:
        self._check(name, func)
        new = self._get_dict().copy()
        new[name] = func
        self._set_dict(new)

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def __repr__(self) -> str:
        return f"<{self._label} registry: {', '.join(sorted(self._get_dict()))}>"

    def get(self, name: str, default: Callable[..., Any] | None = None) -> Callable[..., Any] | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: Mapping[str, Callable[..., Any]]) -> None:
        """Register several entries with a single swap."""
        for name, func in mapping.items():
            self._check(name, func)
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def copy(self) -> dict[str, Callable[..., Any]]:
        return self._get_dict().copy()

    def keys(self):
        return self._get_dict().keys()

    def items(self):
        return self._get_dict().items()
