"""Loop iteration metadata for ``{% for %}`` blocks."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any


class LoopContext(Mapping[str, Any]):
    """Read-only ``loop`` variable available inside a ``for`` body.

    It is a Mapping so ordinary dot notation reaches it:
    ``{{ loop.index }}``, ``{% if loop.last %}``.

    Keys:
        index: 1-based iteration count (1, 2, 3, ...)
        index0: 0-based iteration count (0, 1, 2, ...)
        first: True on the first iteration
        last: True on the final iteration
        length: Total number of items
        revindex: Reverse 1-based index (counts down to 1)
        revindex0: Reverse 0-based index (counts down to 0)
        previtem: Previous item (None on first)
        nextitem: Next item (None on last)

    Example:
            ```
            {% for item in items %}
                <li>{{ loop.index }}/{{ loop.length }}: {{ item }}</li>
            {% endfor %}
            ```

    Each iteration gets its own LoopContext (the for tag clones the render
    context per element), so nested loops shadow ``loop`` and the outer
    value is back in scope after the inner ``endfor``.
    """

    __slots__ = ("_index", "_items")

    _KEYS = (
        "index",
        "index0",
        "first",
        "last",
        "length",
        "revindex",
        "revindex0",
        "previtem",
        "nextitem",
    )

    def __init__(self, items: Sequence[Any], index: int) -> None:
        self._items = items
        self._index = index

    def __getitem__(self, key: str) -> Any:
        if key not in self._KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._KEYS)

    def __len__(self) -> int:
        return len(self._KEYS)

    def __repr__(self) -> str:
        return f"LoopContext(index={self.index}, length={self.length})"

    @property
    def index(self) -> int:
        return self._index + 1

    @property
    def index0(self) -> int:
        return self._index

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == len(self._items) - 1

    @property
    def length(self) -> int:
        return len(self._items)

    @property
    def revindex(self) -> int:
        return len(self._items) - self._index

    @property
    def revindex0(self) -> int:
        return len(self._items) - self._index - 1

    @property
    def previtem(self) -> Any:
        if self._index == 0:
            return None
        return self._items[self._index - 1]

    @property
    def nextitem(self) -> Any:
        if self._index >= len(self._items) - 1:
            return None
        return self._items[self._index + 1]
