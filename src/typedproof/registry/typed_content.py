"""
Recency registry of content typed during the session.

Used to tell an internal paste (re-inserting text the user already typed or
copied inside the editor) from an external one. Lookups use a 32-bit rolling
hash of the full string and of overlapping fixed-size windows, plus a
substring scan over the bounded content store. Text assembled from several
separately typed fragments is not recognized, so a paste can only be
misclassified as external, never as internal.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return sign + "".join(reversed(digits))


def fast_hash(text: str) -> str:
    """Signed 32-bit ``h * 31 + c`` rolling hash rendered in base 36.

    Lookup key only; not collision resistant.
    """
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(h)


ContentsProvider = Callable[[], Iterable[str]]


class TypedContentRegistry:
    def __init__(
        self,
        *,
        max_entries: int = 10_000,
        segment_size: int = 50,
        segment_step: int = 25,
        max_copied_entries: int = 1000,
    ) -> None:
        self._hashes: set[str] = set()
        self._store: deque[str] = deque(maxlen=max_entries)
        self._copied: dict[str, None] = {}
        self._max_copied = max_copied_entries
        self._segment_size = segment_size
        self._segment_step = segment_step
        self._contents_provider: ContentsProvider | None = None

    @classmethod
    def from_settings(cls, settings: object | None = None) -> TypedContentRegistry:
        from ..core.settings import Settings

        cfg = (settings if settings is not None else Settings()).registry  # type: ignore[attr-defined]
        return cls(
            max_entries=cfg.max_entries,
            segment_size=cfg.segment_size,
            segment_step=cfg.segment_step,
        )

    def register(self, content: str) -> None:
        if not content:
            return
        self._hashes.add(fast_hash(content))
        self._store.append(content)
        size = self._segment_size
        if len(content) > size:
            for i in range(0, len(content) - size, self._segment_step):
                self._hashes.add(fast_hash(content[i : i + size]))

    def register_copied(self, content: str) -> None:
        """Remember text copied inside the editor (bounded, oldest evicted)."""
        if not content:
            return
        self._copied.pop(content, None)
        self._copied[content] = None
        while len(self._copied) > self._max_copied:
            del self._copied[next(iter(self._copied))]

    def set_contents_provider(self, provider: ContentsProvider | None) -> None:
        """Callback returning the live contents of every open document."""
        self._contents_provider = provider

    def is_internal(self, content: str) -> bool:
        if not content:
            return False
        if fast_hash(content) in self._hashes:
            return True
        if content in self._copied:
            return True
        if any(content in stored for stored in self._store):
            return True
        if self._contents_provider is not None:
            return any(content in doc for doc in self._contents_provider() if doc)
        return False

    def clear(self) -> None:
        self._hashes.clear()
        self._store.clear()
        self._copied.clear()

    @property
    def size(self) -> int:
        return len(self._store)

    def __len__(self) -> int:
        return len(self._store)
