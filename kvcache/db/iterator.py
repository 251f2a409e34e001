from __future__ import annotations

from typing import Any, Generic, Iterable, List, Tuple, TypeVar

from .errors import IndexOutOfRangeError

__all__ = ["SnapshotIterator"]

V = TypeVar("V")


class SnapshotIterator(Generic[V]):
    """Single-pass cursor over a private copy of key/value pairs.

    The cursor starts before the first entry; ``next`` must return ``True``
    before ``key``/``value`` can be read. After ``next`` returns ``False`` the
    cursor stays exhausted. Entries come out in no particular order.
    """

    def __init__(self, items: Iterable[Tuple[str, V]]) -> None:
        self._items: List[Tuple[str, V]] = list(items)
        self._index = -1

    def next(self) -> bool:
        if self._index < len(self._items):
            self._index += 1
        return self._index < len(self._items)

    def key(self) -> str:
        return self._current()[0]

    def value(self) -> V:
        return self._current()[1]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> "SnapshotIterator[V]":
        return self

    def __next__(self) -> Tuple[str, V]:
        if not self.next():
            raise StopIteration
        return self._current()

    def _current(self) -> Tuple[str, Any]:
        if self._index < 0 or self._index >= len(self._items):
            raise IndexOutOfRangeError()
        return self._items[self._index]
