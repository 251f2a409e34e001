from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from kvcache.db import EmptyKeyError, NotFoundError, RWLock, SnapshotIterator

logger = logging.getLogger("kvcache.rrdb")

__all__ = ["BoundedStore"]


class BoundedStore:
    """Fixed-capacity in-memory store using random replacement.

    When a new key arrives and the store is full, one existing entry picked
    uniformly at random is evicted first. There is no recency or insertion
    order involved: this is not an LRU and not a FIFO, callers must treat the
    victim as "some entry". Overwriting a key that is already present never
    evicts anything.

    All state sits behind a single :class:`~kvcache.db.RWLock`; ``insert`` and
    ``delete`` take it exclusively, ``get``, ``size`` and ``iterator`` share it.
    """

    def __init__(self, capacity: int, *, rng: Optional[random.Random] = None) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = int(capacity)
        self._rng = rng or random.Random()
        self._lock = RWLock()
        self._data: Dict[str, bytes] = {}
        # Keys in a dense list so a victim can be drawn in O(1).
        self._keys: List[str] = []
        self._positions: Dict[str, int] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    def insert(self, key: str, value: bytes) -> None:
        if not key:
            raise EmptyKeyError()
        with self._lock.write():
            if key not in self._data:
                if len(self._data) >= self._capacity:
                    victim = self._keys[self._rng.randrange(len(self._keys))]
                    self._remove(victim)
                    logger.debug("Evicted %r to make room for %r", victim, key)
                self._positions[key] = len(self._keys)
                self._keys.append(key)
            self._data[key] = value

    def get(self, key: str) -> bytes:
        with self._lock.read():
            try:
                return self._data[key]
            except KeyError:
                raise NotFoundError(key) from None

    def delete(self, key: str) -> None:
        with self._lock.write():
            if key in self._data:
                self._remove(key)

    def size(self) -> int:
        with self._lock.read():
            return len(self._data)

    def iterator(self) -> SnapshotIterator[bytes]:
        with self._lock.read():
            return SnapshotIterator(list(self._data.items()))

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return key in self._data

    def _remove(self, key: str) -> None:
        del self._data[key]
        index = self._positions.pop(key)
        last = self._keys.pop()
        if last != key:
            self._keys[index] = last
            self._positions[last] = index
