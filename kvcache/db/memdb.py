from __future__ import annotations

from typing import Any, Dict, Optional

from .codec import BinaryCodec, Codec
from .errors import EmptyKeyError, NotFoundError
from .iterator import SnapshotIterator
from .rwlock import RWLock

__all__ = ["MemDB"]


class MemDB:
    """In-memory implementation of the generic keyed-store contract.

    Values are encoded with ``codec`` on the way in and decoded into the
    requested type on the way out; iterators hand back the encoded payloads.
    Nothing is written to disk, so whatever lives here disappears with the
    process.
    """

    def __init__(self, codec: Optional[Codec] = None) -> None:
        self.codec: Codec = codec or BinaryCodec()
        self._lock = RWLock()
        self._data: Dict[str, bytes] = {}

    def insert(self, key: str, value: Any) -> None:
        if not key:
            raise EmptyKeyError()
        data = self.codec.encode(value)
        with self._lock.write():
            self._data[key] = data

    def get(self, key: str, target: Any = bytes) -> Any:
        if not key:
            raise EmptyKeyError()
        with self._lock.read():
            data = self._data.get(key)
        if data is None:
            raise NotFoundError(key)
        return self.codec.decode(data, target)

    def delete(self, key: str) -> None:
        if not key:
            raise EmptyKeyError()
        with self._lock.write():
            self._data.pop(key, None)

    def size(self, prefix: str = "") -> int:
        with self._lock.read():
            return sum(1 for key in self._data if key.startswith(prefix))

    def iterator(self, prefix: str = "") -> SnapshotIterator[bytes]:
        offset = len(prefix)
        with self._lock.read():
            items = [
                (key[offset:], value)
                for key, value in self._data.items()
                if key.startswith(prefix)
            ]
        return SnapshotIterator(items)
