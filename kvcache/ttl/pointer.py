from __future__ import annotations

import logging
import struct
from typing import Callable

from kvcache.db import DB, NotFoundError

from .index import TTLIndex

logger = logging.getLogger("kvcache.ttl")

__all__ = ["Pointer", "PrunePointer"]

_POINTER_FORMAT = struct.Struct("<q")


class Pointer(int):
    """Slot number stored as a signed 64-bit little-endian integer."""

    def marshal_binary(self) -> bytes:
        return _POINTER_FORMAT.pack(int(self))

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> "Pointer":
        if len(data) != _POINTER_FORMAT.size:
            raise ValueError(
                f"pointer payload must be {_POINTER_FORMAT.size} bytes, got {len(data)}"
            )
        (value,) = _POINTER_FORMAT.unpack(data)
        return cls(value)


class PrunePointer:
    """Highest slot whose members are known to be deleted.

    The value lives in the same store as the table so it survives restarts.
    A table seen for the first time starts at ``slot(now) - 1``: nothing is
    considered overdue at creation time.
    """

    def __init__(self, db: DB, index: TTLIndex, clock: Callable[[], int]) -> None:
        self._db = db
        self._index = index
        self._clock = clock

    def load(self) -> Pointer:
        try:
            return Pointer(self._db.get(self._index.pointer_key, Pointer))
        except NotFoundError:
            pointer = Pointer(self._index.slot(self._clock()) - 1)
            self._db.insert(self._index.pointer_key, pointer)
            logger.info(
                "Initialised prune pointer",
                extra={"table": self._index.name, "pointer": int(pointer)},
            )
            return pointer

    def store(self, value: int) -> Pointer:
        """Persist ``value`` unless it would move the pointer backwards."""

        current = self.load()
        pointer = Pointer(max(int(current), int(value)))
        self._db.insert(self._index.pointer_key, pointer)
        return pointer
