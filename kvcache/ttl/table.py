from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from kvcache.db import DB, EmptyKeyError, Iterator, UnderlyingStoreError

from .index import (
    PRUNE_POINTER_KEY,
    Interval,
    TTLIndex,
    interval_to_ns,
)
from .pointer import Pointer, PrunePointer

logger = logging.getLogger("kvcache.ttl")

__all__ = ["SweepReport", "TTLTable"]

_MARKER = b""


@dataclass(frozen=True)
class SweepReport:
    start: int
    cutoff: int
    pointer: int
    slots: int
    removed: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "start": self.start,
            "cutoff": self.cutoff,
            "pointer": self.pointer,
            "slots": self.slots,
            "removed": self.removed,
        }


class TTLTable:
    """Adds expiry to any generic keyed store.

    Every ``insert`` writes the value and then a marker keyed by the time slot
    of the insert. :meth:`prune` walks the slots between the persisted prune
    pointer and ``slot(now - interval)`` and deletes every value/marker pair it
    finds, so a sweep costs as much as the entries expiring in that window,
    not the size of the table. A slot becomes eligible once it has fully
    elapsed, so an entry survives at least until the end of its insert slot
    and is gone after the first sweep that follows.

    The two writes of ``insert`` are independent and not rolled back. If the
    marker write fails the value stays without a marker and never expires;
    racing ``delete``/``prune`` calls can leave a marker whose value is gone,
    which the sweep treats as a no-op. The table adds no locking of its own.

    Pruning does not start by itself: pass the table to
    :class:`~kvcache.ttl.PruneScheduler` or call :meth:`prune` directly.
    """

    def __init__(
        self,
        db: DB,
        name: str,
        prune_interval: Interval,
        *,
        clock: Callable[[], int] = time.time_ns,
        value_prefix: Optional[str] = None,
    ) -> None:
        self._db = db
        self._clock = clock
        self.index = TTLIndex(
            name, interval_to_ns(prune_interval), value_prefix=value_prefix
        )
        self._pointer = PrunePointer(db, self.index, clock)
        try:
            self._pointer.load()
        except Exception as exc:
            raise UnderlyingStoreError("load prune pointer") from exc

    @property
    def name(self) -> str:
        return self.index.name

    @property
    def prune_interval_seconds(self) -> float:
        return self.index.interval_ns / 1_000_000_000

    def insert(self, key: str, value: Any) -> None:
        if not key:
            raise EmptyKeyError()
        try:
            self._db.insert(self.index.value_key(key), value)
        except Exception as exc:
            raise UnderlyingStoreError("insert value", key) from exc

        slot = self.index.slot(self._clock())
        try:
            self._db.insert(self.index.slot_key(key, slot), _MARKER)
        except Exception as exc:
            raise UnderlyingStoreError("insert slot marker", key) from exc

    def get(self, key: str, target: Any = bytes) -> Any:
        if not key:
            raise EmptyKeyError()
        return self._db.get(self.index.value_key(key), target)

    def delete(self, key: str) -> None:
        """Delete the value only; its marker goes away with the next sweep."""

        if not key:
            raise EmptyKeyError()
        self._db.delete(self.index.value_key(key))

    def size(self) -> int:
        return self._db.size(self.index.value_prefix)

    def iterator(self) -> Iterator:
        return self._db.iterator(self.index.value_prefix)

    def prune_pointer(self) -> Pointer:
        return self._pointer.load()

    def prune(self, pointer: Optional[int] = None) -> SweepReport:
        """Delete everything registered in slots ``(pointer, cutoff]``.

        ``pointer`` defaults to the persisted one. The new pointer is written
        once every slot in the window is swept; a failure part-way leaves it
        where it was, so the next sweep repeats the window and the deletes it
        already did become no-ops.
        """

        start = int(self._pointer.load() if pointer is None else pointer)
        cutoff = self.index.slot(self._clock() - self.index.interval_ns)

        removed = 0
        for slot in range(start + 1, cutoff + 1):
            removed += self._sweep_slot(slot)

        new_pointer = self._pointer.store(cutoff)
        report = SweepReport(
            start=start,
            cutoff=cutoff,
            pointer=int(new_pointer),
            slots=max(0, cutoff - start),
            removed=removed,
        )
        if removed:
            logger.debug(
                "Pruned expired entries",
                extra={"table": self.name, **report.to_dict()},
            )
        return report

    def _sweep_slot(self, slot: int) -> int:
        removed = 0
        markers = self._db.iterator(self.index.slot_prefix(slot))
        while markers.next():
            key = markers.key()
            if slot == 0 and key == PRUNE_POINTER_KEY:
                continue
            self._db.delete(self.index.value_key(key))
            self._db.delete(self.index.slot_key(key, slot))
            removed += 1
        return removed
