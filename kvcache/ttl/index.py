from __future__ import annotations

import hashlib
from datetime import timedelta
from typing import Optional, Union

__all__ = [
    "DEFAULT_VALUE_PREFIX",
    "PRUNE_POINTER_KEY",
    "TTLIndex",
    "interval_to_ns",
    "slot_number",
]

DEFAULT_VALUE_PREFIX = "ttlDataTable_"
# Logical key under which the prune pointer lives, at slot 0.
PRUNE_POINTER_KEY = "prunePointer"

Interval = Union[int, float, timedelta]


def slot_number(timestamp_ns: int, interval_ns: int) -> int:
    """Return the bucket a nanosecond timestamp falls into."""

    if interval_ns <= 0:
        raise ValueError(f"interval must be positive, got {interval_ns}ns")
    return int(timestamp_ns) // int(interval_ns)


def interval_to_ns(interval: Interval) -> int:
    """Convert seconds (or a timedelta) into whole nanoseconds."""

    if isinstance(interval, timedelta):
        nanos = (
            interval.days * 86_400_000_000_000
            + interval.seconds * 1_000_000_000
            + interval.microseconds * 1_000
        )
    else:
        nanos = int(round(float(interval) * 1_000_000_000))
    if nanos <= 0:
        raise ValueError(f"prune interval must be positive, got {interval!r}")
    return nanos


class TTLIndex:
    """Derives the physical keys a TTL table writes into its store.

    * value key: ``value_prefix + key``, by default ``ttlDataTable_{name_hash}_{key}``
    * slot marker: ``{name_hash}_slot{slot}_{key}``
    * prune pointer: the slot marker of ``prunePointer`` at slot 0
    """

    def __init__(
        self,
        name: str,
        interval_ns: int,
        *,
        value_prefix: Optional[str] = None,
    ) -> None:
        if interval_ns <= 0:
            raise ValueError(f"interval must be positive, got {interval_ns}ns")
        self.name = name
        self.interval_ns = int(interval_ns)
        self.name_hash = hashlib.sha3_256(name.encode("utf-8")).hexdigest()
        if value_prefix is None:
            value_prefix = f"{DEFAULT_VALUE_PREFIX}{self.name_hash}_"
        self.value_prefix = value_prefix

    def slot(self, timestamp_ns: int) -> int:
        return slot_number(timestamp_ns, self.interval_ns)

    def value_key(self, key: str) -> str:
        return f"{self.value_prefix}{key}"

    def slot_prefix(self, slot: int) -> str:
        return f"{self.name_hash}_slot{slot}_"

    def slot_key(self, key: str, slot: int) -> str:
        return f"{self.slot_prefix(slot)}{key}"

    @property
    def pointer_key(self) -> str:
        return self.slot_key(PRUNE_POINTER_KEY, 0)
