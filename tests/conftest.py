from __future__ import annotations

from typing import Any, Callable, List, Optional

import pytest

from kvcache.db import MemDB

SECOND = 1_000_000_000


class FakeClock:
    """Nanosecond clock that only moves when told to."""

    def __init__(self, start_ns: int) -> None:
        self.now = start_ns

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * SECOND)


class FlakyDB:
    """Wraps a MemDB and fails chosen operations on demand."""

    def __init__(self, inner: Optional[MemDB] = None) -> None:
        self.inner = inner or MemDB()
        self.fail_insert: Optional[Callable[[str], bool]] = None
        self.fail_get = False
        self.fail_iterator = False
        self.calls: List[tuple[str, str]] = []

    def insert(self, key: str, value: Any) -> None:
        self.calls.append(("insert", key))
        if self.fail_insert is not None and self.fail_insert(key):
            raise ConnectionError(f"store unavailable while writing {key}")
        self.inner.insert(key, value)

    def get(self, key: str, target: Any = bytes) -> Any:
        if self.fail_get:
            raise ConnectionError("store unavailable")
        return self.inner.get(key, target)

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        self.inner.delete(key)

    def size(self, prefix: str = "") -> int:
        return self.inner.size(prefix)

    def iterator(self, prefix: str = ""):
        if self.fail_iterator:
            raise ConnectionError("store unavailable")
        return self.inner.iterator(prefix)


@pytest.fixture()
def clock() -> FakeClock:
    # Aligned to a slot boundary for one-second intervals.
    return FakeClock(1_700_000_000 * SECOND)


@pytest.fixture()
def memdb() -> MemDB:
    return MemDB()


@pytest.fixture()
def flaky_db() -> FlakyDB:
    return FlakyDB()
