"""Contracts shared by the stores and tables in this package."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Iterator(Protocol):
    """Single-pass cursor over key/value pairs.

    ``next`` must be called before the first ``key``/``value`` access; both
    raise :class:`~kvcache.db.errors.IndexOutOfRangeError` when the cursor is
    not positioned on an entry.
    """

    def next(self) -> bool: ...

    def key(self) -> str: ...

    def value(self) -> Any: ...


@runtime_checkable
class Iterable(Protocol):
    """Byte-valued associative store, e.g. :class:`kvcache.rrdb.BoundedStore`."""

    def insert(self, key: str, value: bytes) -> None: ...

    def get(self, key: str) -> bytes: ...

    def delete(self, key: str) -> None: ...

    def size(self) -> int: ...

    def iterator(self) -> Iterator: ...


@runtime_checkable
class DB(Protocol):
    """Generic keyed store whose operations can be scoped by key prefix.

    Values go through the store's codec, so ``get`` takes the type to decode
    into. Iterators yield keys with ``prefix`` stripped.
    """

    def insert(self, key: str, value: Any) -> None: ...

    def get(self, key: str, target: Any = bytes) -> Any: ...

    def delete(self, key: str) -> None: ...

    def size(self, prefix: str) -> int: ...

    def iterator(self, prefix: str) -> Iterator: ...


@runtime_checkable
class Table(Protocol):
    """A :class:`DB` view already scoped to one namespace."""

    def insert(self, key: str, value: Any) -> None: ...

    def get(self, key: str, target: Any = bytes) -> Any: ...

    def delete(self, key: str) -> None: ...

    def size(self) -> int: ...

    def iterator(self) -> Iterator: ...


@runtime_checkable
class BinaryMarshaler(Protocol):
    def marshal_binary(self) -> bytes: ...


__all__ = ["Iterator", "Iterable", "DB", "Table", "BinaryMarshaler"]
