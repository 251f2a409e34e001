from __future__ import annotations

from typing import Optional

__all__ = [
    "KVError",
    "EmptyKeyError",
    "NotFoundError",
    "IndexOutOfRangeError",
    "UnderlyingStoreError",
    "CodecError",
]


class KVError(Exception):
    """Base class for every error raised by kvcache tables and stores."""


class EmptyKeyError(KVError, ValueError):
    def __init__(self) -> None:
        super().__init__("key cannot be empty")


class NotFoundError(KVError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not found: {self.key!r}"


class IndexOutOfRangeError(KVError, IndexError):
    def __init__(self) -> None:
        super().__init__("iterator is not positioned on an entry")


class UnderlyingStoreError(KVError):
    """Wraps a failure of the decorated store.

    ``operation`` names the logical step that failed, e.g. ``"insert value"``
    or ``"insert slot marker"``. The original exception is chained as
    ``__cause__``.
    """

    def __init__(self, operation: str, key: Optional[str] = None) -> None:
        self.operation = operation
        self.key = key
        detail = f"{operation} failed"
        if key is not None:
            detail = f"{detail} for key {key!r}"
        super().__init__(detail)


class CodecError(KVError, ValueError):
    pass
