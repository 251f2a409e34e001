"""Random-replacement and TTL key/value tables."""

from kvcache.db import (
    EmptyKeyError,
    IndexOutOfRangeError,
    KVError,
    MemDB,
    NotFoundError,
    UnderlyingStoreError,
)
from kvcache.rrdb import BoundedStore
from kvcache.ttl import PruneScheduler, TTLTable

__version__ = "0.1.0"

__all__ = [
    "BoundedStore",
    "EmptyKeyError",
    "IndexOutOfRangeError",
    "KVError",
    "MemDB",
    "NotFoundError",
    "PruneScheduler",
    "TTLTable",
    "UnderlyingStoreError",
]
