from .codec import BinaryCodec, Codec, JSONCodec, get_codec
from .errors import (
    CodecError,
    EmptyKeyError,
    IndexOutOfRangeError,
    KVError,
    NotFoundError,
    UnderlyingStoreError,
)
from .interfaces import DB, BinaryMarshaler, Iterable, Iterator, Table
from .iterator import SnapshotIterator
from .memdb import MemDB
from .rwlock import RWLock

__all__ = [
    "BinaryCodec",
    "BinaryMarshaler",
    "Codec",
    "CodecError",
    "DB",
    "EmptyKeyError",
    "IndexOutOfRangeError",
    "Iterable",
    "Iterator",
    "JSONCodec",
    "KVError",
    "MemDB",
    "NotFoundError",
    "RWLock",
    "SnapshotIterator",
    "Table",
    "UnderlyingStoreError",
    "get_codec",
]
