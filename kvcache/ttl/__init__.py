from .index import DEFAULT_VALUE_PREFIX, PRUNE_POINTER_KEY, TTLIndex, slot_number
from .pointer import Pointer, PrunePointer
from .scheduler import PruneScheduler, TelemetryPublisher
from .table import SweepReport, TTLTable

__all__ = [
    "DEFAULT_VALUE_PREFIX",
    "PRUNE_POINTER_KEY",
    "Pointer",
    "PruneScheduler",
    "PrunePointer",
    "SweepReport",
    "TTLIndex",
    "TTLTable",
    "TelemetryPublisher",
    "slot_number",
]
