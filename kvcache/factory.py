"""Builds stores, TTL tables and prune schedulers from :mod:`kvcache.config`."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from kvcache.common import configure_json_logging
from kvcache.config import AppSettings, get_app_config
from kvcache.db import DB, MemDB, get_codec
from kvcache.rrdb import BoundedStore
from kvcache.ttl import PruneScheduler, TelemetryPublisher, TTLTable

logger = logging.getLogger(__name__)

__all__ = [
    "build_bounded_store",
    "build_database",
    "build_prune_scheduler",
    "build_ttl_table",
    "configure_logging",
    "open_ttl_table",
]


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    settings = settings or get_app_config()
    configure_json_logging(
        settings.logging.service_name,
        level=settings.logging.level,
        log_dir=settings.logging.log_dir,
    )


def build_bounded_store(settings: Optional[AppSettings] = None) -> BoundedStore:
    settings = settings or get_app_config()
    return BoundedStore(settings.bounded.capacity)


def build_database(settings: Optional[AppSettings] = None) -> MemDB:
    settings = settings or get_app_config()
    return MemDB(codec=get_codec(settings.store.codec))


def build_ttl_table(
    db: DB,
    settings: Optional[AppSettings] = None,
    *,
    name: Optional[str] = None,
    clock: Callable[[], int] = time.time_ns,
) -> TTLTable:
    settings = settings or get_app_config()
    ttl = settings.ttl
    return TTLTable(
        db,
        name or ttl.name,
        ttl.prune_interval_seconds,
        clock=clock,
        value_prefix=ttl.value_prefix,
    )


def build_prune_scheduler(
    table: TTLTable,
    publisher: Optional[TelemetryPublisher] = None,
) -> PruneScheduler:
    return PruneScheduler(table, publisher=publisher)


async def open_ttl_table(
    db: DB,
    settings: Optional[AppSettings] = None,
    *,
    name: Optional[str] = None,
    publisher: Optional[TelemetryPublisher] = None,
) -> tuple[TTLTable, Optional[PruneScheduler]]:
    """Build a TTL table and, when configured, start pruning it.

    The caller owns the returned scheduler and must ``await scheduler.stop()``
    before closing ``db``.
    """

    settings = settings or get_app_config()
    table = build_ttl_table(db, settings, name=name)
    if not settings.ttl.autostart_pruning:
        logger.info("Automatic pruning disabled", extra={"table": table.name})
        return table, None
    scheduler = build_prune_scheduler(table, publisher)
    await scheduler.start()
    return table, scheduler
