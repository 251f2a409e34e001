from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Optional, Protocol, Type

from .table import SweepReport, TTLTable

logger = logging.getLogger("kvcache.ttl.scheduler")

__all__ = ["PruneScheduler", "TelemetryPublisher"]


class TelemetryPublisher(Protocol):
    async def publish(self, event_type: str, payload: dict[str, object]) -> None: ...


class PruneScheduler:
    """Sweeps a :class:`TTLTable` on a fixed interval until stopped.

    One task per scheduler. Each tick waits the full interval, then runs one
    sweep in the default executor and waits again, so a sweep slower than the
    interval pushes the next tick back instead of queueing ticks up.

    A failed sweep is logged and the loop carries on: every tick starts again
    from the persisted pointer. :meth:`stop` must be called (or the scheduler
    used as ``async with``) to end the loop; a sweep already running is left
    to finish.
    """

    def __init__(
        self,
        table: TTLTable,
        *,
        interval_seconds: Optional[float] = None,
        publisher: Optional[TelemetryPublisher] = None,
    ) -> None:
        interval = (
            table.prune_interval_seconds
            if interval_seconds is None
            else float(interval_seconds)
        )
        if interval <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval}")
        self._table = table
        self._interval = interval
        self._publisher = publisher
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None
        self._lock = asyncio.Lock()
        self._failures = 0
        self._sweeps = 0
        self.last_report: Optional[SweepReport] = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def sweeps(self) -> int:
        return self._sweeps

    async def start(self) -> None:
        async with self._lock:
            if self._task is not None:
                return
            self._stop_event = asyncio.Event()
            self._task = asyncio.create_task(
                self._runner(self._stop_event), name=f"ttl-prune-{self._table.name}"
            )
            logger.info(
                "Prune scheduler started",
                extra={"table": self._table.name, "interval_seconds": self._interval},
            )

    async def stop(self) -> None:
        # Held until the runner has exited: one runner per table at a time.
        async with self._lock:
            task = self._task
            if task is None:
                return
            if self._stop_event is not None:
                self._stop_event.set()
            try:
                await task
            finally:
                self._task = None
                self._stop_event = None
        logger.info("Prune scheduler stopped", extra={"table": self._table.name})

    async def run_once(self) -> Optional[SweepReport]:
        """Run a single sweep; failures are logged and reported as ``None``."""

        loop = asyncio.get_running_loop()
        try:
            report = await loop.run_in_executor(None, self._table.prune)
        except Exception:
            self._failures += 1
            logger.exception(
                "Prune sweep failed; retrying on next tick",
                extra={"table": self._table.name, "failures": self._failures},
            )
            return None
        self._sweeps += 1
        self.last_report = report
        await self._publish(report)
        return report

    async def __aenter__(self) -> "PruneScheduler":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.stop()

    async def _runner(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                await self.run_once()

    async def _publish(self, report: SweepReport) -> None:
        if self._publisher is None:
            return
        payload: dict[str, object] = {"table": self._table.name, **report.to_dict()}
        try:
            await self._publisher.publish("ttl.prune", payload)
        except Exception as exc:  # pragma: no cover - external failure
            logger.debug("Error publishing prune report: %s", exc)
