"""Industrial IoT Monitor — Broadcast Loop.

The process-wide periodic driver. Every tick it:

    1. snapshots every machine (id, name, status) from the store,
    2. generates one sensor reading per machine, in snapshot order,
    3. pushes a SENSOR_UPDATE to every open subscriber,
    4. runs the fault injector on the same snapshot and, if it fires,
       pushes a FAULT_ALERT as a second, independent message.

Ticks run on the event loop as one asyncio task. The tick body holds a lock
and a tick requested while another is in flight is skipped, so ticks never
overlap; an overrunning tick delays the next one instead.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from logger import get_logger
from schemas.events import (
    FaultAlert,
    FaultAlertEvent,
    SensorReading,
    SensorUpdateEvent,
    encode_event,
)
from services.fault_injector import FaultInjector
from services.machine_service import MachineService
from services.subscriber_registry import SubscriberRegistry
from services.telemetry_service import TelemetryService

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]

DEFAULT_INTERVAL_SECONDS = 2.0


@dataclass
class TickResult:
    """What one tick produced and how widely it was delivered."""
    readings: list[SensorReading]
    alert: FaultAlert | None = None
    update_deliveries: int = 0
    alert_deliveries: int = 0


@dataclass
class LoopStats:
    """Counters surfaced on the health endpoint."""
    ticks: int = 0
    failed_ticks: int = 0
    skipped_ticks: int = 0
    faults_injected: int = 0
    last_tick_at: datetime | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "ticks": self.ticks,
            "failed_ticks": self.failed_ticks,
            "skipped_ticks": self.skipped_ticks,
            "faults_injected": self.faults_injected,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
        }


class BroadcastLoop:
    """Fixed-interval simulation and fan-out driver.

    Args:
        registry: Subscribers to push events to.
        session_factory: Returns an async context manager yielding a session;
            one session is opened per tick.
        telemetry: Reading generator.
        injector: Per-tick fault source.
        interval_seconds: Spacing between tick starts.
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        session_factory: SessionFactory,
        telemetry: TelemetryService | None = None,
        injector: FaultInjector | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.registry = registry
        self.session_factory = session_factory
        self.telemetry = telemetry or TelemetryService()
        self.injector = injector or FaultInjector()
        self.interval_seconds = interval_seconds
        self.stats = LoopStats()
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self.logger = logger.bind(service="BroadcastLoop")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # -------------------------------------------------------------------------
    # Tick body
    # -------------------------------------------------------------------------

    async def tick(self) -> TickResult | None:
        """Run one tick now.

        Returns:
            The tick's result, or None if another tick was still running.

        Raises:
            Exception: Whatever the store raised. The sensor update is
                already delivered if the failure came from fault injection.
        """
        if self._lock.locked():
            self.stats.skipped_ticks += 1
            self.logger.warning("Tick skipped, previous tick still running")
            return None

        async with self._lock:
            try:
                result = await self._run_tick()
            except Exception:
                self.stats.failed_ticks += 1
                raise

        self.stats.ticks += 1
        self.stats.last_tick_at = datetime.now(timezone.utc)
        if result.alert is not None:
            self.stats.faults_injected += 1
        return result

    async def _run_tick(self) -> TickResult:
        async with self.session_factory() as db:
            machines = await MachineService(db).list_summaries()

            readings = self.telemetry.generate_readings(machines)
            result = TickResult(readings=readings)
            result.update_deliveries = await self.registry.broadcast(
                encode_event(SensorUpdateEvent(data=readings))
            )

            alert = await self.injector.maybe_inject(db, machines)
            if alert is not None:
                result.alert = alert
                result.alert_deliveries = await self.registry.broadcast(
                    encode_event(FaultAlertEvent(data=alert))
                )

        self.logger.debug(
            "Tick complete",
            machines=len(machines),
            subscribers=result.update_deliveries,
            fault=alert.fault_type if alert else None,
        )
        return result

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    async def _run_forever(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval_seconds
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            try:
                await self.tick()
            except Exception:
                self.logger.exception("Tick failed")
            next_at += self.interval_seconds
            now = loop.time()
            if next_at < now:
                next_at = now

    def start(self) -> None:
        """Schedule the loop on the running event loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run_forever(), name="broadcast-loop")
        self.logger.info("Broadcast loop started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self.logger.info("Broadcast loop stopped", **self.stats.as_dict())
