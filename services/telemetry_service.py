"""Industrial IoT Monitor — Telemetry Service.

Synthesizes sensor readings from a machine's current status. There is no
real sensor input: every value is drawn uniformly from a fixed range, and
the range set depends only on whether the machine is in Fault.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from db.models import STATUS_FAULT
from schemas.events import SensorReading
from schemas.machine import MachineSummary


@dataclass(frozen=True)
class SensorRange:
    """Half-open interval [low, high) a sensor value is drawn from."""
    low: float
    high: float

    def sample(self, rng: random.Random) -> float:
        return self.low + rng.random() * (self.high - self.low)

    def __contains__(self, value: float) -> bool:
        return self.low <= value < self.high


@dataclass(frozen=True)
class SensorProfile:
    """One range per reported sensor."""
    temperature: SensorRange
    vibration: SensorRange
    rpm: SensorRange
    power: SensorRange
    tension: SensorRange


NORMAL_PROFILE = SensorProfile(
    temperature=SensorRange(40.0, 55.0),
    vibration=SensorRange(0.1, 0.3),
    rpm=SensorRange(1200.0, 1300.0),
    power=SensorRange(1.2, 1.5),
    tension=SensorRange(15.0, 20.0),
)

FAULT_PROFILE = SensorProfile(
    temperature=SensorRange(85.0, 105.0),
    vibration=SensorRange(0.8, 1.3),
    rpm=SensorRange(500.0, 700.0),
    power=SensorRange(2.5, 4.0),
    tension=SensorRange(2.0, 10.0),
)


def profile_for_status(status: str) -> SensorProfile:
    """Fault machines read in the fault regime; every other status reads normal."""
    return FAULT_PROFILE if status == STATUS_FAULT else NORMAL_PROFILE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TelemetryService:
    """Generates one synthetic reading per machine per call.

    Holds no state between readings; the random source and clock are
    injectable so tests can pin both.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.rng = rng or random.Random()
        self.clock = clock

    def generate_reading(self, machine: MachineSummary) -> SensorReading:
        """Draw a fresh reading for ``machine`` from its status regime."""
        profile = profile_for_status(machine.status)
        return SensorReading(
            machine_id=machine.id,
            name=machine.name,
            temperature=profile.temperature.sample(self.rng),
            vibration=profile.vibration.sample(self.rng),
            rpm=profile.rpm.sample(self.rng),
            power=profile.power.sample(self.rng),
            tension=profile.tension.sample(self.rng),
            timestamp=self.clock(),
        )

    def generate_readings(self, machines: list[MachineSummary]) -> list[SensorReading]:
        """One reading per machine, in the order given."""
        return [self.generate_reading(machine) for machine in machines]
