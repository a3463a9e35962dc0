"""Industrial IoT Monitor — Fault Injector.

Once per tick, with a fixed probability, picks one machine at random,
records a fault against it and forces its status to Fault. The draw is
per tick, not per machine, so at most one fault is injected per tick.
"""

from __future__ import annotations

import random

from sqlalchemy.ext.asyncio import AsyncSession

from logger import get_logger
from schemas.events import FaultAlert
from schemas.machine import MachineSummary
from services.fault_service import FaultLogService
from services.machine_service import MachineService

logger = get_logger(__name__)

FAULT_TYPES: tuple[str, ...] = (
    "Overheating",
    "High Vibration",
    "Thread Break",
    "Power Surge",
)

DEFAULT_FAULT_PROBABILITY = 0.02


def fault_description(fault_type: str) -> str:
    return f"Automatic detection of {fault_type}"


class FaultInjector:
    """Probabilistic fault source for the broadcast loop.

    Attributes:
        probability: Chance per tick that a fault is injected. A tick fires
            when a uniform [0, 1) draw exceeds ``1 - probability``.
        rng: Random source used for the roll and both selections.
    """

    def __init__(
        self,
        probability: float = DEFAULT_FAULT_PROBABILITY,
        rng: random.Random | None = None,
        fault_types: tuple[str, ...] = FAULT_TYPES,
    ):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {probability}")
        if not fault_types:
            raise ValueError("fault_types must not be empty")
        self.probability = probability
        self.threshold = 1.0 - probability
        self.rng = rng or random.Random()
        self.fault_types = fault_types
        self.logger = logger.bind(service="FaultInjector")

    def roll(self) -> bool:
        """Consume one draw and report whether this tick injects a fault."""
        return self.rng.random() > self.threshold

    def choose(self, machines: list[MachineSummary]) -> tuple[MachineSummary, str]:
        """Pick the target machine and the fault type, both uniformly."""
        machine = self.rng.choice(machines)
        fault_type = self.rng.choice(self.fault_types)
        return machine, fault_type

    async def maybe_inject(
        self,
        db: AsyncSession,
        machines: list[MachineSummary],
    ) -> FaultAlert | None:
        """Run this tick's injection step against ``machines``.

        The roll is always consumed, even for an empty snapshot, so the
        per-tick rate does not depend on fleet size.

        Returns:
            The alert to broadcast, or None when nothing was injected.

        Raises:
            SQLAlchemyError: If either write fails. The transaction is
                rolled back and nothing is broadcast.
        """
        if not self.roll():
            return None
        if not machines:
            self.logger.debug("Fault roll fired on empty fleet, skipping")
            return None

        machine, fault_type = self.choose(machines)
        return await self.inject(db, machine, fault_type)

    async def inject(self, db: AsyncSession, machine: MachineSummary, fault_type: str) -> FaultAlert:
        """Record ``fault_type`` on ``machine`` and flip it to Fault in one commit."""
        try:
            await FaultLogService(db).record(
                machine_id=machine.id,
                fault_type=fault_type,
                description=fault_description(fault_type),
            )
            await MachineService(db).mark_fault(machine.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        self.logger.info(
            "Fault injected",
            machine_id=machine.id,
            fault_type=fault_type,
            previous_status=machine.status,
        )
        return FaultAlert(machine_id=machine.id, machine_name=machine.name, fault_type=fault_type)
