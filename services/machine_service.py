"""Industrial IoT Monitor — Machine Service.

Encapsulates the Machine record operations used by the Record API and the
two store operations the broadcast loop depends on: the per-tick snapshot
and the status flip on fault.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import STATUS_FAULT, Machine
from schemas.machine import MachineCreate, MachineSummary, MachineUpdate
from services.base import BaseService


class MachineService(BaseService[Machine, MachineCreate, MachineUpdate]):
    """Service for the Machine lifecycle.

    Creation, full-record replacement and deletion come from BaseService;
    this class adds the lightweight fleet snapshot and the fault transition.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Machine, db)

    async def list_summaries(self) -> list[MachineSummary]:
        """Read id, name and status of every machine in storage order.

        One read, not transactional with anything done afterwards.
        """
        result = await self.db.execute(select(Machine.id, Machine.name, Machine.status))
        return [
            MachineSummary(id=row.id, name=row.name, status=row.status)
            for row in result.all()
        ]

    async def replace(self, machine_id: str, obj_in: MachineUpdate) -> Machine:
        """Overwrite every editable field of an existing machine."""
        machine = await self.get_or_404(machine_id)
        return await self.update(db_obj=machine, obj_in=obj_in)

    async def mark_fault(self, machine_id: str) -> None:
        """Set a machine's status to Fault whatever it was before.

        Does not commit; the caller owns the transaction.
        """
        await self.db.execute(
            update(Machine)
            .where(Machine.id == machine_id)
            .values(status=STATUS_FAULT)
        )
