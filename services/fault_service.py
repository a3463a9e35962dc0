"""Industrial IoT Monitor — Fault Log Service.

Append-only access to the fault log.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import FaultLog
from logger import get_logger

logger = get_logger(__name__)

RECENT_FAULTS_LIMIT = 50


class FaultLogService:
    """Service for reading and appending fault log entries."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logger.bind(service="FaultLogService")

    async def get_recent(self, limit: int = RECENT_FAULTS_LIMIT) -> list[FaultLog]:
        """Most recent entries, newest first."""
        result = await self.db.execute(
            select(FaultLog)
            .order_by(FaultLog.timestamp.desc(), FaultLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def record(self, machine_id: str, fault_type: str, description: str) -> FaultLog:
        """Append one entry and flush it so its id is assigned.

        Does not commit; the caller owns the transaction.
        """
        entry = FaultLog(machine_id=machine_id, fault_type=fault_type, description=description)
        self.db.add(entry)
        await self.db.flush()
        self.logger.debug("Fault log entry staged", fault_id=entry.id, machine_id=machine_id)
        return entry
