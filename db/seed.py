"""Industrial IoT Monitor — Default Fleet Seed.

Inserts the demonstration fleet on first start. Seeding is insert-if-absent:
rows that already exist are left untouched, so operator edits survive a
restart.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Machine
from logger import get_logger

logger = get_logger(__name__)

SEED_MACHINES: list[dict[str, Any]] = [
    {"id": "M001", "name": "Braider Alpha", "type": "Braiding Machine", "serial_number": "SN-9921-A",
     "purchase_date": "2023-05-12", "purchase_cost": 45000, "status": "Active", "location": "Floor A - Section 1"},
    {"id": "M002", "name": "Winder Pro", "type": "Winding Machine", "serial_number": "SN-8812-B",
     "purchase_date": "2023-08-20", "purchase_cost": 12000, "status": "Active", "location": "Floor B - Section 2"},
    {"id": "M003", "name": "Twister X", "type": "Twisting Machine", "serial_number": "SN-7734-C",
     "purchase_date": "2024-01-15", "purchase_cost": 28000, "status": "Fault", "location": "Floor A - Section 3"},
    {"id": "M004", "name": "Spooler Max", "type": "Spooling Machine", "serial_number": "SN-6645-D",
     "purchase_date": "2023-11-05", "purchase_cost": 8500, "status": "Active", "location": "Floor B - Section 1"},
    {"id": "M005", "name": "Cutter X1", "type": "Cutting Machine", "serial_number": "SN-5556-E",
     "purchase_date": "2024-02-10", "purchase_cost": 15000, "status": "Active", "location": "Floor C - Section 1"},
    {"id": "M006", "name": "Inspector 5000", "type": "Quality Inspection Unit", "serial_number": "SN-4467-F",
     "purchase_date": "2024-03-01", "purchase_cost": 35000, "status": "Active", "location": "Floor C - Section 2"},
    {"id": "M007", "name": "Braider Beta", "type": "Braiding Machine", "serial_number": "SN-9922-G",
     "purchase_date": "2023-06-15", "purchase_cost": 46000, "status": "Active", "location": "Floor A - Section 2"},
    {"id": "M008", "name": "Winder Lite", "type": "Winding Machine", "serial_number": "SN-8813-H",
     "purchase_date": "2023-09-10", "purchase_cost": 11000, "status": "Under Maintenance", "location": "Floor B - Section 3"},
    {"id": "M009", "name": "Twister Pro", "type": "Twisting Machine", "serial_number": "SN-7735-I",
     "purchase_date": "2024-01-20", "purchase_cost": 29000, "status": "Active", "location": "Floor A - Section 4"},
    {"id": "M010", "name": "Spooler Mini", "type": "Spooling Machine", "serial_number": "SN-6646-J",
     "purchase_date": "2023-12-01", "purchase_cost": 7500, "status": "Active", "location": "Floor B - Section 4"},
    {"id": "M011", "name": "Cutter Pro", "type": "Cutting Machine", "serial_number": "SN-5557-K",
     "purchase_date": "2024-02-15", "purchase_cost": 16000, "status": "Active", "location": "Floor C - Section 3"},
    {"id": "M012", "name": "Inspector Pro", "type": "Quality Inspection Unit", "serial_number": "SN-4468-L",
     "purchase_date": "2024-03-05", "purchase_cost": 36000, "status": "Active", "location": "Floor C - Section 4"},
]


async def seed_machines(session: AsyncSession, machines: list[dict[str, Any]] | None = None) -> int:
    """Insert any seed machine whose id is not already present.

    Args:
        session: Open database session. Committed on return.
        machines: Rows to seed; defaults to SEED_MACHINES.

    Returns:
        Number of machines inserted.
    """
    rows = SEED_MACHINES if machines is None else machines
    result = await session.execute(select(Machine.id))
    existing = set(result.scalars().all())

    inserted = 0
    for row in rows:
        if row["id"] in existing:
            continue
        session.add(Machine(**row))
        inserted += 1

    await session.commit()
    logger.info("Seeded machine fleet", inserted=inserted, skipped=len(rows) - inserted)
    return inserted
