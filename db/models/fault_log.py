"""Industrial IoT Monitor — Fault Log ORM Model.

Append-only record of detected machine faults.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from db.base import Base


class FaultLog(Base):
    """One detected fault on one machine.

    machine_id declares a foreign key but neither cascades nor restricts
    deletes, so rows may outlive the machine they reference.
    """
    __tablename__ = "fault_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    machine_id = Column(String(64), ForeignKey("machines.id"), nullable=True, index=True)
    fault_type = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())
