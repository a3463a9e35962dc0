"""Industrial IoT Monitor — Machine ORM Model.

Defines the Machine entity: one physical asset on the shop floor.
"""

from __future__ import annotations

from sqlalchemy import Column, Float, String, Text

from db.base import Base

STATUS_ACTIVE = "Active"
STATUS_FAULT = "Fault"
STATUS_UNDER_MAINTENANCE = "Under Maintenance"


class Machine(Base):
    """Machine entity representing a physical asset."""
    __tablename__ = "machines"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False)  # e.g., 'Braiding Machine'
    serial_number = Column(String(100), nullable=False)

    # Procurement
    purchase_date = Column(String(32), nullable=True)
    purchase_cost = Column(Float, nullable=True)
    warranty_expiry = Column(String(32), nullable=True)
    supplier_name = Column(String(255), nullable=True)
    supplier_contact = Column(String(255), nullable=True)

    # Ownership and placement
    company_name = Column(String(255), nullable=True)
    company_address = Column(Text, nullable=True)
    installation_date = Column(String(32), nullable=True)
    location = Column(String(255), nullable=True)

    # Upkeep
    maintenance_schedule = Column(Text, nullable=True)
    service_history = Column(Text, nullable=True)

    status = Column(String(32), nullable=False, default=STATUS_ACTIVE, server_default=STATUS_ACTIVE)

    def __repr__(self) -> str:
        return f"<Machine {self.id} {self.name!r} status={self.status!r}>"
