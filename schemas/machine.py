"""Industrial IoT Monitor — Machine Schemas.

Pydantic models for Machine API requests and responses.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MachineStatus(str, Enum):
    """Operational status of a machine."""
    ACTIVE = "Active"
    FAULT = "Fault"
    UNDER_MAINTENANCE = "Under Maintenance"


class MachineFields(BaseModel):
    """Editable properties shared by create, update and read models."""
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100)
    serial_number: str = Field(..., min_length=1, max_length=100)
    purchase_date: Optional[str] = None
    purchase_cost: Optional[float] = Field(None, ge=0)
    warranty_expiry: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_contact: Optional[str] = None
    company_name: Optional[str] = None
    company_address: Optional[str] = None
    installation_date: Optional[str] = None
    location: Optional[str] = None
    maintenance_schedule: Optional[str] = None
    service_history: Optional[str] = None


class MachineCreate(MachineFields):
    """Payload for registering a new machine."""
    id: str = Field(..., min_length=1, max_length=64)
    status: MachineStatus = MachineStatus.ACTIVE


class MachineUpdate(MachineFields):
    """Payload for replacing a machine's editable fields.

    The id comes from the path and is never changed.
    """
    model_config = ConfigDict(extra="ignore")

    status: MachineStatus


class Machine(MachineFields):
    """Full Machine resource response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: str


class MachineSummary(BaseModel):
    """The subset of a machine the broadcast loop works from."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    status: str
