"""Industrial IoT Monitor — Fault Log Schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FaultLog(BaseModel):
    """One fault log entry as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    machine_id: Optional[str]
    fault_type: Optional[str]
    description: Optional[str]
    timestamp: datetime
