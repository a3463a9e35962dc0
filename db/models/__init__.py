"""Industrial IoT Monitor — ORM models."""

from db.models.fault_log import FaultLog
from db.models.machine import (
    STATUS_ACTIVE,
    STATUS_FAULT,
    STATUS_UNDER_MAINTENANCE,
    Machine,
)

__all__ = [
    "FaultLog",
    "Machine",
    "STATUS_ACTIVE",
    "STATUS_FAULT",
    "STATUS_UNDER_MAINTENANCE",
]
