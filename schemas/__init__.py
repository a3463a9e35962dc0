"""Industrial IoT Monitor — Pydantic Schemas.

Request/response models for the Record API and event models for the
push channel.
"""

from .events import (
    FaultAlert,
    FaultAlertEvent,
    PushEvent,
    SensorReading,
    SensorUpdateEvent,
    encode_event,
)
from .fault import FaultLog
from .machine import (
    Machine,
    MachineCreate,
    MachineStatus,
    MachineSummary,
    MachineUpdate,
)
from .response import ErrorResponse, MessageResponse, ORJSONResponse

__all__ = [
    "ErrorResponse",
    "FaultAlert",
    "FaultAlertEvent",
    "FaultLog",
    "Machine",
    "MachineCreate",
    "MachineStatus",
    "MachineSummary",
    "MachineUpdate",
    "MessageResponse",
    "ORJSONResponse",
    "PushEvent",
    "SensorReading",
    "SensorUpdateEvent",
    "encode_event",
]
