"""Industrial IoT Monitor — Push Channel Event Schemas.

Messages broadcast to WebSocket subscribers. Field names on the wire are
camelCase; Python attributes stay snake_case.

Wire format:
    {"type": "SENSOR_UPDATE", "data": [{"machineId": ..., "name": ..., ...}]}
    {"type": "FAULT_ALERT", "data": {"machineId": ..., "machineName": ..., "faultType": ...}}
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SensorReading(_WireModel):
    """One synthetic sensor sample for one machine. Never persisted."""

    machine_id: str
    name: str
    temperature: float
    vibration: float
    rpm: float
    power: float
    tension: float
    timestamp: datetime


class FaultAlert(_WireModel):
    """Notice that a fault was injected on a machine."""

    machine_id: str
    machine_name: str
    fault_type: str


class SensorUpdateEvent(_WireModel):
    """Every reading generated in one tick, in snapshot order."""

    type: Literal["SENSOR_UPDATE"] = "SENSOR_UPDATE"
    data: list[SensorReading] = Field(default_factory=list)


class FaultAlertEvent(_WireModel):
    """A single fault alert, pushed separately from the sensor update."""

    type: Literal["FAULT_ALERT"] = "FAULT_ALERT"
    data: FaultAlert


PushEvent = SensorUpdateEvent | FaultAlertEvent


def encode_event(event: PushEvent) -> str:
    """Serialize an event to the UTF-8 JSON text sent over the push channel."""
    return event.model_dump_json(by_alias=True)
