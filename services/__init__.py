"""Industrial IoT Monitor — Service Layer.

This package contains business logic services that encapsulate
domain operations and keep API routes thin.

Services:
    - MachineService: Machine records, fleet snapshot, fault transition
    - FaultLogService: Append-only fault log
    - TelemetryService: Synthetic sensor readings
    - FaultInjector: Per-tick probabilistic fault source
    - SubscriberRegistry: Connected push-channel clients
    - BroadcastLoop: Fixed-interval simulation and fan-out
    - BaseService: Generic CRUD operations (for ORM models)
"""

from services.base import BaseService
from services.broadcast_service import BroadcastLoop, LoopStats, TickResult
from services.fault_injector import FAULT_TYPES, FaultInjector
from services.fault_service import FaultLogService
from services.machine_service import MachineService
from services.subscriber_registry import SubscriberRegistry
from services.telemetry_service import TelemetryService

__all__ = [
    "BaseService",
    "BroadcastLoop",
    "FAULT_TYPES",
    "FaultInjector",
    "FaultLogService",
    "LoopStats",
    "MachineService",
    "SubscriberRegistry",
    "TelemetryService",
    "TickResult",
]
