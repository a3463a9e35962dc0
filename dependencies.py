"""Industrial IoT Monitor — FastAPI Dependencies.

Dependency injection for services and the process-wide broadcast state.

Usage:
    from dependencies import get_machine_service

    @router.get("/machines")
    async def get_machines(service: Annotated[MachineService, Depends(get_machine_service)]):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.requests import HTTPConnection
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.broadcast_service import BroadcastLoop
from services.fault_service import FaultLogService
from services.machine_service import MachineService
from services.subscriber_registry import SubscriberRegistry


# =============================================================================
# Record Services
# =============================================================================

async def get_machine_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MachineService:
    """Machine service bound to the request's session."""
    return MachineService(db)


async def get_fault_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FaultLogService:
    """Fault log service bound to the request's session."""
    return FaultLogService(db)


# =============================================================================
# Broadcast State
# =============================================================================
# Works for both HTTP requests and WebSocket connections.

def get_registry(connection: HTTPConnection) -> SubscriberRegistry:
    """The application's subscriber registry."""
    return connection.app.state.registry


def get_broadcast_loop(connection: HTTPConnection) -> BroadcastLoop | None:
    """The running broadcast loop, or None when simulation is disabled."""
    return getattr(connection.app.state, "broadcast_loop", None)
