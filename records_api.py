"""
Record API Module
Provides the create/read/update/delete surface over machines and the
read-only fault log feed used by the dashboard.

Import this into api_server.py to add the routes.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status

from dependencies import get_fault_service, get_machine_service
from schemas.fault import FaultLog
from schemas.machine import Machine, MachineCreate, MachineUpdate
from schemas.response import ErrorResponse, MessageResponse
from services.fault_service import RECENT_FAULTS_LIMIT, FaultLogService
from services.machine_service import MachineService

records_router = APIRouter(prefix="/api", tags=["Records"])

MachineServiceDep = Annotated[MachineService, Depends(get_machine_service)]
FaultServiceDep = Annotated[FaultLogService, Depends(get_fault_service)]

_NOT_FOUND = {404: {"model": ErrorResponse}}


# =============================================================================
# MACHINES
# =============================================================================

@records_router.get("/machines", response_model=List[Machine])
async def list_machines(service: MachineServiceDep):
    """Every machine record, in storage order."""
    return await service.get_multi()


@records_router.get("/machines/{machine_id}", response_model=Machine, responses=_NOT_FOUND)
async def get_machine(machine_id: str, service: MachineServiceDep):
    """A single machine record."""
    return await service.get_or_404(machine_id)


@records_router.post(
    "/machines",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_machine(payload: MachineCreate, service: MachineServiceDep):
    """
    Register a new machine.
    Status defaults to Active when omitted.
    """
    await service.create(payload)
    return MessageResponse(message="Machine added")


@records_router.put("/machines/{machine_id}", response_model=MessageResponse, responses=_NOT_FOUND)
async def update_machine(machine_id: str, payload: MachineUpdate, service: MachineServiceDep):
    """
    Replace every editable field of a machine.
    The id in the path is authoritative; an id in the body is ignored.
    """
    await service.replace(machine_id, payload)
    return MessageResponse(message="Machine updated")


@records_router.delete("/machines/{machine_id}", response_model=MessageResponse, responses=_NOT_FOUND)
async def delete_machine(machine_id: str, service: MachineServiceDep):
    """
    Delete a machine.
    Its fault log entries are kept and keep referencing the deleted id.
    """
    await service.delete(machine_id)
    return MessageResponse(message="Machine deleted")


# =============================================================================
# FAULT LOG
# =============================================================================

@records_router.get("/faults", response_model=List[FaultLog])
async def list_faults(service: FaultServiceDep):
    """The most recent fault log entries, newest first."""
    return await service.get_recent(RECENT_FAULTS_LIMIT)


__all__ = ["records_router"]
