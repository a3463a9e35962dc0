"""Industrial IoT Monitor — Core Exceptions.

Domain-specific exceptions for the service layer.
These exceptions are raised by services and converted to HTTP responses
by the exception handlers registered in api_server.py.

Usage:
    from core.exceptions import ResourceNotFound

    class MachineService:
        async def get_or_raise(self, machine_id: str):
            machine = await self.get(machine_id)
            if not machine:
                raise ResourceNotFound("Machine", machine_id)
            return machine
"""

from __future__ import annotations

from typing import Any


class MonitorError(Exception):
    """Base exception for all monitor domain errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ResourceNotFound(MonitorError):
    """Raised when a requested resource does not exist.

    Maps to HTTP 404 Not Found.

    Attributes:
        resource_type: Type of resource (e.g., "Machine").
        resource_id: Identifier of the missing resource.
    """

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(message, {"resource_type": resource_type, "resource_id": str(resource_id)})


class ResourceConflict(MonitorError):
    """Raised when a write violates a uniqueness or integrity constraint.

    Maps to HTTP 409 Conflict.
    """

    status_code = 409

    def __init__(self, resource_type: str, reason: str):
        self.resource_type = resource_type
        self.reason = reason
        super().__init__(
            f"{resource_type} conflicts with existing data: {reason}",
            {"resource_type": resource_type},
        )

