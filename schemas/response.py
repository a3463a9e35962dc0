"""Industrial IoT Monitor — API Response Schemas.

Provides the acknowledgement/error payloads returned by the Record API and
a high-performance ORJSONResponse class for faster serialization.

Usage:
    from schemas.response import ORJSONResponse

    app = FastAPI(default_response_class=ORJSONResponse)
"""

from __future__ import annotations

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Acknowledgement returned by write endpoints.

    Example:
        {"message": "Machine added"}
    """

    message: str = Field(..., description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """Standard error body for domain errors (4xx).

    Example:
        {
            "error": "ResourceNotFound",
            "message": "Machine with id 'M999' not found",
            "details": {"resource_type": "Machine", "resource_id": "M999"}
        }
    """

    error: str = Field(..., description="Error class name")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional context")


# =============================================================================
# High-Performance ORJSON Response
# =============================================================================

def _orjson_serializer(obj: Any) -> bytes:
    """Serialize object to JSON bytes using orjson."""
    return orjson.dumps(
        obj,
        option=(
            orjson.OPT_UTC_Z |                 # Use Z suffix for UTC
            orjson.OPT_NAIVE_UTC |             # Treat naive datetimes as UTC
            orjson.OPT_NON_STR_KEYS            # Allow non-string dict keys
        ),
    )


class ORJSONResponse(JSONResponse):
    """High-performance JSON response using orjson.

    orjson natively handles datetime values, which the fault log relies on.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        """Render content to JSON bytes using orjson."""
        if hasattr(content, "model_dump"):
            content = content.model_dump(mode="json")
        return _orjson_serializer(content)
