"""Common API schemas shared across endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response.

    Args:
        error: User-facing error text
        code: Stable machine-readable error code (e.g., "agent_not_found")
        request_id: Optional request ID for tracing
    """

    error: str
    code: str
    request_id: Optional[str] = None


class ServiceStatus(BaseModel):
    """Service health status information.

    Args:
        status: Service status ("connected", "unavailable", "error")
        error: Optional error message if service is unhealthy
    """

    status: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response with service status.

    Args:
        status: Overall health status ("ok", "error")
        version: Application version
        services: Dictionary of service statuses (e.g., {"database": ServiceStatus})
    """

    status: str
    version: str = "0.1.0"
    services: dict[str, ServiceStatus] = Field(default_factory=dict)
