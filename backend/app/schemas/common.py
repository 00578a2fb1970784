"""
CaseDesk Backend — Shared Response Schemas
============================================

What:  The response envelope every endpoint returns, plus error and health models.

Envelope:
    {"status": "success", "data": ...}      → 2xx
    {"status": "fail",    "message": ...}   → 4xx (client can fix the request)
    {"status": "error",   "message": ...}   → 5xx (server-side failure)
"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping a payload in `data`."""

    status: Literal["success"] = "success"
    data: T


class ErrorResponse(BaseModel):
    """
    What:  Error envelope for all failed requests.

    Example:
        {"status": "fail", "message": "Missing required fields: subject, description"}
    """
    status: Literal["fail", "error"] = Field(description="'fail' for 4xx, 'error' for 5xx")
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
