"""
CritterTrack Backend — Shared Pydantic Schemas
==============================================

What:  The camelCase base model plus the small response bodies shared by
       several routers (errors, messages, ids, health).

JSON naming:
    Request and response bodies use camelCase (`userId`, `showOnProfile`).
    Python code keeps snake_case; CamelModel maps between the two and also
    accepts snake_case input. The error envelope keeps its snake_case
    `request_id` key so it matches the X-Request-ID header name.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Standardized error body returned by every exception handler.

    Example:
        {
            "error": "not_found",
            "message": "animal with ID '3f...' was not found",
            "details": {"resource": "animal"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(CamelModel):
    message: str


class CreatedResponse(CamelModel):
    id: str = Field(description="Identifier of the newly created record")


class UploadResponse(CamelModel):
    url: str = Field(description="URL the stored file can be fetched from")


class HealthResponse(CamelModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Credential store connectivity: connected, disconnected")
    store_backend: str = Field(description="Configured store strategy: sql, rest, memory")
    uptime_seconds: float = Field(description="Seconds since service started")
