"""Response bodies that are not tied to a domain resource."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    """What ``GET /`` reports about the running service."""

    name: str = Field(description="Configured project name")
    environment: str = Field(description="Active settings profile")
    version: str = Field(description="Package version, semver")
    api_prefix: str = Field(description="Mount point of the JSON API")


class HealthCheckResponse(BaseModel):
    status: str = Field(default="OK", description="Always OK while the process serves requests")
    timestamp: datetime


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by delete and logout endpoints."""

    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Stable identifier such as not_found or has_dependents")
    details: Any | None = Field(
        default=None,
        description="Structured context; always includes the request id.",
    )


__all__ = ["ErrorResponse", "HealthCheckResponse", "MessageResponse", "RootResponse"]
