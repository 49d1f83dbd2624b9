from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class APIError(BaseModel):
    code: str
    message: str
    request_id: str | None = None


class APIErrorEnvelope(BaseModel):
    error: APIError


class HealthCheckResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: int
    checks: dict[str, dict[str, Any]]
