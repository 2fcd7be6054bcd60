"""
Common response DTOs.

HealthResponse: GET /health
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class HealthChecks(BaseModel):
    """Individual resource states inside HealthResponse."""

    model_config = ConfigDict(populate_by_name=True)

    captcha_credentials: str
    mail_transport: str


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: HealthChecks
