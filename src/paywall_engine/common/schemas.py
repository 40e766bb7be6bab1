"""Shared Pydantic schemas for Paywall-Engine."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "paywall-engine"
