"""Pydantic schemas for login and session endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    access_code: Optional[str] = Field(None, alias="accessCode")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    customer_id: str = Field(..., alias="customerId")


class LogoutResponse(BaseModel):
    success: bool = True


class SessionStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool
    email: Optional[str] = None
    customer_id: Optional[str] = Field(None, alias="customerId")
