from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

AdminRole = Literal["admin", "super_admin"]


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user: AuthUser


class Identity(BaseModel):
    """Authenticated caller, attached to ``request.state`` by the middleware."""

    user_id: str
    email: Optional[str] = None


class AdminRecord(BaseModel):
    user_id: str
    email: str
    role: AdminRole
    created_at: Optional[datetime] = None


class AdminCreate(BaseModel):
    user_id: str
    email: str
    role: AdminRole = "admin"


class AdminUpdate(BaseModel):
    email: Optional[str] = None
    role: Optional[AdminRole] = None


class LoginRequest(BaseModel):
    email: str = ""
    password: str = Field(default="", repr=False)
