"""
IQScaler - User Schemas
Pydantic schemas for registration, authentication, password reset and admin user management
"""
import uuid
from datetime import datetime
from typing import Annotated

from pydantic import EmailStr, Field, field_validator

from iqscaler.schemas.common import CamelModel


# ============================================================================
# Registration & Authentication
# ============================================================================

class UserCreate(CamelModel):
    """Schema for user registration."""
    username: Annotated[str, Field(min_length=1, max_length=100)]
    email: EmailStr
    password: Annotated[str, Field(min_length=6, max_length=128)]

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v


class UserLogin(CamelModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class AuthResponse(CamelModel):
    """User data plus a bearer token, returned by register and login."""
    id: uuid.UUID
    username: str
    email: str
    is_admin: bool
    token: str


class ForgotPasswordRequest(CamelModel):
    """Schema for password reset request."""
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Schema for password reset confirmation (token travels in the path)."""
    password: Annotated[str, Field(min_length=6, max_length=128)]


# ============================================================================
# User Response Schemas
# ============================================================================

class UserResponse(CamelModel):
    """Schema for user response (no password or reset fields)."""
    id: uuid.UUID
    username: str
    email: str
    is_admin: bool
    created_at: datetime


class UserAdminUpdate(CamelModel):
    """Fields an admin may change on an account."""
    username: Annotated[str, Field(min_length=1, max_length=100)] | None = None
    email: EmailStr | None = None
    is_admin: bool | None = None
