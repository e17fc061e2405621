"""
Auth and user-management request/response schemas.
"""
import uuid
from datetime import datetime
from typing import Literal
from pydantic import EmailStr, Field, field_validator

from tracker.schemas.common import CamelModel
from tracker.services.auth import BCRYPT_MAX_BYTES

Role = Literal["user", "admin"]


def _password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return v


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("Please add a name")
    return v


class RegisterRequest(CamelModel):
    name: str = Field(max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role = "user"

    @field_validator("name")
    @classmethod
    def name_present(cls, v: str) -> str:
        return _strip_name(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _password_bytes(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str
    # When given, the account must also have this role
    role: Role | None = None

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _password_bytes(v)


class UserUpdateRequest(CamelModel):
    """Fields an admin may change on a user. Anything else in the body is ignored."""
    name: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    role: Role | None = None

    @field_validator("name")
    @classmethod
    def name_present(cls, v: str | None) -> str | None:
        return _strip_name(v)


class UserResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthResponse(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
