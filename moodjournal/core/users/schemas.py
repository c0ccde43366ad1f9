"""Typed schemas for user IO."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from moodjournal.core.auth.password import check_password_policy

if TYPE_CHECKING:
    from moodjournal.core.users.models import User


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AdminUserUpdateRequest(BaseModel):
    """Partial update issued from the admin console."""

    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None
    is_active: Optional[bool] = None
    role: Optional[Literal["admin", "user"]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        return check_password_policy(v) if v is not None else None


class UserResponse(BaseModel):
    # Persisted emails are not re-validated on the way out.
    id: int
    email: str
    full_name: Optional[str] = None
    is_active: bool
    role_codes: List[str] = []
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def serialize_user(user: "User") -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")
