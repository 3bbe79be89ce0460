# Pydantic schemas for auth and user-related requests/responses

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, ValidationInfo, field_validator

from db.users import UserRole
from schemas.base import ApiModel
from schemas.validators import (
    normalize_email,
    optional_text,
    passwords_match,
    validate_password_length,
)


class CheckEmailRequest(ApiModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)


class CheckEmailResponse(ApiModel):
    exists: bool = True
    needs_password_setup: bool


class LoginRequest(ApiModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return validate_password_length(v)


class SetupPasswordRequest(ApiModel):
    email: EmailStr
    password: str
    confirm_password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return validate_password_length(v)

    @field_validator("confirm_password")
    @classmethod
    def _confirm(cls, v: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and not passwords_match(password, v):
            raise ValueError("Passwords don't match")
        return v


class UserRead(ApiModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: UserRole


class AuthResponse(ApiModel):
    success: bool = True
    user: UserRead


class UserAdminRead(UserRead):
    is_active: bool
    has_password: bool
    created_at: Optional[datetime] = None


class UserCreate(ApiModel):
    email: EmailStr
    full_name: Optional[str] = None
    role: UserRole = UserRole.STAFF

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("full_name")
    @classmethod
    def _full_name(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class UserUpdate(ApiModel):
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("full_name")
    @classmethod
    def _full_name(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)
