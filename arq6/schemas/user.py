"""
Pydantic models for registration, login and profile requests.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

# lowercase, uppercase, digit and one of the accepted special characters
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]"
)


class UserRegistrationRequest(BaseModel):
    """Incoming payload for creating an account."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    nome: str = Field(..., min_length=2, max_length=100, description="Display name.")
    empresa: Optional[str] = Field(
        None, max_length=100, description="Optional company name."
    )

    @field_validator("password")
    @classmethod
    def _check_password_strength(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "password must mix lowercase, uppercase, digits and special characters"
            )
        return value


class UserLoginRequest(BaseModel):
    """Credentials exchanged for a session."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(BaseModel):
    """Mutable profile fields; omitted fields are left untouched."""

    nome: Optional[str] = Field(None, min_length=2, max_length=100)
    empresa: Optional[str] = Field(None, max_length=100)

    @field_validator("nome")
    @classmethod
    def _reject_null_name(cls, value: Optional[str]) -> Optional[str]:
        # Omitted keeps the stored name; an explicit null would erase it.
        if value is None:
            raise ValueError("nome cannot be null")
        return value


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class SessionTokens(BaseModel):
    """Session material handed back to the client after login or refresh."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = Field(
        None, description="Unix timestamp when the access token expires."
    )


__all__ = [
    "PASSWORD_PATTERN",
    "ProfileUpdateRequest",
    "RefreshTokenRequest",
    "SessionTokens",
    "UserLoginRequest",
    "UserRegistrationRequest",
]
