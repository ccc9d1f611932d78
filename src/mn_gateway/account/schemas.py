"""Pydantic request/response schemas for accounts and auth.

All responses are wrapped in ApiResponse at the router layer.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, StringConstraints, field_validator

from src.mn_gateway.account.models import Account

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Username = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$"),
]
# bcrypt only accepts up to 72 bytes of input
MAX_PASSWORD_BYTES = 72


def _fits_bcrypt(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes (UTF-8)")
    return v


Password = Annotated[str, Field(min_length=6, max_length=MAX_PASSWORD_BYTES), AfterValidator(_fits_bcrypt)]


class RegisterRequest(BaseModel):
    name: Name
    email: EmailStr
    username: Username
    password: Password

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    # Either the username or the email address
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    password: Annotated[str, Field(min_length=1)]


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: Annotated[str, Field(min_length=1)]
    new_password: Password


class DeleteAccountRequest(BaseModel):
    password: Annotated[str, Field(min_length=1)]


class AccountOut(BaseModel):
    """Public account fields; the password hash never leaves the service."""

    id: int
    name: str
    email: str
    username: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, account: Account) -> "AccountOut":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            username=account.username,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class AuthResponse(BaseModel):
    user: AccountOut
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds


class RefreshResponse(BaseModel):
    access_token: str
    # Only set when the refresh token was rotated
    refresh_token: str | None = None
    expires_in: int = 1800
