from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import Field, StringConstraints, field_validator

from .common import CamelModel, InputModel

Role = Literal["admin", "manager", "staff"]
Provider = Literal["email", "google", "github", "facebook", "twitter", "instagram"]
SocialProvider = Literal["google", "github", "facebook", "twitter", "instagram"]

# Input models strip surrounding whitespace; a password is kept exactly as typed.
Password = Annotated[str, StringConstraints(strip_whitespace=False)]


class User(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    department: str
    # bcrypt hash; the plain value is never stored.
    password: str
    provider: Optional[Provider] = None
    provider_id: Optional[str] = None


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    department: str
    provider: Optional[Provider] = None
    provider_id: Optional[str] = None


class SignupRequest(InputModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: Password = Field(min_length=1)
    role: Role = "staff"
    department: str = "General"
    # Federated accounts are created through social login, never here.
    provider: Literal["email"] = "email"

    @field_validator("email")
    @classmethod
    def email_has_at(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value


class LoginRequest(InputModel):
    email: str
    password: Password


class SocialProfile(InputModel):
    """What a federated identity provider tells us about the person."""

    id: str = Field(min_length=1)
    name: str
    email: str


class PasswordResetRequest(InputModel):
    email: str


class PasswordResetComplete(InputModel):
    token: str
    email: str
    new_password: Password = Field(min_length=1)


class ResetToken(CamelModel):
    token: str
    email: str
    # Epoch milliseconds.
    expires_at: int


class SessionState(CamelModel):
    is_authenticated: bool = False
    current_user: Optional[User] = None
    loading: bool = False
    error: Optional[str] = None


class SessionOut(CamelModel):
    is_authenticated: bool
    current_user: Optional[UserOut] = None
    error: Optional[str] = None
