from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import EMAIL_PATTERN, MIN_PASSWORD_LENGTH


def _valid_email(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Email is required")
    if not EMAIL_PATTERN.search(value):
        raise ValueError("Email is invalid")
    return value


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    firstname: str = ""
    lastname: str = ""
    username: str = ""
    email: str
    budget: float = 0

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("budget", mode="before")
    @classmethod
    def _budget_default(cls, v: Any) -> Any:
        # older records were created without a budget
        return 0 if v in (None, "") else v


class User(UserOut):
    """User record as stored by the remote API (plain-text password included)."""

    password: str = ""

    def public(self) -> UserOut:
        return UserOut.model_validate(self.model_dump(exclude={"password"}))


class LoginIn(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Email is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def _password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegistrationIn(BaseModel):
    firstname: str
    lastname: str
    username: str
    email: str
    password: str
    confirm_password: str
    budget: float = Field(0, ge=0)

    @field_validator("firstname")
    @classmethod
    def _first_name_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("First name is required")
        return v.strip()

    @field_validator("lastname")
    @classmethod
    def _last_name_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Last name is required")
        return v.strip()

    @field_validator("username")
    @classmethod
    def _username_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Username is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _email_valid(cls, v: str) -> str:
        return _valid_email(v)

    @field_validator("password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        return v

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegistrationIn":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"confirm_password"})


class ProfileUpdate(BaseModel):
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)

    @field_validator("email")
    @classmethod
    def _email_valid(cls, v: Optional[str]) -> Optional[str]:
        return _valid_email(v) if v is not None else None

    @model_validator(mode="after")
    def _at_least_one(self) -> "ProfileUpdate":
        if not any(
            getattr(self, field) is not None
            for field in ("firstname", "lastname", "username", "email", "budget")
        ):
            raise ValueError("at least one field must be provided")
        return self

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
