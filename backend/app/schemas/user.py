"""User-related schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.services.time_slot_service import is_valid_timezone


class UserBase(BaseModel):
    """Shared user fields."""

    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    timezone: str

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_timezone(value):
            raise ValueError("Unknown time zone; expected an IANA name such as 'Asia/Kolkata'")
        return value


class UserCreate(UserBase):
    """Signup payload."""

    password: str = Field(min_length=6)


class UserRead(BaseModel):
    """Serialized user response; never includes the password hash."""

    id: uuid.UUID
    name: str
    email: str
    timezone: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PushTokenCreate(BaseModel):
    """Register a device token for reminder notifications."""

    token: str = Field(min_length=1, max_length=512)
