"""Medicine catalog schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PredefinedMedicineRead(BaseModel):
    """Shared catalog entry."""

    id: uuid.UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserDefinedMedicineCreate(BaseModel):
    """Payload for creating a user-defined medicine."""

    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value


class UserDefinedMedicineRead(BaseModel):
    """Serialized user-defined medicine."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
