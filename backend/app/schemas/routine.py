"""Routine and weekly schedule schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.medicine import MedicineType
from app.models.routine import TimeSlot, Weekday
from app.schemas.taken import TakenRead


class ScheduleDay(BaseModel):
    """One weekday of a weekly schedule and the slots due on it."""

    day: Weekday
    times: list[TimeSlot] = Field(min_length=1)

    model_config = ConfigDict(from_attributes=True)


class RoutineMedicineCreate(BaseModel):
    """Medicine reference plus its weekly schedule."""

    medicine_type: MedicineType
    medicine_id: uuid.UUID
    schedule: list[ScheduleDay] = Field(min_length=1)


class RoutineCreate(BaseModel):
    """Payload for creating a routine."""

    name: str = Field(min_length=1, max_length=255)
    medicines: list[RoutineMedicineCreate] = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value


class RoutineMedicineRead(BaseModel):
    """A routine entry with its medicine name resolved."""

    id: uuid.UUID
    medicine_type: MedicineType
    medicine_id: uuid.UUID
    medicine_name: str | None = None
    schedule: list[ScheduleDay]


class RoutineRead(BaseModel):
    """Serialized routine with entries in insertion order and taken history."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    created_at: datetime
    medicines: list[RoutineMedicineRead]
    takens: list[TakenRead] = Field(default_factory=list)
