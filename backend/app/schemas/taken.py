"""Taken record schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.routine import TimeSlot, Weekday
from app.services.time_slot_service import LOCAL_DATE_FORMAT

_DATE_PATTERN = r"^\d{2}/\d{2}/\d{4}$"


class _DoseSlot(BaseModel):
    """Local date, weekday and slot identifying one scheduled dose."""

    date: str = Field(pattern=_DATE_PATTERN, description="Local date as DD/MM/YYYY")
    day: Weekday
    slot: TimeSlot

    @model_validator(mode="after")
    def _check_day_matches_date(self) -> "_DoseSlot":
        try:
            parsed = datetime.strptime(self.date, LOCAL_DATE_FORMAT)
        except ValueError as exc:
            raise ValueError(f"Invalid calendar date: {self.date}") from exc
        if Weekday.from_iso(parsed.isoweekday()) != self.day:
            raise ValueError(f"{self.date} is not a {self.day.value}")
        return self


class TakenCreate(_DoseSlot):
    """Mark one routine medicine as taken."""

    routine_id: uuid.UUID
    routine_medicine_id: uuid.UUID


class TakenBatchCreate(_DoseSlot):
    """Mark several medicines of one routine as taken for the same slot."""

    routine_id: uuid.UUID
    routine_medicine_ids: list[uuid.UUID] = Field(min_length=1)

    @field_validator("routine_medicine_ids")
    @classmethod
    def _distinct_ids(cls, value: list[uuid.UUID]) -> list[uuid.UUID]:
        if len(set(value)) != len(value):
            raise ValueError("routine_medicine_ids must not contain duplicates")
        return value


class TakenRead(BaseModel):
    """Serialized taken record."""

    id: uuid.UUID
    routine_id: uuid.UUID
    routine_medicine_id: uuid.UUID
    date: str
    day: Weekday
    slot: TimeSlot
    taken_at: datetime

    model_config = ConfigDict(from_attributes=True)
