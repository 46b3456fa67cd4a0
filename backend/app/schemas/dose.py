"""Upcoming dose schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel

from app.models.routine import TimeSlot, Weekday


class UpcomingDose(BaseModel):
    """One outstanding medicine dose for today in the user's local frame."""

    routine_id: uuid.UUID
    routine_name: str
    local_date: str
    local_weekday: Weekday
    slot: TimeSlot
    routine_medicine_id: uuid.UUID
    medicine_name: str | None = None
