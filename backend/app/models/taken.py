"""Taken dose records."""
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.routine import TimeSlot, Weekday

if TYPE_CHECKING:  # pragma: no cover
    from app.models.routine import Routine, RoutineMedicine


class Taken(Base):
    """Append-only fact that a scheduled dose was taken on a local date."""

    __tablename__ = "takens"
    __table_args__ = (
        UniqueConstraint(
            "routine_id",
            "routine_medicine_id",
            "date",
            "slot",
            name="uq_takens_routine_medicine_date_slot",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    routine_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    routine_medicine_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routine_medicines.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    day: Mapped[Weekday] = mapped_column(Enum(Weekday), nullable=False)
    slot: Mapped[TimeSlot] = mapped_column(Enum(TimeSlot), nullable=False)
    taken_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    routine: Mapped["Routine"] = relationship("Routine", back_populates="takens")
    routine_medicine: Mapped["RoutineMedicine"] = relationship("RoutineMedicine")
