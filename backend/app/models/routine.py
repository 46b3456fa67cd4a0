"""Routine, routine medicine entry and weekly schedule models."""
from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import Enum, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.medicine import MedicineType
from app.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.taken import Taken
    from app.models.user import User


class Weekday(str, enum.Enum):
    """Civil weekday names, Monday first."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_iso(cls, isoweekday: int) -> "Weekday":
        return list(cls)[isoweekday - 1]


class TimeSlot(str, enum.Enum):
    """Coarse dose slots; definition order is the slot index."""

    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"
    NIGHT = "Night"

    @property
    def order(self) -> int:
        return list(TimeSlot).index(self)


class Routine(TimestampMixin, Base):
    """A named collection of scheduled medicines owned by one user."""

    __tablename__ = "routines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="routines")
    medicines: Mapped[list["RoutineMedicine"]] = relationship(
        "RoutineMedicine",
        back_populates="routine",
        cascade="all, delete-orphan",
        order_by="RoutineMedicine.position",
    )
    takens: Mapped[list["Taken"]] = relationship(
        "Taken",
        back_populates="routine",
        cascade="all, delete-orphan",
        order_by="Taken.taken_at",
    )


class RoutineMedicine(Base):
    """One medicine of a routine together with its weekly schedule.

    The id is the stable routine-medicine id referenced by taken records;
    ``position`` keeps insertion order and is never renumbered.
    """

    __tablename__ = "routine_medicines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    routine_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    medicine_type: Mapped[MedicineType] = mapped_column(
        Enum(MedicineType), nullable=False
    )
    medicine_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)

    routine: Mapped[Routine] = relationship("Routine", back_populates="medicines")
    schedule: Mapped[list["RoutineMedicineSchedule"]] = relationship(
        "RoutineMedicineSchedule",
        back_populates="routine_medicine",
        cascade="all, delete-orphan",
        order_by="RoutineMedicineSchedule.position",
    )


class RoutineMedicineSchedule(Base):
    """A (weekday, slots) row of a weekly schedule."""

    __tablename__ = "routine_medicine_schedules"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    routine_medicine_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("routine_medicines.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    day: Mapped[Weekday] = mapped_column(Enum(Weekday), nullable=False)
    # slot values as submitted, e.g. ["Morning", "Night"]
    slots: Mapped[list[Any]] = mapped_column(JSON, nullable=False)

    routine_medicine: Mapped[RoutineMedicine] = relationship(
        "RoutineMedicine", back_populates="schedule"
    )

    @property
    def times(self) -> list[TimeSlot]:
        return [TimeSlot(value) for value in self.slots]
