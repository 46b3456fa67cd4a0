"""ORM models package export."""

from app.models.medicine import MedicineType, PredefinedMedicine, UserDefinedMedicine
from app.models.push_token import PushToken
from app.models.routine import (
    Routine,
    RoutineMedicine,
    RoutineMedicineSchedule,
    TimeSlot,
    Weekday,
)
from app.models.taken import Taken
from app.models.user import User

__all__ = [
    "MedicineType",
    "PredefinedMedicine",
    "PushToken",
    "Routine",
    "RoutineMedicine",
    "RoutineMedicineSchedule",
    "Taken",
    "TimeSlot",
    "User",
    "UserDefinedMedicine",
    "Weekday",
]
