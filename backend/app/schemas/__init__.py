"""Schema exports."""

from app.schemas.auth import Token
from app.schemas.dose import UpcomingDose
from app.schemas.medicine import (
    PredefinedMedicineRead,
    UserDefinedMedicineCreate,
    UserDefinedMedicineRead,
)
from app.schemas.routine import (
    RoutineCreate,
    RoutineMedicineCreate,
    RoutineMedicineRead,
    RoutineRead,
    ScheduleDay,
)
from app.schemas.taken import TakenBatchCreate, TakenCreate, TakenRead
from app.schemas.user import PushTokenCreate, UserCreate, UserRead

__all__ = [
    "PredefinedMedicineRead",
    "PushTokenCreate",
    "RoutineCreate",
    "RoutineMedicineCreate",
    "RoutineMedicineRead",
    "RoutineRead",
    "ScheduleDay",
    "TakenBatchCreate",
    "TakenCreate",
    "TakenRead",
    "Token",
    "UpcomingDose",
    "UserCreate",
    "UserDefinedMedicineCreate",
    "UserDefinedMedicineRead",
    "UserRead",
]
