"""Service-layer error taxonomy.

Each error carries the HTTP status the API layer reports for it; routers
translate them into ``HTTPException`` without exposing internal state.
"""

from __future__ import annotations


class MediRoutinesError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 500
    default_message = "An unknown error occurred"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotFoundError(MediRoutinesError):
    status_code = 404
    default_message = "Resource not found"


class UserNotFound(NotFoundError):
    default_message = "Could not find user for provided id"


class RoutineNotFound(NotFoundError):
    default_message = "Routine not found"


class MedicineNotFound(NotFoundError):
    default_message = "Medicine not found"


class MedicineNotInRoutine(NotFoundError):
    default_message = "Medicine not found in routine"


class ConflictError(MediRoutinesError):
    status_code = 409
    default_message = "Conflicting request"


class AlreadyTaken(ConflictError):
    default_message = "Medicine already marked as taken for this slot"


class EmailAlreadyRegistered(ConflictError):
    default_message = "Email already registered"


class MedicineInUse(ConflictError):
    default_message = "Medicine is used by one or more routines"


class TimeZoneResolutionFailed(MediRoutinesError):
    status_code = 422
    default_message = "Could not resolve the user's time zone"


class DependencyFailure(MediRoutinesError):
    status_code = 500
    default_message = "Something went wrong, please try again"


class RecordingFailed(DependencyFailure):
    default_message = "Failed to mark medicine as taken, please try again"


__all__ = [
    "AlreadyTaken",
    "ConflictError",
    "DependencyFailure",
    "EmailAlreadyRegistered",
    "MediRoutinesError",
    "MedicineInUse",
    "MedicineNotFound",
    "MedicineNotInRoutine",
    "NotFoundError",
    "RecordingFailed",
    "RoutineNotFound",
    "TimeZoneResolutionFailed",
    "UserNotFound",
]
