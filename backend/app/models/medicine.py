"""Medicine catalog models.

Medicines come in two variants with the same shape: a shared predefined
catalog and per-user medicines. Routines reference either variant through
``MedicineType`` plus an id, never through a foreign key.
"""
from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.user import User


class MedicineType(str, enum.Enum):
    """Variant tag of a medicine reference."""

    PREDEFINED = "predefined"
    USER_DEFINED = "user_defined"


class PredefinedMedicine(TimestampMixin, Base):
    """Entry of the shared medicine catalog."""

    __tablename__ = "predefined_medicines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)


class UserDefinedMedicine(TimestampMixin, Base):
    """Medicine created by, and visible to, a single user."""

    __tablename__ = "user_defined_medicines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="user_defined_medicines")
