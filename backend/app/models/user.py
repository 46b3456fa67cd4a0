"""User model for people tracking medication routines."""
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from app.models.medicine import UserDefinedMedicine
    from app.models.push_token import PushToken
    from app.models.routine import Routine


class User(TimestampMixin, Base):
    """User entity; ``timezone`` drives every local slot computation."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False)
    # local DD/MM/YYYY date of the last daily reminder
    last_reminded_on: Mapped[str | None] = mapped_column(String(10))

    routines: Mapped[list["Routine"]] = relationship(
        "Routine", back_populates="user", cascade="all, delete-orphan"
    )
    user_defined_medicines: Mapped[list["UserDefinedMedicine"]] = relationship(
        "UserDefinedMedicine", back_populates="user", cascade="all, delete-orphan"
    )
    push_tokens: Mapped[list["PushToken"]] = relationship(
        "PushToken", back_populates="user", cascade="all, delete-orphan"
    )
