"""Predefined and user-defined medicine services."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import unit_of_work
from app.models import (
    MedicineType,
    PredefinedMedicine,
    RoutineMedicine,
    User,
    UserDefinedMedicine,
)
from app.schemas.medicine import UserDefinedMedicineCreate
from app.services.errors import (
    DependencyFailure,
    MedicineInUse,
    MedicineNotFound,
    UserNotFound,
)

logger = logging.getLogger(__name__)

MedicineRef = tuple[MedicineType, uuid.UUID]
_Lookup = Callable[[AsyncSession, set[uuid.UUID], uuid.UUID], Awaitable[dict[uuid.UUID, str]]]


async def _lookup_predefined(
    session: AsyncSession, ids: set[uuid.UUID], user_id: uuid.UUID
) -> dict[uuid.UUID, str]:
    result = await session.execute(
        select(PredefinedMedicine.id, PredefinedMedicine.name).where(
            PredefinedMedicine.id.in_(ids)
        )
    )
    return {row_id: name for row_id, name in result.all()}


async def _lookup_user_defined(
    session: AsyncSession, ids: set[uuid.UUID], user_id: uuid.UUID
) -> dict[uuid.UUID, str]:
    result = await session.execute(
        select(UserDefinedMedicine.id, UserDefinedMedicine.name).where(
            UserDefinedMedicine.id.in_(ids),
            UserDefinedMedicine.user_id == user_id,
        )
    )
    return {row_id: name for row_id, name in result.all()}


_LOOKUPS: dict[MedicineType, _Lookup] = {
    MedicineType.PREDEFINED: _lookup_predefined,
    MedicineType.USER_DEFINED: _lookup_user_defined,
}


async def resolve_medicine_names(
    session: AsyncSession,
    refs: Iterable[MedicineRef],
    *,
    user_id: uuid.UUID,
) -> dict[MedicineRef, str]:
    """Return names for the given references, one query per variant.

    User-defined medicines only resolve when owned by ``user_id``.
    References that do not resolve are absent from the result.
    """
    grouped: dict[MedicineType, set[uuid.UUID]] = {}
    for medicine_type, medicine_id in refs:
        grouped.setdefault(medicine_type, set()).add(medicine_id)

    names: dict[MedicineRef, str] = {}
    for medicine_type, ids in grouped.items():
        found = await _LOOKUPS[medicine_type](session, ids, user_id)
        for medicine_id, name in found.items():
            names[(medicine_type, medicine_id)] = name
    return names


async def ensure_medicines_exist(
    session: AsyncSession,
    refs: Iterable[MedicineRef],
    *,
    user_id: uuid.UUID,
) -> dict[MedicineRef, str]:
    """Resolve every reference or raise ``MedicineNotFound``."""
    wanted = set(refs)
    names = await resolve_medicine_names(session, wanted, user_id=user_id)
    missing = wanted - names.keys()
    if missing:
        kinds = sorted({medicine_type.value for medicine_type, _ in missing})
        labels = ", ".join(kind.replace("_", "-") for kind in kinds)
        raise MedicineNotFound(
            f"Could not find some of the {labels} medicines, please check your data"
        )
    return names


async def list_predefined_medicines(session: AsyncSession) -> list[PredefinedMedicine]:
    result = await session.execute(
        select(PredefinedMedicine).order_by(PredefinedMedicine.name)
    )
    return list(result.scalars().all())


async def list_user_defined_medicines(
    session: AsyncSession, *, user_id: uuid.UUID
) -> list[UserDefinedMedicine]:
    user = await session.get(User, user_id)
    if user is None:
        raise UserNotFound("User not found")
    result = await session.execute(
        select(UserDefinedMedicine)
        .where(UserDefinedMedicine.user_id == user_id)
        .order_by(UserDefinedMedicine.created_at)
    )
    return list(result.scalars().all())


async def create_user_defined_medicine(
    session: AsyncSession,
    payload: UserDefinedMedicineCreate,
    *,
    user_id: uuid.UUID,
) -> UserDefinedMedicine:
    user = await session.get(User, user_id)
    if user is None:
        raise UserNotFound("User not found")

    medicine = UserDefinedMedicine(user_id=user_id, name=payload.name)

    async def _write(tx: AsyncSession) -> UserDefinedMedicine:
        tx.add(medicine)
        await tx.flush()
        return medicine

    try:
        await unit_of_work(session, _write)
    except SQLAlchemyError as exc:
        logger.exception("Creating user-defined medicine failed for user %s", user_id)
        raise DependencyFailure(
            "Failed to create the user-defined medicine, please try again"
        ) from exc
    await session.refresh(medicine)
    return medicine


async def delete_user_defined_medicine(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    medicine_id: uuid.UUID,
) -> None:
    """Delete a user's medicine unless a routine still references it."""
    medicine = await session.get(UserDefinedMedicine, medicine_id)
    if medicine is None or medicine.user_id != user_id:
        raise MedicineNotFound("User-defined medicine not found")

    in_use = await session.execute(
        select(RoutineMedicine.id)
        .where(
            RoutineMedicine.medicine_type == MedicineType.USER_DEFINED,
            RoutineMedicine.medicine_id == medicine_id,
        )
        .limit(1)
    )
    if in_use.first() is not None:
        raise MedicineInUse(
            "Medicine is used by one or more routines; delete those routines first"
        )

    async def _write(tx: AsyncSession) -> None:
        await tx.delete(medicine)

    try:
        await unit_of_work(session, _write)
    except SQLAlchemyError as exc:
        logger.exception("Deleting user-defined medicine %s failed", medicine_id)
        raise DependencyFailure(
            "Failed to delete the user-defined medicine, please try again"
        ) from exc
