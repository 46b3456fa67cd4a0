"""Routine services."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.session import unit_of_work
from app.models import Routine, RoutineMedicine, RoutineMedicineSchedule, User
from app.schemas.routine import (
    RoutineCreate,
    RoutineMedicineRead,
    RoutineRead,
    ScheduleDay,
)
from app.schemas.taken import TakenRead
from app.services import medicine_service
from app.services.errors import DependencyFailure, RoutineNotFound, UserNotFound

logger = logging.getLogger(__name__)


def _routines_query(*, include_takens: bool) -> Select[tuple[Routine]]:
    options = [
        selectinload(Routine.medicines).selectinload(RoutineMedicine.schedule),
    ]
    if include_takens:
        options.append(selectinload(Routine.takens))
    return select(Routine).options(*options).order_by(Routine.created_at, Routine.id)


async def _require_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise UserNotFound()
    return user


async def load_user_routines(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    include_takens: bool = True,
) -> list[Routine]:
    """Load a user's routines with entries and schedules in one batch."""
    stmt = _routines_query(include_takens=include_takens).where(
        Routine.user_id == user_id
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def create_routine(
    session: AsyncSession,
    payload: RoutineCreate,
    *,
    user_id: uuid.UUID,
) -> Routine:
    """Create a routine after confirming every referenced medicine exists.

    Nothing is written unless all references resolve.
    """
    await _require_user(session, user_id)
    await medicine_service.ensure_medicines_exist(
        session,
        [(item.medicine_type, item.medicine_id) for item in payload.medicines],
        user_id=user_id,
    )

    routine = Routine(user_id=user_id, name=payload.name)
    for position, item in enumerate(payload.medicines):
        entry = RoutineMedicine(
            position=position,
            medicine_type=item.medicine_type,
            medicine_id=item.medicine_id,
        )
        for row_position, row in enumerate(item.schedule):
            entry.schedule.append(
                RoutineMedicineSchedule(
                    position=row_position,
                    day=row.day,
                    slots=[slot.value for slot in row.times],
                )
            )
        routine.medicines.append(entry)

    async def _write(tx: AsyncSession) -> Routine:
        tx.add(routine)
        await tx.flush()
        return routine

    try:
        await unit_of_work(session, _write)
    except SQLAlchemyError as exc:
        logger.exception("Creating routine failed for user %s", user_id)
        raise DependencyFailure("Creating routine failed, please try again") from exc

    created = await get_routine(session, user_id=user_id, routine_id=routine.id)
    if created is None:  # pragma: no cover - committed just above
        raise RoutineNotFound()
    return created


async def list_routines(session: AsyncSession, *, user_id: uuid.UUID) -> list[Routine]:
    await _require_user(session, user_id)
    return await load_user_routines(session, user_id=user_id)


async def get_routine(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    routine_id: uuid.UUID,
) -> Routine | None:
    stmt = _routines_query(include_takens=True).where(
        Routine.id == routine_id, Routine.user_id == user_id
    )
    result = await session.execute(stmt.execution_options(populate_existing=True))
    return result.scalars().unique().one_or_none()


async def delete_routine(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    routine_id: uuid.UUID,
) -> None:
    """Delete a routine together with its entries and taken records."""
    routine = await get_routine(session, user_id=user_id, routine_id=routine_id)
    if routine is None:
        raise RoutineNotFound("Could not find routine for provided id")

    async def _write(tx: AsyncSession) -> None:
        await tx.delete(routine)

    try:
        await unit_of_work(session, _write)
    except SQLAlchemyError as exc:
        logger.exception("Deleting routine %s failed", routine_id)
        raise DependencyFailure("Deleting routine failed, please try again") from exc


async def describe_routines(
    session: AsyncSession,
    routines: Sequence[Routine],
    *,
    user_id: uuid.UUID,
) -> list[RoutineRead]:
    """Serialize routines with medicine names joined in from both catalogs."""
    names = await medicine_service.resolve_medicine_names(
        session,
        [
            (entry.medicine_type, entry.medicine_id)
            for routine in routines
            for entry in routine.medicines
        ],
        user_id=user_id,
    )
    described: list[RoutineRead] = []
    for routine in routines:
        described.append(
            RoutineRead(
                id=routine.id,
                user_id=routine.user_id,
                name=routine.name,
                created_at=routine.created_at,
                medicines=[
                    RoutineMedicineRead(
                        id=entry.id,
                        medicine_type=entry.medicine_type,
                        medicine_id=entry.medicine_id,
                        medicine_name=names.get((entry.medicine_type, entry.medicine_id)),
                        schedule=[ScheduleDay.model_validate(row) for row in entry.schedule],
                    )
                    for entry in routine.medicines
                ],
                takens=[TakenRead.model_validate(taken) for taken in routine.takens],
            )
        )
    return described
