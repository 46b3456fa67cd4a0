"""Taken dose recording.

Recording is all-or-nothing: the existence check and the insert share one
transaction, and both single and batch calls either persist every record
or none. Calls for the same routine are serialized in-process; the unique
constraint on ``takens`` rejects races between processes.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from weakref import WeakValueDictionary

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import unit_of_work
from app.models import Routine, RoutineMedicine, Taken, TimeSlot, Weekday
from app.services.errors import (
    AlreadyTaken,
    MedicineNotInRoutine,
    RecordingFailed,
    RoutineNotFound,
)

logger = logging.getLogger(__name__)

_routine_locks: "WeakValueDictionary[uuid.UUID, asyncio.Lock]" = WeakValueDictionary()


def _lock_for(routine_id: uuid.UUID) -> asyncio.Lock:
    lock = _routine_locks.get(routine_id)
    if lock is None:
        lock = asyncio.Lock()
        _routine_locks[routine_id] = lock
    return lock


async def _get_owned_routine(
    session: AsyncSession, *, user_id: uuid.UUID, routine_id: uuid.UUID
) -> Routine:
    routine = await session.get(Routine, routine_id)
    if routine is None or routine.user_id != user_id:
        raise RoutineNotFound("Routine not found.")
    return routine


async def _routine_medicine_ids(
    session: AsyncSession, routine_id: uuid.UUID
) -> set[uuid.UUID]:
    result = await session.execute(
        select(RoutineMedicine.id).where(RoutineMedicine.routine_id == routine_id)
    )
    return set(result.scalars().all())


async def _existing_taken(
    session: AsyncSession,
    *,
    routine_id: uuid.UUID,
    routine_medicine_ids: Sequence[uuid.UUID],
    date: str,
    day: Weekday,
    slot: TimeSlot,
) -> Taken | None:
    result = await session.execute(
        select(Taken)
        .where(
            Taken.routine_id == routine_id,
            Taken.routine_medicine_id.in_(routine_medicine_ids),
            Taken.day == day,
            Taken.slot == slot,
            Taken.date == date,
        )
        .limit(1)
    )
    return result.scalars().first()


async def record_taken_multiple(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    routine_id: uuid.UUID,
    routine_medicine_ids: Sequence[uuid.UUID],
    date: str,
    day: Weekday,
    slot: TimeSlot,
) -> list[Taken]:
    """Record several medicines of one routine as taken for the same dose slot.

    Raises ``RoutineNotFound`` when the routine does not exist for the user,
    ``MedicineNotInRoutine`` when any id is not an entry of the routine,
    ``AlreadyTaken`` when any of the doses was already recorded, and
    ``RecordingFailed`` when storage fails; in every case nothing is saved.
    """
    requested = list(dict.fromkeys(routine_medicine_ids))
    if not requested:
        raise MedicineNotInRoutine("No medicines given for routine.")

    async with _lock_for(routine_id):
        await _get_owned_routine(session, user_id=user_id, routine_id=routine_id)

        known = await _routine_medicine_ids(session, routine_id)
        if not set(requested) <= known:
            raise MedicineNotInRoutine(
                "Medicine not found in routine."
                if len(requested) == 1
                else "One or more medicines not found in routine."
            )

        existing = await _existing_taken(
            session,
            routine_id=routine_id,
            routine_medicine_ids=requested,
            date=date,
            day=day,
            slot=slot,
        )
        if existing is not None:
            raise AlreadyTaken(
                "Medicine already marked as taken for this slot."
                if len(requested) == 1
                else "One or more medicines already marked as taken."
            )

        takens = [
            Taken(
                routine_id=routine_id,
                routine_medicine_id=routine_medicine_id,
                date=date,
                day=day,
                slot=slot,
            )
            for routine_medicine_id in requested
        ]

        async def _write(tx: AsyncSession) -> list[Taken]:
            tx.add_all(takens)
            await tx.flush()
            return takens

        try:
            await unit_of_work(session, _write)
        except IntegrityError as exc:
            logger.info(
                "Concurrent taken record for routine %s on %s %s", routine_id, date, slot.value
            )
            raise AlreadyTaken("Medicine already marked as taken for this slot.") from exc
        except SQLAlchemyError as exc:
            logger.exception("Recording taken medicines failed for routine %s", routine_id)
            raise RecordingFailed() from exc

    logger.info(
        "Recorded %d taken medicine(s) for routine %s on %s %s",
        len(takens),
        routine_id,
        date,
        slot.value,
    )
    return takens


async def record_taken(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    routine_id: uuid.UUID,
    routine_medicine_id: uuid.UUID,
    date: str,
    day: Weekday,
    slot: TimeSlot,
) -> Taken:
    """Record one routine medicine as taken; see ``record_taken_multiple``."""
    (taken,) = await record_taken_multiple(
        session,
        user_id=user_id,
        routine_id=routine_id,
        routine_medicine_ids=[routine_medicine_id],
        date=date,
        day=day,
        slot=slot,
    )
    return taken
