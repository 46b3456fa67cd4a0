"""Dose reconciliation and the upcoming-doses query.

``outstanding_slots`` is the pure core: given one routine entry's weekly
schedule, a weekday, the first slot still ahead, and the taken records
known for the routine, it returns the slots still to be taken, in slot
order. ``upcoming_doses`` applies it to every routine of a user in the
user's local frame.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Routine, RoutineMedicine, Taken, TimeSlot, User, Weekday
from app.schemas.dose import UpcomingDose
from app.services import medicine_service, routine_service
from app.services.errors import TimeZoneResolutionFailed, UserNotFound
from app.services.time_slot_service import LocalSlot, UnresolvableTimeZone, resolve

_SLOTS: tuple[TimeSlot, ...] = tuple(TimeSlot)


@dataclass(frozen=True, slots=True)
class TakenKey:
    """Identity of a taken dose as used for reconciliation."""

    routine_medicine_id: uuid.UUID
    day: Weekday
    slot: TimeSlot
    date: str

    @classmethod
    def from_model(cls, taken: Taken) -> "TakenKey":
        return cls(
            routine_medicine_id=taken.routine_medicine_id,
            day=taken.day,
            slot=taken.slot,
            date=taken.date,
        )


@dataclass(frozen=True, slots=True)
class EntrySchedule:
    """Plain view of a routine entry's weekly schedule."""

    routine_medicine_id: uuid.UUID
    rows: tuple[tuple[Weekday, frozenset[TimeSlot]], ...]

    @classmethod
    def from_model(cls, entry: RoutineMedicine) -> "EntrySchedule":
        return cls(
            routine_medicine_id=entry.id,
            rows=tuple((row.day, frozenset(row.times)) for row in entry.schedule),
        )

    def slots_on(self, weekday: Weekday) -> frozenset[TimeSlot] | None:
        """Slots scheduled on ``weekday``; repeated day rows are merged."""
        matched: frozenset[TimeSlot] | None = None
        for day, slots in self.rows:
            if day == weekday:
                matched = slots if matched is None else matched | slots
        return matched


def outstanding_slots(
    entry: EntrySchedule,
    weekday: Weekday,
    from_slot_index: int,
    takens: Iterable[TakenKey],
    target_date: str,
) -> list[TimeSlot]:
    """Slots of ``entry`` on ``weekday`` at or after ``from_slot_index``
    that have no matching taken record for ``target_date``."""
    scheduled = entry.slots_on(weekday)
    if not scheduled:
        return []
    taken = {
        key.slot
        for key in takens
        if key.routine_medicine_id == entry.routine_medicine_id
        and key.day == weekday
        and key.date == target_date
    }
    return [
        slot
        for slot in _SLOTS[max(from_slot_index, 0):]
        if slot in scheduled and slot not in taken
    ]


def collect_upcoming(
    routines: Sequence[Routine],
    takens: Iterable[TakenKey],
    local: LocalSlot,
    names: dict[medicine_service.MedicineRef, str],
) -> list[UpcomingDose]:
    """Build due rows ordered by slot, then routine, then entry position."""
    taken_keys = list(takens)
    outstanding: dict[tuple[uuid.UUID, uuid.UUID], set[TimeSlot]] = {}
    for routine in routines:
        for entry in routine.medicines:
            outstanding[(routine.id, entry.id)] = set(
                outstanding_slots(
                    EntrySchedule.from_model(entry),
                    local.local_weekday,
                    local.current_slot_index,
                    taken_keys,
                    local.local_date,
                )
            )

    rows: list[UpcomingDose] = []
    for slot in _SLOTS[local.current_slot_index:]:
        for routine in routines:
            for entry in routine.medicines:
                if slot not in outstanding[(routine.id, entry.id)]:
                    continue
                rows.append(
                    UpcomingDose(
                        routine_id=routine.id,
                        routine_name=routine.name,
                        local_date=local.local_date,
                        local_weekday=local.local_weekday,
                        slot=slot,
                        routine_medicine_id=entry.id,
                        medicine_name=names.get((entry.medicine_type, entry.medicine_id)),
                    )
                )
    return rows


async def _load_takens_for_date(
    session: AsyncSession, routine_ids: Sequence[uuid.UUID], local_date: str
) -> list[TakenKey]:
    if not routine_ids:
        return []
    result = await session.execute(
        select(Taken).where(Taken.routine_id.in_(routine_ids), Taken.date == local_date)
    )
    return [TakenKey.from_model(taken) for taken in result.scalars().all()]


async def upcoming_for_user(
    session: AsyncSession, user: User, local: LocalSlot
) -> list[UpcomingDose]:
    """Outstanding doses of ``user`` from the current slot to the end of the day."""
    routines = await routine_service.load_user_routines(
        session, user_id=user.id, include_takens=False
    )
    takens = await _load_takens_for_date(
        session, [routine.id for routine in routines], local.local_date
    )
    names = await medicine_service.resolve_medicine_names(
        session,
        [
            (entry.medicine_type, entry.medicine_id)
            for routine in routines
            for entry in routine.medicines
        ],
        user_id=user.id,
    )
    return collect_upcoming(routines, takens, local, names)


async def upcoming_doses(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    now: datetime | None = None,
) -> list[UpcomingDose]:
    """Read-only query of what the user still has to take today."""
    user = await session.get(User, user_id)
    if user is None:
        raise UserNotFound()
    moment = now or datetime.now(UTC)
    try:
        local = resolve(moment, user.timezone)
    except UnresolvableTimeZone as exc:
        raise TimeZoneResolutionFailed(
            f"Could not resolve time zone {user.timezone!r} for user"
        ) from exc
    return await upcoming_for_user(session, user, local)


def unique_medicine_names(doses: Iterable[UpcomingDose]) -> list[str]:
    """Medicine names in order of first appearance, without repeats."""
    seen: dict[str, None] = {}
    for dose in doses:
        if dose.medicine_name:
            seen.setdefault(dose.medicine_name, None)
    return list(seen)


async def due_medicine_names(
    session: AsyncSession, user: User, local: LocalSlot
) -> list[str]:
    """Names of medicines still due for ``user`` today, without repeats."""
    return unique_medicine_names(await upcoming_for_user(session, user, local))
