"""Resolve an instant into a user's local date, weekday and dose slot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.models.routine import TimeSlot, Weekday

LOCAL_DATE_FORMAT = "%d/%m/%Y"

# (first hour, slot); a slot runs until the next entry's first hour
SLOT_START_HOURS: tuple[tuple[int, TimeSlot], ...] = (
    (0, TimeSlot.MORNING),
    (12, TimeSlot.AFTERNOON),
    (17, TimeSlot.EVENING),
    (21, TimeSlot.NIGHT),
)


class UnresolvableTimeZone(ValueError):
    """Raised when a time zone identifier is not a known IANA zone."""


@dataclass(frozen=True, slots=True)
class LocalSlot:
    """A moment expressed in a user's local frame."""

    local_date: str
    local_weekday: Weekday
    current_slot_index: int
    local_hour: int

    @property
    def current_slot(self) -> TimeSlot:
        return list(TimeSlot)[self.current_slot_index]


def load_zone(name: str | None) -> ZoneInfo:
    """Return the ``ZoneInfo`` for ``name`` or raise ``UnresolvableTimeZone``."""
    if not name or not isinstance(name, str):
        raise UnresolvableTimeZone(f"Invalid time zone: {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise UnresolvableTimeZone(f"Invalid time zone: {name!r}") from exc


def is_valid_timezone(name: str | None) -> bool:
    try:
        load_zone(name)
    except UnresolvableTimeZone:
        return False
    return True


def slot_index_for_hour(hour: int) -> int:
    """Map a local clock hour (0-23) to a slot index."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range: {hour}")
    index = 0
    for position, (start_hour, _slot) in enumerate(SLOT_START_HOURS):
        if hour >= start_hour:
            index = position
    return index


def format_local_date(moment: datetime) -> str:
    return moment.strftime(LOCAL_DATE_FORMAT)


def resolve(now: datetime, timezone: str | None) -> LocalSlot:
    """Express ``now`` in ``timezone``.

    Naive datetimes are interpreted as UTC. The local date string, not the
    instant, identifies "today" for taken records, so every instant of one
    civil day yields the same string regardless of DST offsets.
    """
    zone = load_zone(timezone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    local = now.astimezone(zone)
    return LocalSlot(
        local_date=format_local_date(local),
        local_weekday=Weekday.from_iso(local.isoweekday()),
        current_slot_index=slot_index_for_hour(local.hour),
        local_hour=local.hour,
    )


__all__ = [
    "LOCAL_DATE_FORMAT",
    "LocalSlot",
    "SLOT_START_HOURS",
    "UnresolvableTimeZone",
    "format_local_date",
    "is_valid_timezone",
    "load_zone",
    "resolve",
    "slot_index_for_hour",
]
