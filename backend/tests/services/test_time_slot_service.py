"""Tests for local slot resolution."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.models import TimeSlot, Weekday
from app.services import time_slot_service
from app.services.time_slot_service import UnresolvableTimeZone, resolve


@pytest.mark.parametrize(
    ("hour", "slot"),
    [
        (0, TimeSlot.MORNING),
        (11, TimeSlot.MORNING),
        (12, TimeSlot.AFTERNOON),
        (16, TimeSlot.AFTERNOON),
        (17, TimeSlot.EVENING),
        (20, TimeSlot.EVENING),
        (21, TimeSlot.NIGHT),
        (23, TimeSlot.NIGHT),
    ],
)
def test_slot_boundaries(hour: int, slot: TimeSlot) -> None:
    assert time_slot_service.slot_index_for_hour(hour) == slot.order


@pytest.mark.parametrize("hour", [-1, 24])
def test_hour_out_of_range(hour: int) -> None:
    with pytest.raises(ValueError):
        time_slot_service.slot_index_for_hour(hour)


def test_resolve_uses_the_users_zone_for_date_and_weekday() -> None:
    # 20:00 UTC on Wednesday is 01:30 Thursday in Kolkata
    local = resolve(datetime(2026, 10, 14, 20, 0, tzinfo=UTC), "Asia/Kolkata")
    assert local.local_date == "15/10/2026"
    assert local.local_weekday is Weekday.THURSDAY
    assert local.current_slot is TimeSlot.MORNING
    assert local.local_hour == 1

    # and 19:00 Wednesday in Honolulu
    local = resolve(datetime(2026, 10, 15, 5, 0, tzinfo=UTC), "Pacific/Honolulu")
    assert local.local_date == "14/10/2026"
    assert local.local_weekday is Weekday.WEDNESDAY
    assert local.current_slot is TimeSlot.EVENING


def test_naive_instants_are_treated_as_utc() -> None:
    naive = resolve(datetime(2026, 10, 14, 12, 0), "UTC")
    aware = resolve(datetime(2026, 10, 14, 12, 0, tzinfo=UTC), "UTC")
    assert naive == aware
    assert naive.current_slot is TimeSlot.AFTERNOON


def test_dst_transition_keeps_one_local_date() -> None:
    # New York springs forward at 02:00 local on 08/03/2026
    before = resolve(datetime(2026, 3, 8, 6, 30, tzinfo=UTC), "America/New_York")
    after = resolve(datetime(2026, 3, 8, 7, 30, tzinfo=UTC), "America/New_York")
    assert before.local_hour == 1
    assert after.local_hour == 3
    assert before.local_date == after.local_date == "08/03/2026"
    assert before.local_weekday is after.local_weekday is Weekday.SUNDAY


@pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "", None, "../etc/passwd"])
def test_unresolvable_zone(zone: str | None) -> None:
    with pytest.raises(UnresolvableTimeZone):
        resolve(datetime(2026, 10, 14, tzinfo=UTC), zone)
    assert time_slot_service.is_valid_timezone(zone) is False


def test_weekday_from_iso() -> None:
    assert Weekday.from_iso(1) is Weekday.MONDAY
    assert Weekday.from_iso(7) is Weekday.SUNDAY
