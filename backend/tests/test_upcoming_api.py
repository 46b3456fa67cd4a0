"""Upcoming doses API tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest
from sqlalchemy import delete, update

from app.models import User
from app.services import dose_service

pytestmark = pytest.mark.asyncio

EVERY_DAY = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Wednesday 14/10/2026, 08:00 in Asia/Kolkata
WEDNESDAY_MORNING = datetime(2026, 10, 14, 2, 30, tzinfo=UTC)
# Wednesday 14/10/2026, 15:00 in Asia/Kolkata
WEDNESDAY_AFTERNOON = datetime(2026, 10, 14, 9, 30, tzinfo=UTC)


def _freeze(monkeypatch: pytest.MonkeyPatch, instant: datetime) -> None:
    class FakeDateTime:
        @staticmethod
        def now(tz: Any = None) -> datetime:
            return instant

    monkeypatch.setattr(dose_service, "datetime", FakeDateTime)


def _entry(medicine_id: Any, days: list[str], times: list[str]) -> dict[str, Any]:
    return {
        "medicine_type": "predefined",
        "medicine_id": str(medicine_id),
        "schedule": [{"day": day, "times": times} for day in days],
    }


async def _throat_infection(app_context: dict[str, Any], create_routine) -> dict[str, Any]:
    predefined = app_context["predefined"]
    return await create_routine(
        "Throat Infection",
        [
            _entry(predefined["Paracetamol"], EVERY_DAY, ["Morning", "Afternoon", "Evening"]),
            _entry(predefined["Azithromycin"], ["Saturday", "Sunday"], ["Morning"]),
        ],
    )


async def _upcoming(app_context: dict[str, Any]) -> list[dict[str, Any]]:
    response = await app_context["client"].get(
        "/api/v1/routines/upcoming", headers=app_context["headers"]
    )
    assert response.status_code == 200, response.text
    return response.json()


async def test_upcoming_lists_remaining_slots_for_today(
    app_context: dict[str, Any], create_routine, monkeypatch: pytest.MonkeyPatch
) -> None:
    _freeze(monkeypatch, WEDNESDAY_MORNING)
    routine = await _throat_infection(app_context, create_routine)

    rows = await _upcoming(app_context)

    assert [(row["medicine_name"], row["slot"]) for row in rows] == [
        ("Paracetamol", "Morning"),
        ("Paracetamol", "Afternoon"),
        ("Paracetamol", "Evening"),
    ]
    assert {row["local_date"] for row in rows} == {"14/10/2026"}
    assert {row["local_weekday"] for row in rows} == {"Wednesday"}
    assert {row["routine_medicine_id"] for row in rows} == {routine["medicines"][0]["id"]}


async def test_taken_dose_is_excluded_from_upcoming(
    app_context: dict[str, Any], create_routine, monkeypatch: pytest.MonkeyPatch
) -> None:
    _freeze(monkeypatch, WEDNESDAY_MORNING)
    routine = await _throat_infection(app_context, create_routine)

    response = await app_context["client"].post(
        "/api/v1/takens",
        json={
            "routine_id": routine["id"],
            "routine_medicine_id": routine["medicines"][0]["id"],
            "date": "14/10/2026",
            "day": "Wednesday",
            "slot": "Morning",
        },
        headers=app_context["headers"],
    )
    assert response.status_code == 201

    rows = await _upcoming(app_context)
    assert [row["slot"] for row in rows] == ["Afternoon", "Evening"]


async def test_taken_on_another_date_does_not_hide_today(
    app_context: dict[str, Any], create_routine, monkeypatch: pytest.MonkeyPatch
) -> None:
    _freeze(monkeypatch, WEDNESDAY_MORNING)
    routine = await _throat_infection(app_context, create_routine)

    response = await app_context["client"].post(
        "/api/v1/takens",
        json={
            "routine_id": routine["id"],
            "routine_medicine_id": routine["medicines"][0]["id"],
            "date": "07/10/2026",
            "day": "Wednesday",
            "slot": "Morning",
        },
        headers=app_context["headers"],
    )
    assert response.status_code == 201

    rows = await _upcoming(app_context)
    assert [row["slot"] for row in rows] == ["Morning", "Afternoon", "Evening"]


async def test_past_slots_are_not_listed(
    app_context: dict[str, Any], create_routine, monkeypatch: pytest.MonkeyPatch
) -> None:
    _freeze(monkeypatch, WEDNESDAY_AFTERNOON)
    await _throat_infection(app_context, create_routine)

    rows = await _upcoming(app_context)
    assert [row["slot"] for row in rows] == ["Afternoon", "Evening"]


async def test_rows_are_ordered_by_slot_then_routine(
    app_context: dict[str, Any], create_routine, monkeypatch: pytest.MonkeyPatch
) -> None:
    _freeze(monkeypatch, WEDNESDAY_MORNING)
    predefined = app_context["predefined"]
    first = await create_routine(
        "Vitamins", [_entry(predefined["Vitamin D3"], ["Wednesday"], ["Morning", "Night"])]
    )
    second = await create_routine(
        "Pain", [_entry(predefined["Paracetamol"], ["Wednesday"], ["Morning"])]
    )

    rows = await _upcoming(app_context)
    assert [(row["routine_id"], row["slot"]) for row in rows] == [
        (first["id"], "Morning"),
        (second["id"], "Morning"),
        (first["id"], "Night"),
    ]


async def test_upcoming_with_unresolvable_timezone_is_rejected(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    _freeze(monkeypatch, WEDNESDAY_MORNING)
    async with app_context["sessionmaker"]() as session:
        await session.execute(
            update(User).where(User.id == app_context["user_id"]).values(timezone="Not/AZone")
        )
        await session.commit()

    response = await app_context["client"].get(
        "/api/v1/routines/upcoming", headers=app_context["headers"]
    )
    assert response.status_code == 422


async def test_upcoming_for_missing_user_is_not_found(app_context: dict[str, Any]) -> None:
    async with app_context["sessionmaker"]() as session:
        await session.execute(delete(User).where(User.id == app_context["user_id"]))
        await session.commit()

    response = await app_context["client"].get(
        "/api/v1/routines/upcoming", headers=app_context["headers"]
    )
    assert response.status_code == 404
