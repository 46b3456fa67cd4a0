"""Taken recording API tests."""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from app.core.security import get_password_hash
from app.models import Taken, User

pytestmark = pytest.mark.asyncio

WEDNESDAY = {"date": "14/10/2026", "day": "Wednesday"}


@pytest_asyncio.fixture()
async def routine(app_context: dict[str, Any], create_routine) -> dict[str, Any]:
    predefined = app_context["predefined"]
    return await create_routine(
        "Throat Infection",
        [
            {
                "medicine_type": "predefined",
                "medicine_id": str(predefined[name]),
                "schedule": [{"day": "Wednesday", "times": ["Morning", "Evening"]}],
            }
            for name in ("Paracetamol", "Azithromycin", "Vitamin D3")
        ],
    )


async def _taken_count(app_context: dict[str, Any]) -> int:
    async with app_context["sessionmaker"]() as session:
        return (await session.execute(select(func.count()).select_from(Taken))).scalar_one()


async def test_record_taken_then_conflict(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    client = app_context["client"]
    payload = {
        "routine_id": routine["id"],
        "routine_medicine_id": routine["medicines"][0]["id"],
        "slot": "Morning",
        **WEDNESDAY,
    }
    first = await client.post("/api/v1/takens", json=payload, headers=app_context["headers"])
    assert first.status_code == 201
    body = first.json()
    assert body["date"] == "14/10/2026"
    assert body["day"] == "Wednesday"
    assert body["slot"] == "Morning"

    second = await client.post("/api/v1/takens", json=payload, headers=app_context["headers"])
    assert second.status_code == 409
    assert "already" in second.json()["detail"].lower()

    evening = await client.post(
        "/api/v1/takens", json={**payload, "slot": "Evening"}, headers=app_context["headers"]
    )
    assert evening.status_code == 201
    assert await _taken_count(app_context) == 2


async def test_concurrent_duplicate_taken_succeeds_once(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    client = app_context["client"]
    payload = {
        "routine_id": routine["id"],
        "routine_medicine_id": routine["medicines"][1]["id"],
        "slot": "Morning",
        **WEDNESDAY,
    }
    responses = await asyncio.gather(
        client.post("/api/v1/takens", json=payload, headers=app_context["headers"]),
        client.post("/api/v1/takens", json=payload, headers=app_context["headers"]),
    )
    assert sorted(response.status_code for response in responses) == [201, 409]
    assert await _taken_count(app_context) == 1


async def test_taken_for_unknown_routine_or_entry(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    client = app_context["client"]
    unknown_routine = await client.post(
        "/api/v1/takens",
        json={
            "routine_id": str(uuid.uuid4()),
            "routine_medicine_id": routine["medicines"][0]["id"],
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert unknown_routine.status_code == 404

    unknown_entry = await client.post(
        "/api/v1/takens",
        json={
            "routine_id": routine["id"],
            "routine_medicine_id": str(uuid.uuid4()),
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert unknown_entry.status_code == 404
    assert await _taken_count(app_context) == 0


async def test_taken_on_another_users_routine_is_not_found(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    client = app_context["client"]
    async with app_context["sessionmaker"]() as session:
        session.add(
            User(
                name="Intruder",
                email="intruder@example.com",
                hashed_password=get_password_hash("secret1"),
                timezone="UTC",
            )
        )
        await session.commit()
    token = (
        await client.post(
            "/api/v1/auth/token",
            data={"username": "intruder@example.com", "password": "secret1"},
        )
    ).json()["access_token"]

    response = await client.post(
        "/api/v1/takens",
        json={
            "routine_id": routine["id"],
            "routine_medicine_id": routine["medicines"][0]["id"],
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [
        {"date": "2026-10-14"},
        {"date": "31/02/2026"},
        {"day": "Thursday"},
        {"slot": "Midnight"},
        {"routine_id": "not-a-uuid"},
    ],
)
async def test_taken_rejects_malformed_payload(
    app_context: dict[str, Any], routine: dict[str, Any], overrides: dict[str, str]
) -> None:
    payload = {
        "routine_id": routine["id"],
        "routine_medicine_id": routine["medicines"][0]["id"],
        "slot": "Morning",
        **WEDNESDAY,
        **overrides,
    }
    response = await app_context["client"].post(
        "/api/v1/takens", json=payload, headers=app_context["headers"]
    )
    assert response.status_code == 422


async def test_batch_records_every_medicine(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    ids = [entry["id"] for entry in routine["medicines"]]
    response = await app_context["client"].post(
        "/api/v1/takens/batch",
        json={
            "routine_id": routine["id"],
            "routine_medicine_ids": ids,
            "slot": "Evening",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert response.status_code == 201
    assert [item["routine_medicine_id"] for item in response.json()] == ids
    assert await _taken_count(app_context) == 3


async def test_batch_with_one_conflict_records_nothing(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    client = app_context["client"]
    ids = [entry["id"] for entry in routine["medicines"]]
    single = await client.post(
        "/api/v1/takens",
        json={
            "routine_id": routine["id"],
            "routine_medicine_id": ids[1],
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert single.status_code == 201

    batch = await client.post(
        "/api/v1/takens/batch",
        json={
            "routine_id": routine["id"],
            "routine_medicine_ids": ids,
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert batch.status_code == 409
    assert await _taken_count(app_context) == 1


async def test_batch_with_unknown_entry_records_nothing(
    app_context: dict[str, Any], routine: dict[str, Any]
) -> None:
    ids = [routine["medicines"][0]["id"], str(uuid.uuid4())]
    response = await app_context["client"].post(
        "/api/v1/takens/batch",
        json={
            "routine_id": routine["id"],
            "routine_medicine_ids": ids,
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert response.status_code == 404
    assert await _taken_count(app_context) == 0


@pytest.mark.parametrize("ids_factory", [lambda ids: [], lambda ids: [ids[0], ids[0]]])
async def test_batch_rejects_empty_or_repeated_ids(
    app_context: dict[str, Any], routine: dict[str, Any], ids_factory
) -> None:
    ids = [entry["id"] for entry in routine["medicines"]]
    response = await app_context["client"].post(
        "/api/v1/takens/batch",
        json={
            "routine_id": routine["id"],
            "routine_medicine_ids": ids_factory(ids),
            "slot": "Morning",
            **WEDNESDAY,
        },
        headers=app_context["headers"],
    )
    assert response.status_code == 422
