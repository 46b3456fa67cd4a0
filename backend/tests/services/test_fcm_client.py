"""Tests for push delivery result mapping."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from firebase_admin import exceptions, messaging

from app.integrations import fcm_client
from app.integrations.fcm_client import FCMClient

pytestmark = pytest.mark.asyncio


async def test_unconfigured_client_reports_transient_failures() -> None:
    client = FCMClient(None)
    results = await client.deliver(["a", "b", "a", ""], "Title", "Body")
    assert [result.token for result in results] == ["a", "b"]
    assert all(not result.success and not result.permanent for result in results)
    assert {result.error_code for result in results} == {"not-configured"}


async def test_empty_token_list_sends_nothing() -> None:
    assert await FCMClient("creds.json").deliver([], "Title", "Body") == []


async def test_results_flag_permanent_token_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    client = FCMClient("creds.json")
    monkeypatch.setattr(client, "_get_app", lambda: object())
    sent: list[messaging.MulticastMessage] = []

    def fake_send(message, app=None):
        sent.append(message)
        return SimpleNamespace(
            responses=[
                SimpleNamespace(success=True, exception=None),
                SimpleNamespace(
                    success=False,
                    exception=messaging.UnregisteredError("Requested entity was not found."),
                ),
                SimpleNamespace(
                    success=False,
                    exception=messaging.QuotaExceededError("Quota exceeded."),
                ),
            ]
        )

    monkeypatch.setattr(fcm_client.messaging, "send_each_for_multicast", fake_send)

    results = await client.deliver(
        ["ok", "gone", "busy"], "Medication Reminder", "Your medicines for today: A."
    )

    assert len(sent) == 1
    assert sent[0].tokens == ["ok", "gone", "busy"]
    assert [(r.token, r.success, r.permanent) for r in results] == [
        ("ok", True, False),
        ("gone", False, True),
        ("busy", False, False),
    ]
    assert results[1].error_code == "NOT_FOUND"


async def test_failed_chunk_keeps_earlier_chunk_results(monkeypatch: pytest.MonkeyPatch) -> None:
    client = FCMClient("creds.json")
    monkeypatch.setattr(client, "_get_app", lambda: object())
    monkeypatch.setattr(fcm_client, "MULTICAST_LIMIT", 2)
    sent: list[list[str]] = []

    def fake_send(message, app=None):
        sent.append(list(message.tokens))
        if len(sent) > 1:
            raise exceptions.UnavailableError("Service unavailable.")
        return SimpleNamespace(
            responses=[SimpleNamespace(success=True, exception=None) for _ in message.tokens]
        )

    monkeypatch.setattr(fcm_client.messaging, "send_each_for_multicast", fake_send)

    results = await client.deliver(["t1", "t2", "t3"], "Medication Reminder", "Body")

    assert sent == [["t1", "t2"], ["t3"]]
    assert [(r.token, r.success, r.permanent) for r in results] == [
        ("t1", True, False),
        ("t2", True, False),
        ("t3", False, False),
    ]
    assert results[2].error_code == "UNAVAILABLE"
