"""Run one reminder sweep outside the API process."""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import UTC, datetime

from app.core.config import get_settings
from app.db.session import dispose_engine
from app.integrations.fcm_client import FCMClient
from app.services.reminder_service import run_reminder_sweep


async def main(now: datetime | None) -> None:
    settings = get_settings()
    try:
        report = await run_reminder_sweep(
            now, delivery=FCMClient(settings.firebase_credentials_path)
        )
    finally:
        await dispose_engine()
    for outcome, count in sorted(report.counts().items()):
        print(f"{outcome.value}: {count}")
    print(f"pruned tokens: {report.pruned_tokens}")


def _parse_instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Send daily medication reminders")
    parser.add_argument(
        "--now",
        type=_parse_instant,
        default=None,
        help="ISO-8601 instant to evaluate instead of the current time",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(args.now))
