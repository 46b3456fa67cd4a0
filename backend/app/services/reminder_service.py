"""Daily medication reminder sweep.

Each run scans users holding push tokens. A user whose local clock is in
the reminder hour, and who has not been reminded on that local date, gets
one notification listing the medicines still due today. Users are
processed in separate sessions so one failure never stops the sweep.
"""
from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.db.session import get_sessionmaker, unit_of_work
from app.integrations.fcm_client import DeliveryResult
from app.models import PushToken, User
from app.services import dose_service, user_service
from app.services.time_slot_service import UnresolvableTimeZone, resolve

logger = logging.getLogger(__name__)

REMINDER_KIND = "daily_reminder"


class Delivery(Protocol):
    async def deliver(
        self,
        tokens: Sequence[str],
        title: str,
        body: str,
        data: Mapping[str, str] | None = None,
    ) -> list[DeliveryResult]: ...


class ReminderOutcome(str, Enum):
    NOTIFIED = "notified"
    NOT_DUE = "not_due"
    ALREADY_REMINDED = "already_reminded"
    NOTHING_DUE = "nothing_due"
    NO_TOKENS = "no_tokens"
    DELIVERY_FAILED = "delivery_failed"
    INVALID_TIMEZONE = "invalid_timezone"
    MISSING_USER = "missing_user"
    ERROR = "error"


@dataclass
class SweepReport:
    """Summary of one sweep run."""

    started_at: datetime
    outcomes: dict[uuid.UUID, ReminderOutcome] = field(default_factory=dict)
    pruned_tokens: int = 0

    @property
    def users_scanned(self) -> int:
        return len(self.outcomes)

    @property
    def notified(self) -> int:
        return self.counts().get(ReminderOutcome.NOTIFIED, 0)

    def counts(self) -> Counter[ReminderOutcome]:
        return Counter(self.outcomes.values())


def build_reminder_message(names: Sequence[str]) -> str:
    return f"Your medicines for today: {', '.join(names)}."


async def _users_with_tokens(session: AsyncSession) -> list[uuid.UUID]:
    result = await session.execute(
        select(PushToken.user_id).distinct().order_by(PushToken.user_id)
    )
    return list(result.scalars().all())


async def _claim_reminder(session: AsyncSession, user_id: uuid.UUID, local_date: str) -> bool:
    """Atomically mark ``local_date`` as reminded; False when another run already has."""

    async def _write(tx: AsyncSession) -> int:
        result = await tx.execute(
            update(User)
            .where(
                User.id == user_id,
                or_(User.last_reminded_on.is_(None), User.last_reminded_on != local_date),
            )
            .values(last_reminded_on=local_date)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    return await unit_of_work(session, _write) == 1


async def _release_claim(
    session: AsyncSession, user_id: uuid.UUID, local_date: str, previous: str | None
) -> None:
    async def _write(tx: AsyncSession) -> None:
        await tx.execute(
            update(User)
            .where(User.id == user_id, User.last_reminded_on == local_date)
            .values(last_reminded_on=previous)
            .execution_options(synchronize_session=False)
        )

    await unit_of_work(session, _write)


async def _prune_stale_tokens(
    session: AsyncSession, results: Sequence[DeliveryResult], report: SweepReport
) -> None:
    stale = [result.token for result in results if result.permanent]
    if not stale:
        return
    try:
        report.pruned_tokens += await user_service.prune_push_tokens(session, stale)
    except SQLAlchemyError:
        logger.exception("Pruning %d stale push token(s) failed", len(stale))


async def remind_user(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    now: datetime,
    delivery: Delivery,
    report: SweepReport,
) -> ReminderOutcome:
    """Run the reminder state machine for a single user."""
    settings = get_settings()
    user = await session.get(User, user_id)
    if user is None:
        return ReminderOutcome.MISSING_USER

    local = resolve(now, user.timezone)
    if local.local_hour != settings.reminder_hour:
        return ReminderOutcome.NOT_DUE
    if user.last_reminded_on == local.local_date:
        return ReminderOutcome.ALREADY_REMINDED

    names = await dose_service.due_medicine_names(session, user, local)
    if not names:
        return ReminderOutcome.NOTHING_DUE

    tokens = await user_service.list_push_tokens(session, user_id)
    if not tokens:
        return ReminderOutcome.NO_TOKENS

    # Claimed before sending; at most one process delivers a given local date.
    previous = user.last_reminded_on
    if not await _claim_reminder(session, user_id, local.local_date):
        return ReminderOutcome.ALREADY_REMINDED

    try:
        results = await delivery.deliver(
            tokens,
            settings.reminder_title,
            build_reminder_message(names),
            {"type": REMINDER_KIND, "date": local.local_date},
        )
    except Exception:
        await _release_claim(session, user_id, local.local_date, previous)
        raise

    await _prune_stale_tokens(session, results, report)
    if not any(result.success for result in results):
        await _release_claim(session, user_id, local.local_date, previous)
        return ReminderOutcome.DELIVERY_FAILED
    return ReminderOutcome.NOTIFIED


async def run_reminder_sweep(
    now: datetime | None = None,
    *,
    delivery: Delivery,
    sessionmaker: async_sessionmaker[AsyncSession] | None = None,
) -> SweepReport:
    """Scan every user with a push token and remind those in their reminder hour."""
    moment = now or datetime.now(UTC)
    factory = sessionmaker or get_sessionmaker()
    report = SweepReport(started_at=moment)

    async with factory() as session:
        user_ids = await _users_with_tokens(session)

    for user_id in user_ids:
        async with factory() as session:
            try:
                outcome = await remind_user(
                    session, user_id, now=moment, delivery=delivery, report=report
                )
            except UnresolvableTimeZone:
                logger.warning("Skipping reminder for user %s: unresolvable time zone", user_id)
                outcome = ReminderOutcome.INVALID_TIMEZONE
            except Exception:
                logger.exception("Reminder failed for user %s", user_id)
                outcome = ReminderOutcome.ERROR
        logger.debug("Reminder outcome for user %s: %s", user_id, outcome.value)
        report.outcomes[user_id] = outcome

    counts = report.counts()
    logger.info(
        "Reminder sweep scanned %d user(s): %d notified, %d failed, %d token(s) pruned",
        report.users_scanned,
        counts.get(ReminderOutcome.NOTIFIED, 0),
        counts.get(ReminderOutcome.ERROR, 0) + counts.get(ReminderOutcome.DELIVERY_FAILED, 0),
        report.pruned_tokens,
    )
    return report
