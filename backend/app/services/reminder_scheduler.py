"""In-process scheduling of the reminder sweep."""
from __future__ import annotations

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.services import reminder_service
from app.services.reminder_service import Delivery, SweepReport

logger = logging.getLogger(__name__)

JOB_ID = "reminder_sweep"


class ReminderScheduler:
    """Run ``run_reminder_sweep`` on a cron cadence without overlapping runs."""

    def __init__(
        self,
        delivery: Delivery,
        *,
        cron_minutes: str | None = None,
        sessionmaker: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._delivery = delivery
        self._cron_minutes = cron_minutes or get_settings().reminder_cron_minutes
        self._sessionmaker = sessionmaker
        self._scheduler: AsyncIOScheduler | None = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        scheduler = AsyncIOScheduler(timezone="UTC")
        scheduler.add_job(
            self._tick,
            CronTrigger(minute=self._cron_minutes, timezone="UTC"),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Reminder scheduler started (minutes=%s)", self._cron_minutes)

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Reminder scheduler stopped")

    async def run_now(self) -> SweepReport | None:
        """Run one sweep immediately; returns None if a sweep is in progress."""
        if self._lock.locked():
            logger.info("Reminder sweep already running; skipping this tick")
            return None
        async with self._lock:
            return await reminder_service.run_reminder_sweep(
                delivery=self._delivery, sessionmaker=self._sessionmaker
            )

    async def _tick(self) -> None:
        try:
            await self.run_now()
        except Exception:
            logger.exception("Reminder sweep crashed")
