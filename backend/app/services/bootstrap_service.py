"""Bootstrap helpers for default data."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.db.session import get_sessionmaker, unit_of_work
from app.models import PredefinedMedicine

logger = logging.getLogger(__name__)

DEFAULT_PREDEFINED_MEDICINES: tuple[str, ...] = (
    "Amoxicillin",
    "Atorvastatin",
    "Azithromycin",
    "Cetirizine",
    "Ibuprofen",
    "Levothyroxine",
    "Metformin",
    "Omeprazole",
    "Paracetamol",
    "Vitamin D3",
)


async def seed_predefined_medicines(
    session: AsyncSession, names: Iterable[str] = DEFAULT_PREDEFINED_MEDICINES
) -> list[str]:
    """Insert catalog names that are not present yet; returns the added names."""
    wanted = list(dict.fromkeys(name.strip() for name in names if name.strip()))
    if not wanted:
        return []
    result = await session.execute(
        select(PredefinedMedicine.name).where(PredefinedMedicine.name.in_(wanted))
    )
    existing = set(result.scalars().all())
    missing = [name for name in wanted if name not in existing]
    if not missing:
        return []

    async def _write(tx: AsyncSession) -> None:
        tx.add_all(PredefinedMedicine(name=name) for name in missing)

    await unit_of_work(session, _write)
    logger.info("Seeded %d predefined medicine(s)", len(missing))
    return missing


async def ensure_predefined_catalog(
    sessionmaker: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """Seed the default catalog when enabled in settings."""
    settings = get_settings()
    if not settings.seed_predefined_medicines:
        return
    factory = sessionmaker or get_sessionmaker(settings.database_url)
    async with factory() as session:
        await seed_predefined_medicines(session)
