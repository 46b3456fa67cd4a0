"""User data access helpers."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash
from app.db.session import unit_of_work
from app.models import PushToken, User
from app.schemas.user import UserCreate
from app.services.errors import DependencyFailure, EmailAlreadyRegistered, UserNotFound

logger = logging.getLogger(__name__)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Return a user by email address."""
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    """Return a user by ID."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def require_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await get_user(session, user_id)
    if user is None:
        raise UserNotFound()
    return user


async def create_user(session: AsyncSession, payload: UserCreate) -> User:
    """Persist a new user with hashed password."""
    email = payload.email.lower()
    if await get_user_by_email(session, email) is not None:
        raise EmailAlreadyRegistered()

    user = User(
        name=payload.name,
        email=email,
        hashed_password=get_password_hash(payload.password),
        timezone=payload.timezone,
    )

    async def _write(tx: AsyncSession) -> User:
        tx.add(user)
        await tx.flush()
        return user

    try:
        await unit_of_work(session, _write)
    except IntegrityError as exc:
        raise EmailAlreadyRegistered() from exc
    except SQLAlchemyError as exc:
        logger.exception("Creating user failed")
        raise DependencyFailure("Failed to create user, please try again") from exc
    await session.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


async def list_push_tokens(session: AsyncSession, user_id: uuid.UUID) -> list[str]:
    result = await session.execute(
        select(PushToken.token)
        .where(PushToken.user_id == user_id)
        .order_by(PushToken.created_at, PushToken.id)
    )
    return list(result.scalars().all())


async def register_push_token(
    session: AsyncSession, *, user_id: uuid.UUID, token: str
) -> PushToken:
    """Attach a device token to the user.

    Registering a token already held by another user moves it; registering
    it again for the same user is a no-op.
    """
    await require_user(session, user_id)
    token = token.strip()
    result = await session.execute(select(PushToken).where(PushToken.token == token))
    existing = result.scalar_one_or_none()
    if existing is not None and existing.user_id == user_id:
        return existing

    async def _write(tx: AsyncSession) -> PushToken:
        if existing is not None:
            existing.user_id = user_id
            await tx.flush()
            return existing
        push_token = PushToken(user_id=user_id, token=token)
        tx.add(push_token)
        await tx.flush()
        return push_token

    try:
        return await unit_of_work(session, _write)
    except SQLAlchemyError as exc:
        logger.exception("Registering push token failed for user %s", user_id)
        raise DependencyFailure("Failed to register push token, please try again") from exc


async def prune_push_tokens(session: AsyncSession, tokens: Iterable[str]) -> int:
    """Remove tokens the delivery provider reported as permanently invalid."""
    stale = sorted(set(tokens))
    if not stale:
        return 0

    async def _write(tx: AsyncSession) -> int:
        result = await tx.execute(delete(PushToken).where(PushToken.token.in_(stale)))
        return result.rowcount or 0

    removed = await unit_of_work(session, _write)
    logger.info("Pruned %d stale push token(s)", removed)
    return removed
