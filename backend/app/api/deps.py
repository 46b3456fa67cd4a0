"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.security import InvalidAccessToken, decode_access_token
from app.db.session import get_session
from app.services.errors import MediRoutinesError

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")


@dataclass(frozen=True, slots=True)
class Identity:
    """The authenticated caller as carried by the bearer token."""

    user_id: uuid.UUID
    email: str | None = None
    name: str | None = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_current_identity(
    token: Annotated[str, Depends(oauth2_scheme)],
) -> Identity:
    """Authenticate request via bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        claims = decode_access_token(token)
        user_id = uuid.UUID(claims["sub"])
    except (InvalidAccessToken, ValueError, TypeError) as exc:
        raise credentials_exception from exc
    return Identity(user_id=user_id, email=claims.get("email"), name=claims.get("name"))


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
IdentityDep = Annotated[Identity, Depends(get_current_identity)]


def http_error(exc: MediRoutinesError) -> HTTPException:
    """Translate a service error into the HTTP response reported to callers."""
    return HTTPException(status_code=exc.status_code, detail=str(exc))
