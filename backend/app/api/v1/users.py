"""User account endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from app.api.deps import IdentityDep, SessionDep, http_error
from app.api.v1.auth import DEFAULT_RATE_DEP
from app.schemas.user import PushTokenCreate, UserCreate, UserRead
from app.services import user_service
from app.services.errors import MediRoutinesError

router = APIRouter()


@router.post(
    "/signup",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    dependencies=[DEFAULT_RATE_DEP],
)
async def signup(payload: UserCreate, session: SessionDep) -> UserRead:
    try:
        user = await user_service.create_user(session, payload)
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return UserRead.model_validate(user)


@router.get("/me", response_model=UserRead, summary="Current user profile")
async def read_current_user(session: SessionDep, identity: IdentityDep) -> UserRead:
    """Return the authenticated user's profile."""
    try:
        user = await user_service.require_user(session, identity.user_id)
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return UserRead.model_validate(user)


@router.post(
    "/me/push-tokens",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Register a device for reminders",
)
async def register_push_token(
    payload: PushTokenCreate, session: SessionDep, identity: IdentityDep
) -> Response:
    try:
        await user_service.register_push_token(
            session, user_id=identity.user_id, token=payload.token
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
