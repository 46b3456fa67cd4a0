"""Routine endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Response, status

from app.api.deps import IdentityDep, SessionDep, http_error
from app.schemas.dose import UpcomingDose
from app.schemas.routine import RoutineCreate, RoutineRead
from app.services import dose_service, routine_service
from app.services.errors import MediRoutinesError, RoutineNotFound

router = APIRouter()


@router.post(
    "",
    response_model=RoutineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a routine",
)
async def create_routine(
    payload: RoutineCreate, session: SessionDep, identity: IdentityDep
) -> RoutineRead:
    """Create a routine; nothing is stored if any medicine reference is unknown."""
    try:
        routine = await routine_service.create_routine(
            session, payload, user_id=identity.user_id
        )
        (described,) = await routine_service.describe_routines(
            session, [routine], user_id=identity.user_id
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return described


@router.get("", response_model=list[RoutineRead], summary="List routines")
async def list_routines(session: SessionDep, identity: IdentityDep) -> list[RoutineRead]:
    try:
        routines = await routine_service.list_routines(session, user_id=identity.user_id)
        return await routine_service.describe_routines(
            session, routines, user_id=identity.user_id
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc


@router.get(
    "/upcoming",
    response_model=list[UpcomingDose],
    summary="Doses still due today",
)
async def upcoming_doses(session: SessionDep, identity: IdentityDep) -> list[UpcomingDose]:
    """Outstanding doses from the current local slot to the end of the local day."""
    try:
        return await dose_service.upcoming_doses(session, user_id=identity.user_id)
    except MediRoutinesError as exc:
        raise http_error(exc) from exc


@router.get("/{routine_id}", response_model=RoutineRead, summary="Get routine")
async def get_routine(
    routine_id: uuid.UUID, session: SessionDep, identity: IdentityDep
) -> RoutineRead:
    routine = await routine_service.get_routine(
        session, user_id=identity.user_id, routine_id=routine_id
    )
    if routine is None:
        raise http_error(RoutineNotFound("Could not find routine for provided id"))
    (described,) = await routine_service.describe_routines(
        session, [routine], user_id=identity.user_id
    )
    return described


@router.delete(
    "/{routine_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete routine",
)
async def delete_routine(
    routine_id: uuid.UUID, session: SessionDep, identity: IdentityDep
) -> Response:
    try:
        await routine_service.delete_routine(
            session, user_id=identity.user_id, routine_id=routine_id
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
