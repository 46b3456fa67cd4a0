"""Endpoints recording doses as taken."""

from __future__ import annotations

from fastapi import APIRouter, status

from app.api.deps import IdentityDep, SessionDep, http_error
from app.schemas.taken import TakenBatchCreate, TakenCreate, TakenRead
from app.services import taken_service
from app.services.errors import MediRoutinesError

router = APIRouter()


@router.post(
    "",
    response_model=TakenRead,
    status_code=status.HTTP_201_CREATED,
    summary="Mark a medicine as taken",
)
async def record_taken(
    payload: TakenCreate, session: SessionDep, identity: IdentityDep
) -> TakenRead:
    try:
        taken = await taken_service.record_taken(
            session,
            user_id=identity.user_id,
            routine_id=payload.routine_id,
            routine_medicine_id=payload.routine_medicine_id,
            date=payload.date,
            day=payload.day,
            slot=payload.slot,
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return TakenRead.model_validate(taken)


@router.post(
    "/batch",
    response_model=list[TakenRead],
    status_code=status.HTTP_201_CREATED,
    summary="Mark several medicines of a routine as taken",
)
async def record_taken_batch(
    payload: TakenBatchCreate, session: SessionDep, identity: IdentityDep
) -> list[TakenRead]:
    """All medicines are recorded, or none are."""
    try:
        takens = await taken_service.record_taken_multiple(
            session,
            user_id=identity.user_id,
            routine_id=payload.routine_id,
            routine_medicine_ids=payload.routine_medicine_ids,
            date=payload.date,
            day=payload.day,
            slot=payload.slot,
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return [TakenRead.model_validate(taken) for taken in takens]
