"""Medicine catalog endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Response, status

from app.api.deps import IdentityDep, SessionDep, http_error
from app.schemas.medicine import (
    PredefinedMedicineRead,
    UserDefinedMedicineCreate,
    UserDefinedMedicineRead,
)
from app.services import medicine_service
from app.services.errors import MediRoutinesError

router = APIRouter()


@router.get(
    "/predefined",
    response_model=list[PredefinedMedicineRead],
    summary="List the shared medicine catalog",
)
async def list_predefined(
    session: SessionDep, _identity: IdentityDep
) -> list[PredefinedMedicineRead]:
    medicines = await medicine_service.list_predefined_medicines(session)
    return [PredefinedMedicineRead.model_validate(medicine) for medicine in medicines]


@router.post(
    "/user-defined",
    response_model=UserDefinedMedicineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a personal medicine",
)
async def create_user_defined(
    payload: UserDefinedMedicineCreate, session: SessionDep, identity: IdentityDep
) -> UserDefinedMedicineRead:
    try:
        medicine = await medicine_service.create_user_defined_medicine(
            session, payload, user_id=identity.user_id
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return UserDefinedMedicineRead.model_validate(medicine)


@router.get(
    "/user-defined",
    response_model=list[UserDefinedMedicineRead],
    summary="List personal medicines",
)
async def list_user_defined(
    session: SessionDep, identity: IdentityDep
) -> list[UserDefinedMedicineRead]:
    try:
        medicines = await medicine_service.list_user_defined_medicines(
            session, user_id=identity.user_id
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return [UserDefinedMedicineRead.model_validate(medicine) for medicine in medicines]


@router.delete(
    "/user-defined/{medicine_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a personal medicine",
)
async def delete_user_defined(
    medicine_id: uuid.UUID, session: SessionDep, identity: IdentityDep
) -> Response:
    try:
        await medicine_service.delete_user_defined_medicine(
            session, user_id=identity.user_id, medicine_id=medicine_id
        )
    except MediRoutinesError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
