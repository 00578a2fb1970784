"""
CaseDesk Backend — Custom Field Route Handlers
================================================

Routes (mounted under API_PREFIX, registered before the /cases/{id} routes
so `custom-fields` is never read as a case id):
    GET    /cases/custom-fields        list definitions
    POST   /cases/custom-fields        create definition
    DELETE /cases/custom-fields/{id}   delete definition by `_id`
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.custom_field import CustomFieldCreate, CustomFieldResponse
from app.services.custom_field_service import custom_field_service

router = APIRouter(prefix="/cases/custom-fields", tags=["Custom Fields"])


@router.get(
    "",
    response_model=ApiResponse[List[CustomFieldResponse]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List custom field definitions",
)
async def list_custom_fields(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CustomFieldResponse]]:
    fields = await custom_field_service.list_custom_fields(db=db)
    return ApiResponse[List[CustomFieldResponse]](data=fields)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[CustomFieldResponse],
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a custom field definition",
)
async def create_custom_field(
    payload: CustomFieldCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CustomFieldResponse]:
    field = await custom_field_service.create_custom_field(db=db, payload=payload)
    return ApiResponse[CustomFieldResponse](data=field)


@router.delete(
    "/{field_id}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Custom field not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a custom field definition",
)
async def delete_custom_field(
    field_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await custom_field_service.delete_custom_field(db=db, record_id=field_id)
    return Response(status_code=204)
