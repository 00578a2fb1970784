"""
CaseDesk Backend — Case Route Handlers
========================================

What:  HTTP surface for case records.
How:   Extracts path/query/body data, delegates to CaseService, wraps the
       result in the success envelope. Errors raised by the service are
       formatted by the global exception handlers in main.py.

Routes (mounted under API_PREFIX):
    GET    /cases          list (page, limit, search, businessName, department, coid, mid)
    GET    /cases/{id}     fetch one
    POST   /cases          create
    PUT    /cases/{id}     partial update
    DELETE /cases/{id}     delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.case import (
    CaseCreate,
    CaseFilters,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
)
from app.schemas.common import ApiResponse, ErrorResponse
from app.services.case_service import case_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cases", tags=["Cases"])


@router.get(
    "",
    response_model=ApiResponse[CaseListResponse],
    responses={
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List cases with filtering, search and pagination",
)
async def list_cases(
    # Raw strings: unparseable or non-positive values fall back to defaults
    page: Optional[str] = Query(default=None, description="1-indexed page number (default 1)"),
    limit: Optional[str] = Query(
        default=None,
        description="Page size (defaults to DEFAULT_PAGE_SIZE; clamped by MAX_PAGE_SIZE when set)",
    ),
    search: Optional[str] = Query(default=None, description="Full-text search string"),
    business_name: Optional[str] = Query(default=None, alias="businessName"),
    department: Optional[str] = Query(default=None),
    coid: Optional[str] = Query(default=None),
    mid: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CaseListResponse]:
    """Newest cases first; `total` and `pages` describe the whole filtered set."""
    filters = CaseFilters(
        search=search,
        business_name=business_name,
        department=department,
        coid=coid,
        mid=mid,
    )
    result = await case_service.list_cases(db=db, filters=filters, page=page, limit=limit)
    return ApiResponse[CaseListResponse](data=result)


@router.get(
    "/{case_id}",
    response_model=ApiResponse[CaseResponse],
    responses={
        404: {"description": "Case not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single case by ID",
)
async def get_case(
    case_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CaseResponse]:
    # Malformed ids are answered with 404, not 422
    result = await case_service.get_case(db=db, case_id=case_id)
    return ApiResponse[CaseResponse](data=result)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[CaseResponse],
    responses={
        400: {"description": "Missing fields, invalid values or duplicate case number", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a case",
)
async def create_case(
    payload: CaseCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CaseResponse]:
    logger.info("Received create request for caseNumber=%s", payload.case_number)
    result = await case_service.create_case(db=db, payload=payload)
    return ApiResponse[CaseResponse](data=result)


@router.put(
    "/{case_id}",
    response_model=ApiResponse[CaseResponse],
    responses={
        400: {"description": "Invalid values or duplicate case number", "model": ErrorResponse},
        404: {"description": "Case not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a case (only submitted fields change)",
)
async def update_case(
    case_id: str,
    payload: CaseUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CaseResponse]:
    result = await case_service.update_case(db=db, case_id=case_id, payload=payload)
    return ApiResponse[CaseResponse](data=result)


@router.delete(
    "/{case_id}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Case not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a case",
)
async def delete_case(
    case_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await case_service.delete_case(db=db, case_id=case_id)
    return Response(status_code=204)
