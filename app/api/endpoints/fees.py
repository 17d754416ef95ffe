# app/api/endpoints/fees.py

import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.exceptions import NotFoundError
from app.core.rbac import AllowRoles
from app.models.enums import FeeStatus, FeeType
from app.models.user import User, UserRole
from app.schemas.fee import FeeCreate, FeePage, FeePaymentRequest, FeeRead, FeeStats, StudentFeeSummary
from app.services.fee_service import (
    create_fee,
    get_fee_by_id,
    get_fee_stats,
    get_student_fee_summary,
    list_fees,
    record_payment,
)
from app.services.student_service import get_student_by_user_id

router = APIRouter(prefix="/api/fees", tags=["Fees"])


# ------------------------------------------------------------
# CREATE FEE RECORD
# ------------------------------------------------------------
@router.post("/", response_model=FeeRead, status_code=status.HTTP_201_CREATED)
async def create_fee_endpoint(
    payload: FeeCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    try:
        return await create_fee(session, payload, collected_by=current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ------------------------------------------------------------
# LIST FEES (filters + pagination)
# ------------------------------------------------------------
@router.get("/", response_model=FeePage)
async def list_fees_endpoint(
    student_id: Optional[UUID] = None,
    status_filter: Optional[FeeStatus] = Query(None, alias="status"),
    fee_type: Optional[FeeType] = None,
    academic_year: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    items, total = await list_fees(
        session,
        student_id=student_id,
        status=status_filter,
        fee_type=fee_type,
        academic_year=academic_year,
        search=search,
        page=page,
        limit=limit,
    )

    return {
        "count": len(items),
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if total else 0,
        "data": items,
    }


# ------------------------------------------------------------
# STATISTICS
# ------------------------------------------------------------
@router.get("/stats", response_model=FeeStats)
async def fee_stats_endpoint(
    academic_year: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    return await get_fee_stats(session, academic_year)


# ------------------------------------------------------------
# STUDENT SUMMARY (students: own record only)
# ------------------------------------------------------------
@router.get("/student/{student_id}", response_model=StudentFeeSummary)
async def student_fee_summary(
    student_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff, UserRole.Student)),
):
    if current_user.role == UserRole.Student:
        own = await get_student_by_user_id(session, current_user.id)
        if not own or own.id != student_id:
            logger.warning(f"User {current_user.email} tried to read fees of student {student_id}")
            raise HTTPException(status_code=403, detail="Not authorized to view this fee summary")

    try:
        return await get_student_fee_summary(session, student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ------------------------------------------------------------
# GET FEE RECORD
# ------------------------------------------------------------
@router.get("/{fee_id}", response_model=FeeRead)
async def get_fee_endpoint(
    fee_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    fee = await get_fee_by_id(session, fee_id)
    if not fee:
        raise HTTPException(status_code=404, detail="Fee record not found")
    return fee


# ------------------------------------------------------------
# RECORD PAYMENT
# ------------------------------------------------------------
@router.post("/{fee_id}/payments", response_model=FeeRead)
async def record_payment_endpoint(
    fee_id: UUID,
    payload: FeePaymentRequest,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    try:
        return await record_payment(session, fee_id, payload, collected_by=current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
