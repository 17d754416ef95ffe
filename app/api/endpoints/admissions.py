# app/api/endpoints/admissions.py

import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.rate_limiter import limiter
from app.core.rbac import AllowRoles
from app.models.admission import Admission
from app.models.enums import AdmissionStatus
from app.models.user import User, UserRole
from app.schemas.admission import (
    AdmissionCreate,
    AdmissionPage,
    AdmissionProcessRequest,
    AdmissionRead,
    AdmissionStats,
    AdmissionUpdate,
)
from app.services.admission_service import (
    AdmissionSaveResult,
    create_admission,
    delete_admission,
    get_admission,
    get_admission_stats,
    list_admissions,
    process_admission,
    update_admission,
)
from app.services.audit_service import log_activity
from app.services.email_service import (
    send_admission_approved_email,
    send_admission_received_email,
    send_admission_rejected_email,
)

router = APIRouter(
    prefix="/api/admissions",
    tags=["Admissions"]
)


def _raise_http(e: Exception, action: str):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.exception(f"Unexpected error while trying to {action}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An internal error occurred while trying to {action}."
    )


def _queue_notifications(
    background_tasks: BackgroundTasks,
    result: AdmissionSaveResult,
    actor: User,
    action: str,
):
    admission = result.admission

    details = {"status": admission.status.value}
    if result.converted:
        details.update({
            "student_id": str(result.student.id),
            "registration_number": result.student.registration_number,
            "user_id": str(result.user.id) if result.user else None,
            "account_created": result.account_created,
        })

    background_tasks.add_task(
        log_activity,
        action=action,
        actor_id=actor.id,
        actor_role=actor.role.value,
        actor_name=actor.name,
        admission_id=admission.id,
        remarks=admission.remarks,
        details=details,
    )

    if not admission.email:
        return

    email_data = {
        "name": f"{admission.first_name} {admission.last_name}",
        "email": admission.email,
        "application_number": admission.application_number,
    }

    if result.converted:
        email_data["registration_number"] = result.student.registration_number
        email_data["temporary_password"] = result.temporary_password
        background_tasks.add_task(send_admission_approved_email, email_data)

    elif admission.status == AdmissionStatus.Rejected and result.status_changed:
        email_data["remarks"] = admission.remarks
        background_tasks.add_task(send_admission_rejected_email, email_data)


# ------------------------------------------------------------
# SUBMIT APPLICATION (public form)
# ------------------------------------------------------------
@router.post("", response_model=AdmissionRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.PUBLIC_FORM_RATE_LIMIT)
async def submit_admission(
    request: Request,
    payload: AdmissionCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        admission = await create_admission(session, payload)
    except Exception as e:
        _raise_http(e, "submit the application")

    background_tasks.add_task(
        log_activity,
        action="ADMISSION_SUBMITTED",
        admission_id=admission.id,
        details={"application_number": admission.application_number},
    )

    if admission.email:
        background_tasks.add_task(
            send_admission_received_email,
            {
                "name": f"{admission.first_name} {admission.last_name}",
                "email": admission.email,
                "application_number": admission.application_number,
            },
        )

    return admission


# ------------------------------------------------------------
# LIST (filters + pagination)
# ------------------------------------------------------------
@router.get("", response_model=AdmissionPage)
async def list_admissions_endpoint(
    status_filter: Optional[AdmissionStatus] = Query(None, alias="status"),
    course_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    items, total = await list_admissions(
        session,
        status=status_filter,
        course_id=course_id,
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
@router.get("/stats", response_model=AdmissionStats)
async def admission_stats(
    academic_year: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    return await get_admission_stats(session, academic_year)


# ------------------------------------------------------------
# GET ONE
# ------------------------------------------------------------
@router.get("/{admission_id}", response_model=AdmissionRead)
async def get_admission_endpoint(
    admission_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    admission: Admission | None = await get_admission(session, admission_id)
    if not admission:
        raise HTTPException(status_code=404, detail="Admission application not found")
    return admission


# ------------------------------------------------------------
# PROCESS (approve / reject / interview / back to pending)
# ------------------------------------------------------------
@router.put("/{admission_id}/process", response_model=AdmissionRead)
async def process_admission_endpoint(
    admission_id: UUID,
    payload: AdmissionProcessRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin)),
):
    try:
        result = await process_admission(
            session,
            admission_id=admission_id,
            data=payload,
            reviewer_id=current_user.id,
        )
    except Exception as e:
        _raise_http(e, "process the application")

    _queue_notifications(background_tasks, result, current_user, "ADMISSION_PROCESSED")
    return result.admission


# ------------------------------------------------------------
# UPDATE (admin edit)
# ------------------------------------------------------------
@router.put("/{admission_id}", response_model=AdmissionRead)
async def update_admission_endpoint(
    admission_id: UUID,
    payload: AdmissionUpdate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin)),
):
    try:
        result = await update_admission(session, admission_id, payload)
    except Exception as e:
        _raise_http(e, "update the application")

    _queue_notifications(background_tasks, result, current_user, "ADMISSION_UPDATED")
    return result.admission


# ------------------------------------------------------------
# DELETE
# ------------------------------------------------------------
@router.delete("/{admission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_admission_endpoint(
    admission_id: UUID,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin)),
):
    try:
        await delete_admission(session, admission_id)
    except Exception as e:
        _raise_http(e, "delete the application")

    background_tasks.add_task(
        log_activity,
        action="ADMISSION_DELETED",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        actor_name=current_user.name,
        admission_id=admission_id,
    )
    return None
