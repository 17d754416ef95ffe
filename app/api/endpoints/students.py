# app/api/endpoints/students.py

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.rbac import AllowRoles
from app.models.user import User, UserRole
from app.schemas.student import StudentRead
from app.services.student_service import get_student_by_id, get_student_by_user_id, list_students

router = APIRouter(prefix="/api/students", tags=["Students"])


# ------------------------------------------------------------
# MY PROFILE (logged-in student)
# ------------------------------------------------------------
@router.get("/me", response_model=StudentRead)
async def get_my_profile(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Student)),
):
    student = await get_student_by_user_id(session, current_user.id)
    if not student:
        raise HTTPException(status_code=404, detail="No student record linked to this account")
    return student


# ------------------------------------------------------------
# LIST STUDENTS
# ------------------------------------------------------------
@router.get("/", response_model=List[StudentRead])
async def list_students_endpoint(
    course_id: Optional[UUID] = None,
    batch: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    return await list_students(session, course_id=course_id, batch=batch, search=search)


# ------------------------------------------------------------
# GET STUDENT
# ------------------------------------------------------------
@router.get("/{student_id}", response_model=StudentRead)
async def get_student_endpoint(
    student_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    student = await get_student_by_id(session, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student
