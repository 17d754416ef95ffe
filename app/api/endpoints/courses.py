# app/api/endpoints/courses.py

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.exceptions import NotFoundError
from app.core.rbac import AllowRoles, require_admin
from app.models.user import User, UserRole
from app.schemas.course import CourseCreate, CourseRead, CourseStats, CourseUpdate
from app.services.course_service import (
    create_course,
    delete_course,
    get_course_by_id,
    get_course_stats,
    list_courses,
    update_course,
)

router = APIRouter(prefix="/api/courses", tags=["Courses"])


# ------------------------------------------------------------
# CREATE COURSE (admin)
# ------------------------------------------------------------
@router.post("/", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
async def create_course_endpoint(
    payload: CourseCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    try:
        return await create_course(session, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ------------------------------------------------------------
# LIST COURSES
# ------------------------------------------------------------
@router.get("/", response_model=List[CourseRead])
async def list_courses_endpoint(
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff, UserRole.Student)),
):
    return await list_courses(session, include_inactive=include_inactive)


# ------------------------------------------------------------
# STATISTICS (admin / staff)
# ------------------------------------------------------------
@router.get("/stats", response_model=CourseStats)
async def course_stats_endpoint(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff)),
):
    return await get_course_stats(session)


# ------------------------------------------------------------
# GET COURSE
# ------------------------------------------------------------
@router.get("/{course_id}", response_model=CourseRead)
async def get_course_endpoint(
    course_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(AllowRoles(UserRole.Admin, UserRole.Staff, UserRole.Student)),
):
    course = await get_course_by_id(session, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


# ------------------------------------------------------------
# UPDATE COURSE (admin)
# ------------------------------------------------------------
@router.put("/{course_id}", response_model=CourseRead)
async def update_course_endpoint(
    course_id: UUID,
    payload: CourseUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    try:
        return await update_course(session, course_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ------------------------------------------------------------
# DELETE COURSE (admin)
# ------------------------------------------------------------
@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course_endpoint(
    course_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    try:
        await delete_course(session, course_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return None
