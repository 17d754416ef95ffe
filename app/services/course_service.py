# app/services/course_service.py

from loguru import logger
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
import uuid

from app.core.exceptions import ConflictError, NotFoundError
from app.models.admission import Admission
from app.models.course import Course
from app.models.student import Student
from app.schemas.course import CourseCreate, CourseUpdate


async def get_course_by_id(session: AsyncSession, course_id: uuid.UUID) -> Course | None:
    result = await session.execute(select(Course).where(Course.id == course_id))
    return result.scalar_one_or_none()


def _duplicate_error(e: IntegrityError, action: str) -> ValueError:
    msg = str(e.orig).lower()

    if "code" in msg:
        return ValueError("Course code already exists")
    if "name" in msg:
        return ValueError("Course name already exists")

    return ValueError(f"Failed to {action} course")


async def create_course(session: AsyncSession, data: CourseCreate) -> Course:
    course = Course(**data.model_dump())
    course.code = course.code.strip().upper()

    session.add(course)

    try:
        await session.commit()
        await session.refresh(course)
        return course

    except IntegrityError as e:
        await session.rollback()
        raise _duplicate_error(e, "create")


async def list_courses(session: AsyncSession, include_inactive: bool = False) -> list[Course]:
    query = select(Course).order_by(Course.name)
    if not include_inactive:
        query = query.where(Course.active == True)  # noqa: E712

    result = await session.execute(query)
    return result.scalars().all()


# ------------------------------------------------------------
# UPDATE
# ------------------------------------------------------------
async def update_course(session: AsyncSession, course_id: uuid.UUID, data: CourseUpdate) -> Course:
    course = await get_course_by_id(session, course_id)
    if not course:
        raise NotFoundError("Course not found")

    # Only the description may be cleared
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    if changes.get("code"):
        changes["code"] = changes["code"].strip().upper()

    for field, value in changes.items():
        setattr(course, field, value)

    session.add(course)

    try:
        await session.commit()
        await session.refresh(course)

    except IntegrityError as e:
        await session.rollback()
        raise _duplicate_error(e, "update")

    logger.info(f"Course {course.code} updated: {sorted(changes)}")
    return course


# ------------------------------------------------------------
# DELETE (only while nothing points at it)
# ------------------------------------------------------------
async def delete_course(session: AsyncSession, course_id: uuid.UUID) -> None:
    course = await get_course_by_id(session, course_id)
    if not course:
        raise NotFoundError("Course not found")

    enrolled = (
        await session.execute(select(func.count(Student.id)).where(Student.course_id == course_id))
    ).scalar_one()
    if enrolled:
        raise ConflictError(
            f"Cannot delete course. {enrolled} students are currently enrolled in this course."
        )

    applications = (
        await session.execute(
            select(func.count(Admission.id)).where(Admission.applied_course_id == course_id)
        )
    ).scalar_one()
    if applications:
        raise ConflictError(
            f"Cannot delete course. {applications} admission applications reference this course. "
            "Deactivate it instead."
        )

    await session.delete(course)
    await session.commit()
    logger.info(f"Course {course.code} deleted")


# ------------------------------------------------------------
# STATISTICS
# ------------------------------------------------------------
async def get_course_stats(session: AsyncSession) -> dict:
    total_courses = (await session.execute(select(func.count(Course.id)))).scalar_one()

    department_rows = await session.execute(
        select(Course.department, func.count(Course.id))
        .group_by(Course.department)
        .order_by(func.count(Course.id).desc(), Course.department)
    )

    enrollment_rows = await session.execute(
        select(Course.id, Course.name, Course.code, Course.department, func.count(Student.id))
        .select_from(Student)
        .join(Course, Course.id == Student.course_id)
        .group_by(Course.id, Course.name, Course.code, Course.department)
        .order_by(func.count(Student.id).desc(), Course.name)
    )

    return {
        "total_courses": total_courses,
        "courses_by_department": [
            {"department": department or "Unspecified", "count": count}
            for department, count in department_rows.all()
        ],
        "student_enrollment": [
            {
                "course_id": course_id,
                "course_name": name,
                "course_code": code,
                "department": department,
                "student_count": count,
            }
            for course_id, name, code, department, count in enrollment_rows.all()
        ],
    }
