# app/services/student_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_
import uuid

from app.models.student import Student


# ------------------------------------------------------------
# GET STUDENT BY ID
# ------------------------------------------------------------
async def get_student_by_id(session: AsyncSession, student_id: uuid.UUID) -> Student | None:
    result = await session.execute(select(Student).where(Student.id == student_id))
    return result.scalar_one_or_none()


# ------------------------------------------------------------
# GET STUDENT BY LINKED LOGIN
# ------------------------------------------------------------
async def get_student_by_user_id(session: AsyncSession, user_id: uuid.UUID) -> Student | None:
    result = await session.execute(
        select(Student)
        .where(Student.user_id == user_id)
        .order_by(Student.created_at.desc())
    )
    return result.scalars().first()


# ------------------------------------------------------------
# LIST STUDENTS (optional filters)
# ------------------------------------------------------------
async def list_students(
    session: AsyncSession,
    course_id: uuid.UUID | None = None,
    batch: str | None = None,
    search: str | None = None,
) -> list[Student]:
    query = select(Student).order_by(Student.created_at.desc())

    if course_id:
        query = query.where(Student.course_id == course_id)
    if batch:
        query = query.where(Student.batch == batch)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                Student.registration_number.ilike(pattern),
                Student.full_name.ilike(pattern),
                Student.email.ilike(pattern),
            )
        )

    result = await session.execute(query)
    return result.scalars().all()
