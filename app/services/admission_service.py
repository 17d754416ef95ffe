# app/services/admission_service.py

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional
import uuid

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_

from app.core.config import settings
from app.core.exceptions import AdmissionAlreadyConverted, ConflictError, NotFoundError
from app.core.security import generate_temporary_password
from app.models.admission import Admission
from app.models.course import Course
from app.models.enums import AdmissionStatus, PROCESSABLE_ADMISSION_STATUSES, StudentStatus
from app.models.student import Student
from app.models.user import User
from app.schemas.admission import AdmissionCreate, AdmissionProcessRequest, AdmissionUpdate
from app.services.auth_service import build_student_account, get_user_by_email
from app.services.course_service import get_course_by_id
from app.services.sequence_service import ADMISSION_PREFIX, STUDENT_PREFIX, next_identifier

# One retry is enough: after losing a race the fresh read sees the winner's link
MAX_SAVE_ATTEMPTS = 2

# Stored as JSON (or plain strings) so they are dumped in pydantic's json mode
JSON_MODE_FIELDS = {
    "gender",
    "address",
    "guardian_details",
    "previous_education",
    "documents",
    "interview_details",
    "admission_fee",
}

# NOT NULL columns an explicit null in an edit must not touch
REQUIRED_FIELDS = {
    "first_name",
    "last_name",
    "applied_course_id",
    "academic_year",
    "status",
    "previous_education",
    "documents",
}


@dataclass
class AdmissionSaveResult:
    """What a save did, so the endpoint can queue e-mails and audit entries."""
    admission: Admission
    student: Optional[Student] = None
    user: Optional[User] = None
    account_created: bool = False
    temporary_password: Optional[str] = None
    previous_status: Optional[AdmissionStatus] = None

    @property
    def converted(self) -> bool:
        return self.student is not None

    @property
    def status_changed(self) -> bool:
        return self.previous_status != self.admission.status


# ------------------------------------------------------------
# HELPERS
# ------------------------------------------------------------
def _column_values(data: BaseModel, exclude_unset: bool = False) -> dict:
    values = data.model_dump(exclude_unset=exclude_unset)
    json_fields = JSON_MODE_FIELDS & values.keys()
    if json_fields:
        values.update(
            data.model_dump(mode="json", include=json_fields, exclude_unset=exclude_unset)
        )
    return values


def _parse_decision_status(value: str) -> AdmissionStatus:
    try:
        status = AdmissionStatus(value)
    except ValueError:
        status = None

    if status not in PROCESSABLE_ADMISSION_STATUSES:
        allowed = sorted(s.value for s in PROCESSABLE_ADMISSION_STATUSES)
        raise ValueError(f"Invalid status provided. Allowed: {allowed}")

    return status


async def _load_admission(session: AsyncSession, admission_id: uuid.UUID) -> Admission:
    result = await session.execute(
        select(Admission)
        .where(Admission.id == admission_id)
        .execution_options(populate_existing=True)
    )
    admission = result.scalar_one_or_none()
    if not admission:
        raise NotFoundError("Admission application not found")
    return admission


async def _ensure_course_exists(session: AsyncSession, course_id: uuid.UUID) -> Course:
    course = await get_course_by_id(session, course_id)
    if not course:
        raise ValueError("Invalid course selected")
    return course


# ------------------------------------------------------------
# CONVERSION: approved admission -> account + student
# ------------------------------------------------------------
async def _convert_admission(
    session: AsyncSession,
    admission: Admission,
    result: AdmissionSaveResult,
) -> None:
    """
    Runs inside the caller's transaction; nothing here commits.

    1. Reuse or create the login account (only when there is an email).
    2. Create the student record.
    3. Claim the admission -> student link with a conditional update.
       Zero rows means another request converted it first.
    """
    user = None
    if admission.email:
        user = await get_user_by_email(session, admission.email)

        if user is None:
            password = settings.STUDENT_DEFAULT_PASSWORD or generate_temporary_password()
            user = build_student_account(
                name=f"{admission.first_name} {admission.last_name}",
                email=admission.email,
                password=password,
                contact_number=admission.contact_number,
            )
            session.add(user)
            result.account_created = True
            result.temporary_password = password

    student = Student(
        registration_number=await next_identifier(session, STUDENT_PREFIX),
        admission_id=admission.id,
        first_name=admission.first_name,
        last_name=admission.last_name,
        full_name=f"{admission.first_name} {admission.last_name}",
        date_of_birth=admission.date_of_birth,
        gender=admission.gender,
        blood_group=admission.blood_group,
        email=admission.email,
        contact_number=admission.contact_number,
        address=admission.address,
        guardian_details=admission.guardian_details,
        course_id=admission.applied_course_id,
        batch=admission.academic_year,
        previous_education=list(admission.previous_education or []),
        documents=list(admission.documents or []),
        user_id=user.id if user else None,
        status=StudentStatus.Active,
    )
    session.add(student)
    await session.flush()

    claim = await session.execute(
        update(Admission)
        .where(Admission.id == admission.id, Admission.student_id.is_(None))
        .values(student_id=student.id, user_id=user.id if user else None)
        .execution_options(synchronize_session=False)
    )
    if claim.rowcount != 1:
        raise AdmissionAlreadyConverted(f"Admission {admission.id} already has a student record")

    result.student = student
    result.user = user


def _needs_conversion(admission: Admission) -> bool:
    return admission.status == AdmissionStatus.Approved and admission.student_id is None


async def _save_with_conversion(
    session: AsyncSession,
    admission_id: uuid.UUID,
    apply_changes: Callable[[Admission], Awaitable[None]],
) -> AdmissionSaveResult:
    """
    Load, apply the caller's changes, convert when the admission is now
    approved without a student, and commit everything in one transaction.
    Losing a race (claim miss or unique violation) rolls back and retries
    from a fresh read.
    """
    for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
        try:
            admission = await _load_admission(session, admission_id)
            previous_status = admission.status
            await apply_changes(admission)
            admission.updated_at = datetime.utcnow()

            result = AdmissionSaveResult(admission=admission, previous_status=previous_status)
            if _needs_conversion(admission):
                await _convert_admission(session, admission, result)

            await session.commit()

        except (AdmissionAlreadyConverted, IntegrityError) as e:
            await session.rollback()
            logger.warning(f"Admission {admission_id} changed concurrently (attempt {attempt}): {e}")
            continue

        except Exception:
            await session.rollback()
            raise

        await session.refresh(admission)
        if result.converted:
            logger.success(
                f"Admission {admission.application_number} converted to student "
                f"{result.student.registration_number}"
            )
        return result

    raise RuntimeError(f"Admission {admission_id} could not be saved after {MAX_SAVE_ATTEMPTS} attempts")


# ------------------------------------------------------------
# CREATE (public application form)
# ------------------------------------------------------------
async def create_admission(session: AsyncSession, data: AdmissionCreate) -> Admission:
    await _ensure_course_exists(session, data.applied_course_id)

    values = _column_values(data)
    if values.get("email"):
        values["email"] = values["email"].lower()

    admission = Admission(**values, status=AdmissionStatus.Pending)

    try:
        admission.application_number = await next_identifier(session, ADMISSION_PREFIX)
        session.add(admission)
        await session.commit()
        await session.refresh(admission)

    except IntegrityError as e:
        await session.rollback()
        logger.error(f"IntegrityError while creating admission: {e}")
        raise ValueError("Failed to create admission application")

    logger.info(f"Admission {admission.application_number} created for {admission.first_name} {admission.last_name}")
    return admission


# ------------------------------------------------------------
# READ
# ------------------------------------------------------------
async def get_admission(session: AsyncSession, admission_id: uuid.UUID) -> Admission | None:
    result = await session.execute(select(Admission).where(Admission.id == admission_id))
    return result.scalar_one_or_none()


async def list_admissions(
    session: AsyncSession,
    status: AdmissionStatus | None = None,
    course_id: uuid.UUID | None = None,
    academic_year: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Admission], int]:
    conditions = []
    if status:
        conditions.append(Admission.status == status)
    if course_id:
        conditions.append(Admission.applied_course_id == course_id)
    if academic_year:
        conditions.append(Admission.academic_year == academic_year)
    if search:
        pattern = f"%{search.strip()}%"
        conditions.append(
            or_(
                Admission.application_number.ilike(pattern),
                Admission.first_name.ilike(pattern),
                Admission.last_name.ilike(pattern),
                Admission.email.ilike(pattern),
            )
        )

    total = (
        await session.execute(select(func.count(Admission.id)).where(*conditions))
    ).scalar_one()

    result = await session.execute(
        select(Admission)
        .where(*conditions)
        .order_by(Admission.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return result.scalars().all(), total


# ------------------------------------------------------------
# PROCESS (decision endpoint)
# ------------------------------------------------------------
async def process_admission(
    session: AsyncSession,
    admission_id: uuid.UUID,
    data: AdmissionProcessRequest,
    reviewer_id: uuid.UUID | None = None,
) -> AdmissionSaveResult:
    # Validate before touching the database: a bad status mutates nothing
    status = _parse_decision_status(data.status)
    decision = _column_values(data, exclude_unset=True)

    async def apply_decision(admission: Admission) -> None:
        admission.status = status
        if decision.get("remarks"):
            admission.remarks = decision["remarks"]
        if decision.get("interview_details"):
            admission.interview_details = decision["interview_details"]
        if decision.get("admission_fee"):
            admission.admission_fee = decision["admission_fee"]
        if reviewer_id:
            admission.reviewed_by = reviewer_id

    return await _save_with_conversion(session, admission_id, apply_decision)


# ------------------------------------------------------------
# UPDATE (admin edit, any canonical status)
# ------------------------------------------------------------
async def update_admission(
    session: AsyncSession,
    admission_id: uuid.UUID,
    data: AdmissionUpdate,
) -> AdmissionSaveResult:
    changes = {
        field: value
        for field, value in _column_values(data, exclude_unset=True).items()
        if not (value is None and field in REQUIRED_FIELDS)
    }
    if changes.get("email"):
        changes["email"] = changes["email"].lower()

    async def apply_edit(admission: Admission) -> None:
        new_course = changes.get("applied_course_id")
        if new_course and new_course != admission.applied_course_id:
            await _ensure_course_exists(session, new_course)

        for field, value in changes.items():
            setattr(admission, field, value)

    return await _save_with_conversion(session, admission_id, apply_edit)


# ------------------------------------------------------------
# DELETE
# ------------------------------------------------------------
async def delete_admission(session: AsyncSession, admission_id: uuid.UUID) -> None:
    admission = await get_admission(session, admission_id)
    if not admission:
        raise NotFoundError("Admission application not found")

    if admission.student_id:
        raise ConflictError("Cannot delete an approved admission with student record")

    await session.delete(admission)
    await session.commit()
    logger.info(f"Admission {admission.application_number} deleted")


# ------------------------------------------------------------
# STATISTICS
# ------------------------------------------------------------
async def get_admission_stats(session: AsyncSession, academic_year: str | None = None) -> dict:
    academic_year = academic_year or str(datetime.now(timezone.utc).year)

    status_rows = await session.execute(
        select(Admission.status, func.count(Admission.id))
        .where(Admission.academic_year == academic_year)
        .group_by(Admission.status)
    )
    status_counts = {
        (status.value if isinstance(status, AdmissionStatus) else str(status)): count
        for status, count in status_rows.all()
    }

    approved = case((Admission.status == AdmissionStatus.Approved, 1), else_=0)
    course_rows = await session.execute(
        select(
            Course.id,
            Course.name,
            Course.code,
            func.count(Admission.id),
            func.coalesce(func.sum(approved), 0),
        )
        .select_from(Admission)
        .join(Course, Course.id == Admission.applied_course_id)
        .where(Admission.academic_year == academic_year)
        .group_by(Course.id, Course.name, Course.code)
        .order_by(Course.name)
    )

    return {
        "academic_year": academic_year,
        "total_applications": sum(status_counts.values()),
        "status_counts": status_counts,
        "course_stats": [
            {
                "course_id": course_id,
                "course_name": name,
                "course_code": code,
                "total_applications": total,
                "approved_applications": int(approved_count),
            }
            for course_id, name, code, total, approved_count in course_rows.all()
        ],
    }
