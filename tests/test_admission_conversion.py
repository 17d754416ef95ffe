import uuid
import pytest
from unittest.mock import AsyncMock, patch
from sqlmodel import select, func

from app.core.exceptions import NotFoundError
from app.core.security import verify_password
from app.models.admission import Admission
from app.models.enums import AdmissionStatus, StudentStatus
from app.models.student import Student
from app.models.user import User, UserRole
from app.schemas.admission import AdmissionCreate, AdmissionProcessRequest, AdmissionUpdate
from app.services.admission_service import (
    create_admission,
    get_admission,
    process_admission,
    update_admission,
)
from app.services.auth_service import create_user

from conftest import admission_payload


async def count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def new_admission(session, course, **overrides):
    return await create_admission(session, AdmissionCreate(**admission_payload(course.id, **overrides)))


@pytest.mark.asyncio
async def test_approval_creates_student_and_account(db_session, course):
    admission = await new_admission(db_session, course)

    result = await process_admission(
        db_session, admission.id, AdmissionProcessRequest(status="approved")
    )

    assert result.converted
    assert result.account_created
    assert result.temporary_password

    student = result.student
    assert student.full_name == "Jane Doe"
    assert student.course_id == course.id
    assert student.batch == "2025"
    assert student.status == StudentStatus.Active
    assert student.admission_id == admission.id
    assert student.registration_number.startswith("STU-")
    assert student.previous_education[0]["institution_name"] == "City High School"

    user = (await db_session.execute(select(User).where(User.email == "a@x.com"))).scalar_one()
    assert user.role == UserRole.Student
    assert user.must_reset_password is True
    assert verify_password(result.temporary_password, user.password_hash)
    assert student.user_id == user.id

    stored = await get_admission(db_session, admission.id)
    assert stored.status == AdmissionStatus.Approved
    assert stored.student_id == student.id
    assert stored.user_id == user.id


@pytest.mark.asyncio
async def test_reapproval_creates_nothing_new(db_session, course):
    admission = await new_admission(db_session, course)
    request = AdmissionProcessRequest(status="approved")

    first = await process_admission(db_session, admission.id, request)
    second = await process_admission(db_session, admission.id, request)

    assert not second.converted
    assert second.admission.student_id == first.student.id
    assert await count(db_session, Student) == 1
    assert await count(db_session, User) == 1


@pytest.mark.asyncio
async def test_existing_user_is_reused_untouched(db_session, course):
    existing = await create_user(
        db_session,
        name="Already Registered",
        email="a@x.com",
        password="KeepMe123",
        role=UserRole.Staff,
        contact_number="1111111111",
    )
    original_hash = existing.password_hash

    admission = await new_admission(db_session, course)
    result = await process_admission(
        db_session, admission.id, AdmissionProcessRequest(status="approved")
    )

    assert not result.account_created
    assert result.temporary_password is None
    assert result.student.user_id == existing.id

    await db_session.refresh(existing)
    assert existing.name == "Already Registered"
    assert existing.role == UserRole.Staff
    assert existing.contact_number == "1111111111"
    assert existing.password_hash == original_hash
    assert existing.must_reset_password is False
    assert await count(db_session, User) == 1


@pytest.mark.asyncio
async def test_no_email_means_no_account_and_no_lookup(db_session, course):
    admission = await new_admission(db_session, course, email=None)

    with patch(
        "app.services.admission_service.get_user_by_email", new_callable=AsyncMock
    ) as lookup:
        result = await process_admission(
            db_session, admission.id, AdmissionProcessRequest(status="approved")
        )

    lookup.assert_not_called()
    assert result.converted
    assert result.student.user_id is None
    assert result.admission.user_id is None
    assert await count(db_session, User) == 0


@pytest.mark.asyncio
async def test_invalid_status_leaves_admission_untouched(db_session, course):
    admission = await new_admission(db_session, course)

    with pytest.raises(ValueError):
        await process_admission(
            db_session, admission.id, AdmissionProcessRequest(status="enrolled")
        )
    with pytest.raises(ValueError):
        await process_admission(
            db_session, admission.id, AdmissionProcessRequest(status="accepted")
        )
    for variant in ("Approved", "  approved ", "REJECTED"):
        with pytest.raises(ValueError):
            await process_admission(
                db_session, admission.id, AdmissionProcessRequest(status=variant)
            )

    stored = await get_admission(db_session, admission.id)
    assert stored.status == AdmissionStatus.Pending
    assert await count(db_session, Student) == 0


@pytest.mark.asyncio
async def test_process_missing_admission(db_session):
    with pytest.raises(NotFoundError):
        await process_admission(
            db_session, uuid.uuid4(), AdmissionProcessRequest(status="rejected")
        )


@pytest.mark.asyncio
async def test_rejection_does_not_convert(db_session, course):
    admission = await new_admission(db_session, course)

    result = await process_admission(
        db_session,
        admission.id,
        AdmissionProcessRequest(status="rejected", remarks="Seats full"),
    )

    assert not result.converted
    assert result.admission.status == AdmissionStatus.Rejected
    assert result.admission.remarks == "Seats full"
    assert await count(db_session, Student) == 0
    assert result.previous_status == AdmissionStatus.Pending
    assert result.status_changed

    again = await update_admission(db_session, admission.id, AdmissionUpdate(blood_group="B+"))
    assert again.previous_status == AdmissionStatus.Rejected
    assert not again.status_changed


@pytest.mark.asyncio
async def test_update_to_approved_also_converts(db_session, course):
    admission = await new_admission(db_session, course)

    result = await update_admission(
        db_session, admission.id, AdmissionUpdate(status=AdmissionStatus.Approved)
    )

    assert result.converted
    assert result.admission.student_id == result.student.id
    assert result.admission.application_number == admission.application_number


@pytest.mark.asyncio
async def test_lost_race_is_retried_without_duplicates(db_session, course):
    admission = await new_admission(db_session, course)
    first = await process_admission(
        db_session, admission.id, AdmissionProcessRequest(status="approved")
    )
    student_id = first.student.id

    # First attempt behaves like a request that read the admission before the
    # link was committed; the unique admission reference rejects its student
    with patch(
        "app.services.admission_service._needs_conversion", side_effect=[True, False]
    ):
        second = await process_admission(
            db_session, admission.id, AdmissionProcessRequest(status="approved")
        )

    assert not second.converted
    assert second.admission.student_id == student_id
    assert await count(db_session, Student) == 1
    assert await count(db_session, User) == 1


@pytest.mark.asyncio
async def test_persistent_conflict_gives_up(db_session, course):
    admission = await new_admission(db_session, course)
    await process_admission(db_session, admission.id, AdmissionProcessRequest(status="approved"))

    with patch("app.services.admission_service._needs_conversion", return_value=True):
        with pytest.raises(RuntimeError):
            await process_admission(
                db_session, admission.id, AdmissionProcessRequest(status="approved")
            )

    assert await count(db_session, Student) == 1
