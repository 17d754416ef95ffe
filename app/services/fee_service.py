# app/services/fee_service.py

from datetime import date, datetime, timezone
import uuid

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func
from sqlmodel import select, or_

from app.core.exceptions import NotFoundError
from app.models.enums import FeeStatus, FeeType
from app.models.fee import Fee
from app.models.student import Student
from app.schemas.fee import FeeCreate, FeePaymentRequest
from app.services.course_service import get_course_by_id
from app.services.sequence_service import FEE_RECEIPT_PREFIX, next_identifier
from app.services.student_service import get_student_by_id

# Statuses an admin sets by hand; everything else follows the balance
MANUAL_STATUSES = {FeeStatus.Waived, FeeStatus.Overdue}


def apply_balance(fee: Fee) -> Fee:
    """Recompute remaining amount and the derived status."""
    total = fee.amount + (fee.late_fee_fine or 0)
    fee.remaining_amount = round(max(total - fee.paid_amount, 0), 2)

    if fee.status == FeeStatus.Waived:
        return fee

    if fee.remaining_amount == 0:
        fee.status = FeeStatus.Paid
    elif fee.status == FeeStatus.Overdue:
        pass
    elif fee.paid_amount > 0:
        fee.status = FeeStatus.Partial
    else:
        fee.status = FeeStatus.Pending
    return fee


async def get_fee_by_id(session: AsyncSession, fee_id: uuid.UUID) -> Fee | None:
    result = await session.execute(select(Fee).where(Fee.id == fee_id))
    return result.scalar_one_or_none()


# ------------------------------------------------------------
# CREATE FEE RECORD
# ------------------------------------------------------------
async def create_fee(
    session: AsyncSession,
    data: FeeCreate,
    collected_by: uuid.UUID | None = None,
) -> Fee:
    student = await get_student_by_id(session, data.student_id)
    if not student:
        raise ValueError("Student not found")

    values = data.model_dump()
    status = values.pop("status", None)

    if values["paid_amount"] > values["amount"] + values["late_fee_fine"]:
        raise ValueError("Paid amount cannot exceed the fee amount")

    fee = Fee(
        **values,
        status=status if status in MANUAL_STATUSES else FeeStatus.Pending,
        collected_by=collected_by,
    )
    if fee.paid_amount > 0:
        fee.payment_date = datetime.now(timezone.utc)
    apply_balance(fee)

    try:
        fee.receipt_number = await next_identifier(session, FEE_RECEIPT_PREFIX)
        session.add(fee)
        await session.commit()
        await session.refresh(fee)

    except IntegrityError as e:
        await session.rollback()
        logger.error(f"IntegrityError while creating fee: {e}")
        raise ValueError("Failed to create fee record")

    logger.info(f"Fee {fee.receipt_number} created for student {student.registration_number}")
    return fee


# ------------------------------------------------------------
# RECORD PAYMENT
# ------------------------------------------------------------
async def record_payment(
    session: AsyncSession,
    fee_id: uuid.UUID,
    data: FeePaymentRequest,
    collected_by: uuid.UUID | None = None,
) -> Fee:
    if data.amount <= 0:
        raise ValueError("Payment amount must be positive")

    fee = await get_fee_by_id(session, fee_id)
    if not fee:
        raise NotFoundError("Fee record not found")

    if fee.status == FeeStatus.Waived:
        raise ValueError("Fee has been waived")

    if data.amount > fee.remaining_amount:
        raise ValueError(f"Payment exceeds remaining amount ({fee.remaining_amount})")

    fee.paid_amount = round(fee.paid_amount + data.amount, 2)
    fee.payment_date = datetime.now(timezone.utc)
    if data.payment_method:
        fee.payment_method = data.payment_method
    if data.transaction_id:
        fee.transaction_id = data.transaction_id
    if collected_by:
        fee.collected_by = collected_by
    fee.updated_at = datetime.utcnow()
    apply_balance(fee)

    session.add(fee)
    await session.commit()
    await session.refresh(fee)
    return fee


# ------------------------------------------------------------
# STUDENT SUMMARY
# ------------------------------------------------------------
async def get_student_fee_summary(session: AsyncSession, student_id: uuid.UUID) -> dict:
    student = await get_student_by_id(session, student_id)
    if not student:
        raise NotFoundError("Student not found")

    course = await get_course_by_id(session, student.course_id)

    result = await session.execute(
        select(Fee)
        .where(Fee.student_id == student.id)
        .order_by(Fee.created_at.desc())
    )
    fees = result.scalars().all()

    total_fee = course.total_fee if course else 0
    total_paid = round(sum(f.paid_amount for f in fees), 2)

    today = date.today()
    upcoming = sorted(
        (
            f for f in fees
            if f.status in (FeeStatus.Pending, FeeStatus.Partial)
            and f.due_date and f.due_date >= today
        ),
        key=lambda f: f.due_date,
    )

    return {
        "student_id": student.id,
        "student_name": student.full_name,
        "registration_number": student.registration_number,
        "course_name": course.name if course else None,
        "total_fee": total_fee,
        "total_paid": total_paid,
        "total_due": round(max(total_fee - total_paid, 0), 2),
        "payment_history": fees,
        "upcoming_due": {
            "fee_id": upcoming[0].id,
            "amount": upcoming[0].remaining_amount,
            "due_date": upcoming[0].due_date,
            "fee_type": upcoming[0].fee_type,
        } if upcoming else None,
    }


# ------------------------------------------------------------
# LIST (filters + search + pagination)
# ------------------------------------------------------------
async def list_fees(
    session: AsyncSession,
    student_id: uuid.UUID | None = None,
    status: FeeStatus | None = None,
    fee_type: FeeType | None = None,
    academic_year: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Fee], int]:
    conditions = []
    if student_id:
        conditions.append(Fee.student_id == student_id)
    if status:
        conditions.append(Fee.status == status)
    if fee_type:
        conditions.append(Fee.fee_type == fee_type)
    if academic_year:
        conditions.append(Fee.academic_year == academic_year)
    if search:
        pattern = f"%{search.strip()}%"
        matching_students = select(Student.id).where(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.registration_number.ilike(pattern),
            )
        )
        conditions.append(
            or_(
                Fee.receipt_number.ilike(pattern),
                Fee.student_id.in_(matching_students),
            )
        )

    total = (
        await session.execute(select(func.count(Fee.id)).where(*conditions))
    ).scalar_one()

    result = await session.execute(
        select(Fee)
        .where(*conditions)
        .order_by(Fee.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return result.scalars().all(), total


# ------------------------------------------------------------
# STATISTICS
# ------------------------------------------------------------
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


async def get_fee_stats(session: AsyncSession, academic_year: str | None = None) -> dict:
    academic_year = academic_year or str(datetime.now(timezone.utc).year)

    result = await session.execute(select(Fee).where(Fee.academic_year == academic_year))
    fees = result.scalars().all()

    by_status = {}
    for fee in fees:
        entry = by_status.setdefault(fee.status.value, {"count": 0, "amount": 0.0})
        entry["count"] += 1
        entry["amount"] = round(entry["amount"] + fee.amount + (fee.late_fee_fine or 0), 2)

    # Bucketed by the latest payment date of each fee
    monthly = [{"month": name, "amount": 0.0, "count": 0} for name in MONTHS]
    for fee in fees:
        if fee.payment_date and fee.paid_amount > 0:
            bucket = monthly[fee.payment_date.month - 1]
            bucket["amount"] = round(bucket["amount"] + fee.paid_amount, 2)
            bucket["count"] += 1

    open_statuses = (FeeStatus.Pending, FeeStatus.Partial, FeeStatus.Overdue)

    return {
        "academic_year": academic_year,
        "total_collected": round(sum(f.paid_amount for f in fees), 2),
        "total_pending": round(
            sum(f.remaining_amount for f in fees if f.status in open_statuses), 2
        ),
        "paid_count": by_status.get(FeeStatus.Paid.value, {}).get("count", 0),
        "pending_count": sum(
            by_status.get(s.value, {}).get("count", 0) for s in open_statuses
        ),
        "status_breakdown": by_status,
        "monthly_collection": monthly,
    }
