from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from uuid import UUID
from datetime import date, datetime

from app.models.enums import FeeStatus, FeeType, PaymentMethod


# ------------------------------------------------------------
# CREATE FEE RECORD
# ------------------------------------------------------------
class FeeCreate(BaseModel):
    student_id: UUID
    fee_type: FeeType
    amount: float = Field(gt=0)
    paid_amount: float = Field(default=0, ge=0)
    late_fee_fine: float = Field(default=0, ge=0)
    due_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    academic_year: str
    semester: Optional[str] = None
    # Only "waived" / "overdue" are taken as given, the rest is derived
    status: Optional[FeeStatus] = None
    remarks: Optional[str] = None


# ------------------------------------------------------------
# RECORD A PAYMENT AGAINST AN EXISTING FEE
# ------------------------------------------------------------
class FeePaymentRequest(BaseModel):
    amount: float
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None


class FeeRead(BaseModel):
    id: UUID
    receipt_number: str
    student_id: UUID
    fee_type: FeeType
    amount: float
    paid_amount: float
    late_fee_fine: float
    remaining_amount: float
    due_date: Optional[date] = None
    payment_date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    academic_year: str
    semester: Optional[str] = None
    status: FeeStatus
    remarks: Optional[str] = None
    collected_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ------------------------------------------------------------
# STUDENT SUMMARY
# ------------------------------------------------------------
class UpcomingDue(BaseModel):
    fee_id: UUID
    amount: float
    due_date: date
    fee_type: FeeType


class StudentFeeSummary(BaseModel):
    student_id: UUID
    student_name: str
    registration_number: str
    course_name: Optional[str] = None
    total_fee: float
    total_paid: float
    total_due: float
    payment_history: List[FeeRead]
    upcoming_due: Optional[UpcomingDue] = None


# ------------------------------------------------------------
# LIST + STATISTICS
# ------------------------------------------------------------
class FeePage(BaseModel):
    count: int
    total: int
    page: int
    limit: int
    pages: int
    data: List[FeeRead]


class StatusTotals(BaseModel):
    count: int
    amount: float


class MonthlyCollection(BaseModel):
    month: str
    amount: float
    count: int


class FeeStats(BaseModel):
    academic_year: str
    total_collected: float
    total_pending: float
    paid_count: int
    pending_count: int
    status_breakdown: Dict[str, StatusTotals]
    monthly_collection: List[MonthlyCollection]
