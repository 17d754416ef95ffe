from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Date, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import date, datetime
from typing import Optional
import uuid

from app.models.enums import FeeStatus, FeeType, PaymentMethod, enum_values


class Fee(SQLModel, table=True):
    __tablename__ = "fees"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    # FEE-YY-NNNN
    receipt_number: str = Field(
        sa_column=Column(String(32), nullable=False, unique=True, index=True)
    )

    student_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("students.id"), nullable=False, index=True)
    )

    fee_type: FeeType = Field(
        sa_column=Column(SAEnum(FeeType, name="fee_type", values_callable=enum_values), nullable=False)
    )

    amount: float = Field(sa_column=Column(Float, nullable=False))
    paid_amount: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))
    late_fee_fine: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))
    remaining_amount: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))

    due_date: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))
    payment_date: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    payment_method: Optional[PaymentMethod] = Field(
        default=None,
        sa_column=Column(
            SAEnum(PaymentMethod, name="payment_method", values_callable=enum_values),
            nullable=True,
        )
    )
    transaction_id: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))

    academic_year: str = Field(sa_column=Column(String(16), nullable=False, index=True))
    semester: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))

    status: FeeStatus = Field(
        default=FeeStatus.Pending,
        sa_column=Column(SAEnum(FeeStatus, name="fee_status", values_callable=enum_values), nullable=False)
    )

    remarks: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    collected_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
