from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Date, DateTime, ForeignKey, String, Uuid
from sqlalchemy import Enum as SAEnum
from uuid import uuid4
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import uuid

from app.models.enums import StudentStatus, enum_values
from app.models.types import JSONType


class Student(SQLModel, table=True):
    __tablename__ = "students"

    id: uuid.UUID = Field(
        default_factory=uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    # STU-YY-NNNN
    registration_number: str = Field(
        sa_column=Column(String(32), nullable=False, unique=True)
    )

    # Source admission. Unique: one student per admission.
    # No FK here, admissions.student_id already points back.
    admission_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), nullable=True, unique=True)
    )

    first_name: str = Field(sa_column=Column(String, nullable=False))
    last_name: str = Field(sa_column=Column(String, nullable=False))
    full_name: str = Field(sa_column=Column(String, nullable=False))

    date_of_birth: Optional[date] = Field(
        default=None, sa_column=Column(Date, nullable=True)
    )
    gender: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    blood_group: Optional[str] = Field(
        default=None, sa_column=Column(String(8), nullable=True)
    )

    email: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    contact_number: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    address: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    guardian_details: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )

    course_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("courses.id"), nullable=False)
    )
    batch: str = Field(sa_column=Column(String(16), nullable=False))
    section: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )

    previous_education: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONType, nullable=False)
    )
    documents: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONType, nullable=False)
    )

    # Login account, null when the applicant gave no email
    user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )

    status: StudentStatus = Field(
        default=StudentStatus.Active,
        sa_column=Column(
            SAEnum(StudentStatus, name="student_status", values_callable=enum_values),
            nullable=False,
        )
    )

    admission_date: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
