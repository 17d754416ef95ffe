# app/models/admission.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import uuid

from app.models.enums import AdmissionStatus, enum_values
from app.models.types import JSONType


class Admission(SQLModel, table=True):
    __tablename__ = "admissions"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    # ADM-YY-NNNN, assigned once on first insert
    application_number: str = Field(
        sa_column=Column(String(32), nullable=False, unique=True, index=True)
    )

    # Applicant
    first_name: str = Field(sa_column=Column(String, nullable=False))
    last_name: str = Field(sa_column=Column(String, nullable=False))
    email: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True, index=True)
    )
    contact_number: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    date_of_birth: Optional[date] = Field(
        default=None, sa_column=Column(Date, nullable=True)
    )
    gender: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    blood_group: Optional[str] = Field(
        default=None, sa_column=Column(String(8), nullable=True)
    )

    address: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    guardian_details: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    previous_education: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONType, nullable=False)
    )
    documents: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONType, nullable=False)
    )

    # Target program
    applied_course_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("courses.id"), nullable=False)
    )
    academic_year: str = Field(sa_column=Column(String(16), nullable=False, index=True))

    # Decision
    status: AdmissionStatus = Field(
        default=AdmissionStatus.Pending,
        sa_column=Column(
            SAEnum(AdmissionStatus, name="admission_status", values_callable=enum_values),
            nullable=False,
        )
    )
    remarks: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    interview_details: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    admission_fee: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    reviewed_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )

    # Filled by conversion on approval
    user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )
    student_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("students.id"), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
