# app/schemas/admission.py

from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from app.models.enums import AdmissionStatus, Gender


# ============================================================
# NESTED DETAILS (stored as JSON on the admission / student)
# ============================================================
class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class GuardianDetails(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[EmailStr] = None


class EducationRecord(BaseModel):
    institution_name: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    year_of_completion: Optional[int] = None
    percentage: Optional[float] = Field(default=None, ge=0, le=100)


class DocumentRef(BaseModel):
    name: str
    document_type: Optional[str] = None
    file_url: str
    upload_date: Optional[datetime] = None


class InterviewDetails(BaseModel):
    scheduled_at: Optional[datetime] = None
    interviewer: Optional[str] = None
    score: Optional[float] = None
    notes: Optional[str] = None


class AdmissionFeeDetails(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0)
    paid: bool = False
    transaction_id: Optional[str] = None
    payment_date: Optional[datetime] = None
    payment_method: Optional[str] = None


# ============================================================
# PUBLIC APPLICATION FORM
# ============================================================
class AdmissionCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    contact_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    blood_group: Optional[str] = None

    address: Optional[Address] = None
    guardian_details: Optional[GuardianDetails] = None
    previous_education: List[EducationRecord] = []
    documents: List[DocumentRef] = []

    applied_course_id: UUID
    academic_year: str = Field(min_length=4, max_length=16)

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "email": "jane.doe@example.com",
                    "contact_number": "9876543210",
                    "date_of_birth": "2006-04-12",
                    "gender": "Female",
                    "applied_course_id": "6f1c8a5e-3b1e-4f43-9d7e-1c2b3a4d5e6f",
                    "academic_year": "2025"
                }
            ]
        }


# ============================================================
# ADMIN EDIT (any field, any canonical status)
# ============================================================
class AdmissionUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    contact_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    blood_group: Optional[str] = None

    address: Optional[Address] = None
    guardian_details: Optional[GuardianDetails] = None
    previous_education: Optional[List[EducationRecord]] = None
    documents: Optional[List[DocumentRef]] = None

    applied_course_id: Optional[UUID] = None
    academic_year: Optional[str] = None

    status: Optional[AdmissionStatus] = None
    remarks: Optional[str] = None
    interview_details: Optional[InterviewDetails] = None
    admission_fee: Optional[AdmissionFeeDetails] = None


# ============================================================
# DECISION (approve / reject / pending / interview_scheduled)
# ============================================================
class AdmissionProcessRequest(BaseModel):
    # Plain str on purpose: the service answers 400 for values outside
    # the decision set instead of FastAPI's 422
    status: str
    remarks: Optional[str] = None
    interview_details: Optional[InterviewDetails] = None
    admission_fee: Optional[AdmissionFeeDetails] = None


# ============================================================
# READ
# ============================================================
class AdmissionRead(BaseModel):
    id: UUID
    application_number: str

    first_name: str
    last_name: str
    email: Optional[str] = None
    contact_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None

    address: Optional[Address] = None
    guardian_details: Optional[GuardianDetails] = None
    previous_education: List[EducationRecord] = []
    documents: List[DocumentRef] = []

    applied_course_id: UUID
    academic_year: str

    status: AdmissionStatus
    remarks: Optional[str] = None
    interview_details: Optional[InterviewDetails] = None
    admission_fee: Optional[AdmissionFeeDetails] = None
    reviewed_by: Optional[UUID] = None

    user_id: Optional[UUID] = None
    student_id: Optional[UUID] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AdmissionPage(BaseModel):
    count: int
    total: int
    page: int
    limit: int
    pages: int
    data: List[AdmissionRead]


# ============================================================
# STATISTICS
# ============================================================
class CourseAdmissionStats(BaseModel):
    course_id: UUID
    course_name: str
    course_code: str
    total_applications: int
    approved_applications: int


class AdmissionStats(BaseModel):
    academic_year: str
    total_applications: int
    status_counts: dict[str, int]
    course_stats: List[CourseAdmissionStats]
