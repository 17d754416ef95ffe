# app/schemas/student.py
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from app.models.enums import StudentStatus
from app.schemas.admission import Address, DocumentRef, EducationRecord, GuardianDetails


# ------------------------------------------------------------
# FULL STUDENT READ RESPONSE (Used everywhere in API responses)
# ------------------------------------------------------------
class StudentRead(BaseModel):
    id: UUID
    registration_number: str
    admission_id: Optional[UUID] = None

    first_name: str
    last_name: str
    full_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None

    email: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[Address] = None
    guardian_details: Optional[GuardianDetails] = None

    course_id: UUID
    batch: str
    section: Optional[str] = None

    previous_education: List[EducationRecord] = []
    documents: List[DocumentRef] = []

    user_id: Optional[UUID] = None
    status: StudentStatus

    admission_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True
