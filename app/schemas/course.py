from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID


class CourseCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1, max_length=32)
    department: str
    duration: int = Field(gt=0, description="Course duration in years")
    description: Optional[str] = None
    total_fee: float = Field(ge=0)


class CourseRead(BaseModel):
    id: UUID
    name: str
    code: str
    department: str
    duration: int
    description: Optional[str] = None
    total_fee: float
    active: bool

    class Config:
        from_attributes = True


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    department: Optional[str] = None
    duration: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None
    total_fee: Optional[float] = Field(default=None, ge=0)
    active: Optional[bool] = None


# ------------------------------------------------------------
# STATISTICS
# ------------------------------------------------------------
class DepartmentCount(BaseModel):
    department: str
    count: int


class CourseEnrollment(BaseModel):
    course_id: UUID
    course_name: str
    course_code: str
    department: str
    student_count: int


class CourseStats(BaseModel):
    total_courses: int
    courses_by_department: List[DepartmentCount]
    student_enrollment: List[CourseEnrollment]
