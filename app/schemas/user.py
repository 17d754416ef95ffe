from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, EmailStr
from app.models.user import UserRole


# ---------------------------------------------------------
# BASE
# ---------------------------------------------------------
class UserBase(BaseModel):
    name: str
    email: EmailStr


# ---------------------------------------------------------
# CREATE USER (Admin creates staff / admin / student logins)
# ---------------------------------------------------------
class UserCreate(UserBase):
    password: str
    role: UserRole
    contact_number: Optional[str] = None


# ---------------------------------------------------------
# ACTIVATE / DEACTIVATE
# ---------------------------------------------------------
class UserStatusUpdate(BaseModel):
    is_active: bool


# ---------------------------------------------------------
# READ USER (response)
# ---------------------------------------------------------
class UserRead(UserBase):
    id: UUID
    role: UserRole | str
    contact_number: Optional[str] = None
    is_active: bool = True
    must_reset_password: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
