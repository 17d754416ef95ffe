# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import datetime
import uuid
from enum import Enum
from typing import Optional

from app.models.enums import enum_values


class UserRole(str, Enum):
    Admin = "admin"
    Staff = "staff"      # admissions office, accounts, faculty
    Student = "student"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    name: str = Field(nullable=False)
    email: str = Field(nullable=False, index=True, unique=True)
    password_hash: str = Field(nullable=False)

    role: UserRole = Field(
        sa_column=Column(SAEnum(UserRole, name="user_role", values_callable=enum_values), nullable=False)
    )

    contact_number: Optional[str] = Field(
        default=None,
        sa_column=Column(String, nullable=True)
    )

    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, default=True)
    )

    # Set on accounts created with a placeholder password (admission approval).
    # Such users must change their password before using the API.
    must_reset_password: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
