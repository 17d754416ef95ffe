#app/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime
from typing import Optional, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime, timezone

from app.models.types import JSONType


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # No FK: the trail outlives deleted admissions
    admission_id: Optional[UUID] = Field(default=None, index=True)
    actor_id: Optional[UUID] = Field(default=None, foreign_key="users.id")
    actor_role: Optional[str] = None

    # Snapshot of the actor's name at the time of the action
    actor_name: Optional[str] = None

    action: str
    remarks: Optional[str] = None

    # e.g. {"application_number": "...", "student_id": "...", "status": "..."}
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONType))

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
