from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text, Uuid
from datetime import datetime
from typing import Optional
import uuid


# ------------------------------------------------------------
# COURSE (program registry, e.g. B.Tech CSE, BCA)
# ------------------------------------------------------------
class Course(SQLModel, table=True):
    __tablename__ = "courses"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    name: str = Field(sa_column=Column(String, nullable=False, unique=True))
    code: str = Field(sa_column=Column(String(32), nullable=False, unique=True, index=True))
    department: str = Field(sa_column=Column(String, nullable=False))

    # in years
    duration: int = Field(sa_column=Column(Integer, nullable=False))

    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )

    total_fee: float = Field(sa_column=Column(Float, nullable=False))

    active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
