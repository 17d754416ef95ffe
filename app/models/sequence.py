# app/models/sequence.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, String


class SequenceCounter(SQLModel, table=True):
    """
    One row per identifier kind and year, e.g. key "ADM-26".
    `value` is the last number handed out for that key.
    """
    __tablename__ = "sequence_counters"

    key: str = Field(sa_column=Column(String(32), primary_key=True))
    value: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
