# app/services/sequence_service.py

from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sequence import SequenceCounter

ADMISSION_PREFIX = "ADM"
STUDENT_PREFIX = "STU"
FEE_RECEIPT_PREFIX = "FEE"

_UPSERT_BY_DIALECT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def next_sequence_value(session: AsyncSession, key: str) -> int:
    """
    Atomically increment the counter for `key` and return the new value.

    Runs as a single INSERT ... ON CONFLICT DO UPDATE ... RETURNING inside
    the caller's transaction: concurrent callers queue on the counter row,
    and a rollback of the caller also gives the number back.
    """
    dialect = session.get_bind().dialect.name
    insert_fn = _UPSERT_BY_DIALECT.get(dialect)
    if insert_fn is None:
        raise RuntimeError(f"Sequence counters are not supported on '{dialect}'")

    table = SequenceCounter.__table__
    stmt = (
        insert_fn(table)
        .values(key=key, value=1)
        .on_conflict_do_update(
            index_elements=[table.c.key],
            set_={"value": table.c.value + 1},
        )
        .returning(table.c.value)
    )

    result = await session.execute(stmt)
    return result.scalar_one()


def format_identifier(prefix: str, year: str, value: int) -> str:
    return f"{prefix}-{year}-{value:04d}"


async def next_identifier(session: AsyncSession, prefix: str) -> str:
    """PREFIX-YY-NNNN, numbered per prefix and calendar year (UTC)."""
    year = datetime.now(timezone.utc).strftime("%y")
    value = await next_sequence_value(session, f"{prefix}-{year}")
    return format_identifier(prefix, year, value)
