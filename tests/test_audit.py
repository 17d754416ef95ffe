import pytest
from sqlmodel import select

from app.core.database import AsyncSessionLocal
from app.models.audit import AuditLog
from app.services.audit_service import log_activity

from conftest import admission_payload


@pytest.mark.asyncio
async def test_log_activity_persists_row(db_session, admin_user):
    await log_activity(
        action="ADMISSION_PROCESSED",
        actor_id=admin_user.id,
        actor_role="admin",
        actor_name=admin_user.name,
        remarks="Looks good",
        details={"status": "approved"},
    )

    log = (await db_session.execute(select(AuditLog))).scalar_one()
    assert log.action == "ADMISSION_PROCESSED"
    assert log.actor_id == admin_user.id
    assert log.details == {"status": "approved"}
    assert log.timestamp is not None


@pytest.mark.asyncio
async def test_process_writes_audit_entry(client, course, admin_headers):
    submitted = await client.post("/api/admissions", json=admission_payload(course.id))
    admission_id = submitted.json()["id"]

    await client.put(
        f"/api/admissions/{admission_id}/process",
        json={"status": "rejected", "remarks": "Seats full"},
        headers=admin_headers,
    )

    async with AsyncSessionLocal() as session:
        logs = (
            await session.execute(select(AuditLog).order_by(AuditLog.timestamp))
        ).scalars().all()

    assert [log.action for log in logs] == ["ADMISSION_SUBMITTED", "ADMISSION_PROCESSED"]
    assert str(logs[1].admission_id) == admission_id
    assert logs[1].remarks == "Seats full"
    assert logs[1].details["status"] == "rejected"

    listed = await client.get(
        "/api/admin/audit-logs", params={"admission_id": admission_id}, headers=admin_headers
    )
    assert listed.status_code == 200
    assert len(listed.json()) == 2
