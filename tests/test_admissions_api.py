import uuid
import pytest
from unittest.mock import patch
from sqlmodel import select

from app.models.audit import AuditLog
from app.models.student import Student
from app.core.database import AsyncSessionLocal

from conftest import admission_payload


async def submit(client, course_id, **overrides):
    res = await client.post("/api/admissions", json=admission_payload(course_id, **overrides))
    assert res.status_code == 201, res.text
    return res.json()


# ------------------------------------------------------------------
# PUBLIC FORM
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_submit_admission_is_public(client, course):
    data = await submit(client, course.id, email="Jane.Doe@Example.com", status="approved")

    assert data["application_number"].startswith("ADM-")
    assert data["status"] == "pending"
    assert data["email"] == "jane.doe@example.com"
    assert data["student_id"] is None


@pytest.mark.asyncio
async def test_submit_rejects_unknown_course(client, course):
    res = await client.post("/api/admissions", json=admission_payload(uuid.uuid4()))
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid course selected"


@pytest.mark.asyncio
async def test_application_numbers_increase(client, course):
    first = await submit(client, course.id)
    second = await submit(client, course.id, email="b@x.com")

    assert first["application_number"] != second["application_number"]
    assert first["application_number"] < second["application_number"]


# ------------------------------------------------------------------
# PROCESS
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_process_approve_links_student(client, course, admin_headers):
    admission = await submit(client, course.id)

    res = await client.put(
        f"/api/admissions/{admission['id']}/process",
        json={"status": "approved", "remarks": "Welcome aboard"},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    data = res.json()
    assert data["status"] == "approved"
    assert data["student_id"] is not None
    assert data["user_id"] is not None
    assert data["reviewed_by"] is not None

    student_res = await client.get(f"/api/students/{data['student_id']}", headers=admin_headers)
    assert student_res.status_code == 200
    student = student_res.json()
    assert student["full_name"] == "Jane Doe"
    assert student["batch"] == "2025"
    assert student["course_id"] == str(course.id)

    # Audit entry written by the background task
    async with AsyncSessionLocal() as session:
        logs = (
            await session.execute(
                select(AuditLog).where(AuditLog.action == "ADMISSION_PROCESSED")
            )
        ).scalars().all()
    assert len(logs) == 1
    assert logs[0].details["account_created"] is True


@pytest.mark.asyncio
async def test_process_twice_keeps_one_student(client, course, admin_headers):
    admission = await submit(client, course.id)
    url = f"/api/admissions/{admission['id']}/process"

    first = await client.put(url, json={"status": "approved"}, headers=admin_headers)
    second = await client.put(url, json={"status": "approved"}, headers=admin_headers)

    assert first.json()["student_id"] == second.json()["student_id"]
    async with AsyncSessionLocal() as session:
        students = (await session.execute(select(Student))).scalars().all()
    assert len(students) == 1


@pytest.mark.asyncio
async def test_process_invalid_status_is_400(client, course, admin_headers):
    admission = await submit(client, course.id)

    res = await client.put(
        f"/api/admissions/{admission['id']}/process",
        json={"status": "enrolled"},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert "Invalid status" in res.json()["detail"]

    stored = await client.get(f"/api/admissions/{admission['id']}", headers=admin_headers)
    assert stored.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_process_status_must_match_exactly(client, course, admin_headers):
    admission = await submit(client, course.id)

    res = await client.put(
        f"/api/admissions/{admission['id']}/process",
        json={"status": "  APPROVED "},
        headers=admin_headers,
    )
    assert res.status_code == 400

    stored = (await client.get(f"/api/admissions/{admission['id']}", headers=admin_headers)).json()
    assert stored["status"] == "pending"
    assert stored["student_id"] is None


@pytest.mark.asyncio
async def test_process_missing_admission_is_404(client, admin_headers):
    res = await client.put(
        f"/api/admissions/{uuid.uuid4()}/process",
        json={"status": "approved"},
        headers=admin_headers,
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_process_requires_admin(client, course, staff_headers):
    admission = await submit(client, course.id)

    res = await client.put(
        f"/api/admissions/{admission['id']}/process",
        json={"status": "approved"},
        headers=staff_headers,
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_process_without_token(client, course):
    admission = await submit(client, course.id)
    res = await client.put(f"/api/admissions/{admission['id']}/process", json={"status": "approved"})
    assert res.status_code in (401, 403)


# ------------------------------------------------------------------
# UPDATE / DELETE
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_update_keeps_application_number(client, course, admin_headers):
    admission = await submit(client, course.id)

    res = await client.put(
        f"/api/admissions/{admission['id']}",
        json={"first_name": "Janet", "status": "under_review", "application_number": "HACK-1"},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    data = res.json()
    assert data["first_name"] == "Janet"
    assert data["status"] == "under_review"
    assert data["application_number"] == admission["application_number"]


@pytest.mark.asyncio
async def test_update_rejects_unknown_course(client, course, admin_headers):
    admission = await submit(client, course.id)

    res = await client.put(
        f"/api/admissions/{admission['id']}",
        json={"applied_course_id": str(uuid.uuid4())},
        headers=admin_headers,
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_delete_pending_admission(client, course, admin_headers):
    admission = await submit(client, course.id)

    res = await client.delete(f"/api/admissions/{admission['id']}", headers=admin_headers)
    assert res.status_code == 204

    missing = await client.get(f"/api/admissions/{admission['id']}", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_converted_admission_conflicts(client, course, admin_headers):
    admission = await submit(client, course.id)
    await client.put(
        f"/api/admissions/{admission['id']}/process",
        json={"status": "approved"},
        headers=admin_headers,
    )

    res = await client.delete(f"/api/admissions/{admission['id']}", headers=admin_headers)
    assert res.status_code == 400
    assert "student record" in res.json()["detail"]


# ------------------------------------------------------------------
# LIST / STATS
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_search_and_pagination(client, course, staff_headers):
    await submit(client, course.id)
    await submit(client, course.id, first_name="Rahul", last_name="Verma", email="rahul@x.com")
    await submit(client, course.id, first_name="Meera", last_name="Iyer", email="meera@x.com")

    res = await client.get("/api/admissions", params={"search": "verm"}, headers=staff_headers)
    assert res.status_code == 200
    data = res.json()
    assert data["total"] == 1
    assert data["data"][0]["first_name"] == "Rahul"

    page = await client.get("/api/admissions", params={"limit": 2, "page": 2}, headers=staff_headers)
    body = page.json()
    assert body["total"] == 3
    assert body["pages"] == 2
    assert body["count"] == 1


@pytest.mark.asyncio
async def test_list_filters_by_status(client, course, admin_headers):
    first = await submit(client, course.id)
    await submit(client, course.id, email="other@x.com")
    await client.put(
        f"/api/admissions/{first['id']}/process",
        json={"status": "rejected"},
        headers=admin_headers,
    )

    res = await client.get("/api/admissions", params={"status": "rejected"}, headers=admin_headers)
    data = res.json()
    assert data["total"] == 1
    assert data["data"][0]["id"] == first["id"]


@pytest.mark.asyncio
async def test_stats_per_status_and_course(client, course, admin_headers):
    first = await submit(client, course.id)
    await submit(client, course.id, email="b@x.com")
    await submit(client, course.id, email="c@x.com", academic_year="2026")
    await client.put(
        f"/api/admissions/{first['id']}/process",
        json={"status": "approved"},
        headers=admin_headers,
    )

    res = await client.get("/api/admissions/stats", params={"academic_year": "2025"}, headers=admin_headers)
    assert res.status_code == 200
    stats = res.json()
    assert stats["total_applications"] == 2
    assert stats["status_counts"] == {"approved": 1, "pending": 1}
    assert stats["course_stats"][0]["course_code"] == "CS101"
    assert stats["course_stats"][0]["total_applications"] == 2
    assert stats["course_stats"][0]["approved_applications"] == 1


@pytest.mark.asyncio
async def test_rejection_email_sent_once(client, course, admin_headers):
    admission = await submit(client, course.id)
    url = f"/api/admissions/{admission['id']}"

    with patch("app.api.endpoints.admissions.send_admission_rejected_email") as send:
        await client.put(f"{url}/process", json={"status": "rejected"}, headers=admin_headers)
        await client.put(url, json={"contact_number": "9000000000"}, headers=admin_headers)
        await client.put(url, json={"blood_group": "O+"}, headers=admin_headers)
        await client.put(f"{url}/process", json={"status": "rejected"}, headers=admin_headers)

    send.assert_called_once()
    assert send.call_args[0][0]["email"] == "a@x.com"
