import uuid
import pytest

from conftest import admission_payload


async def approve(client, course_id, headers, **overrides):
    admission = await client.post("/api/admissions", json=admission_payload(course_id, **overrides))
    res = await client.put(
        f"/api/admissions/{admission.json()['id']}/process",
        json={"status": "approved"},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    return res.json()


@pytest.mark.asyncio
async def test_list_students_with_search(client, course, admin_headers):
    await approve(client, course.id, admin_headers)
    await approve(client, course.id, admin_headers, first_name="Arjun", last_name="Nair", email="arjun@x.com")

    res = await client.get("/api/students/", headers=admin_headers)
    assert res.status_code == 200
    assert len(res.json()) == 2

    found = await client.get("/api/students/", params={"search": "nair"}, headers=admin_headers)
    assert [s["full_name"] for s in found.json()] == ["Arjun Nair"]

    by_batch = await client.get("/api/students/", params={"batch": "2030"}, headers=admin_headers)
    assert by_batch.json() == []


@pytest.mark.asyncio
async def test_student_without_email_has_no_account(client, course, admin_headers):
    admission = await approve(client, course.id, admin_headers, email=None)
    assert admission["user_id"] is None

    res = await client.get(f"/api/students/{admission['student_id']}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["user_id"] is None
    assert res.json()["email"] is None


@pytest.mark.asyncio
async def test_missing_student(client, staff_headers):
    res = await client.get(f"/api/students/{uuid.uuid4()}", headers=staff_headers)
    assert res.status_code == 404
