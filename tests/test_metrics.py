import pytest


@pytest.mark.asyncio
async def test_root_health(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["service"] == "Campus ERP Backend"


@pytest.mark.asyncio
async def test_metrics_endpoint(client):
    res = await client.get("/api/metrics")
    assert res.status_code == 200

    data = res.json()
    assert data["status"] == "Online"
    assert data["database"] == "Connected"
    assert "cpu" in data
    assert "ram" in data
    assert isinstance(data["uptime"], int)
    assert isinstance(data["version"], str)


@pytest.mark.asyncio
async def test_service_health(client):
    res = await client.get("/api/metrics/health")
    assert res.status_code == 200
    assert res.json()["smtp_server"] == "Not Configured"


@pytest.mark.asyncio
async def test_dashboard_stats(client, course, admin_headers):
    await client.post(
        "/api/admissions",
        json={
            "first_name": "Jane",
            "last_name": "Doe",
            "applied_course_id": str(course.id),
            "academic_year": "2025",
        },
    )

    res = await client.get("/api/metrics/dashboard-stats", headers=admin_headers)
    assert res.status_code == 200
    data = res.json()
    assert data["admissions"]["total"] == 1
    assert data["admissions"]["by_status"] == {"pending": 1}
    assert data["students"] == 0


@pytest.mark.asyncio
async def test_audit_logs_are_admin_only(client, course, admin_headers, staff_headers):
    res = await client.get("/api/admin/audit-logs", headers=staff_headers)
    assert res.status_code == 403

    await client.post(
        "/api/admissions",
        json={
            "first_name": "Jane",
            "last_name": "Doe",
            "applied_course_id": str(course.id),
            "academic_year": "2025",
        },
    )
    logs = await client.get("/api/admin/audit-logs", headers=admin_headers)
    assert logs.status_code == 200
    assert logs.json()[0]["action"] == "ADMISSION_SUBMITTED"
