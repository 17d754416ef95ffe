import pytest

from conftest import random_email


@pytest.mark.asyncio
async def test_admin_creates_and_lists_users(client, admin_headers):
    email = random_email("staff")
    res = await client.post(
        "/api/users/",
        json={"name": "Accounts Office", "email": email, "password": "Office123", "role": "staff"},
        headers=admin_headers,
    )
    assert res.status_code == 201, res.text
    assert res.json()["role"] == "staff"
    assert "password_hash" not in res.json()

    listing = await client.get("/api/users/", headers=admin_headers)
    assert listing.status_code == 200
    assert email in [u["email"] for u in listing.json()]


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client, admin_headers):
    payload = {"name": "Dup", "email": "dup@campus.edu", "password": "Dup12345", "role": "staff"}
    await client.post("/api/users/", json=payload, headers=admin_headers)

    again = await client.post("/api/users/", json=payload, headers=admin_headers)
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_staff_cannot_manage_users(client, staff_headers):
    res = await client.get("/api/users/", headers=staff_headers)
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_deactivated_user_is_locked_out(client, admin_headers, staff_headers):
    me = await client.get("/api/auth/me", headers=staff_headers)
    staff_id = me.json()["id"]

    res = await client.patch(
        f"/api/users/{staff_id}/status", json={"is_active": False}, headers=admin_headers
    )
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    # Existing token stops working and a new login is refused
    assert (await client.get("/api/auth/me", headers=staff_headers)).status_code == 401
    login = await client.post("/api/auth/login", json={"email": "staff@campus.edu", "password": "StaffPass123"})
    assert login.status_code == 401


@pytest.mark.asyncio
async def test_admin_cannot_deactivate_self(client, admin_user, admin_headers):
    res = await client.patch(
        f"/api/users/{admin_user.id}/status", json={"is_active": False}, headers=admin_headers
    )
    assert res.status_code == 400
