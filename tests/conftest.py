import os
import uuid
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must happen BEFORE importing app.main: settings, engine and limiter
# are built at import time.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_campus_erp.db"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-bytes!"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["STUDENT_DEFAULT_PASSWORD"] = ""

from sqlmodel import SQLModel

from app.main import app
from app.core.database import AsyncSessionLocal, engine, init_db
from app.models.user import UserRole
from app.schemas.course import CourseCreate
from app.services.auth_service import create_user
from app.services.course_service import create_course

ADMIN_EMAIL = "admin@campus.edu"
ADMIN_PASSWORD = "AdminPass123"


# ------------------------------------------------------------------
# Fresh schema for every test that touches the database
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def reset_database():
    await init_db()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest_asyncio.fixture
async def client(reset_database):
    # ASGITransport does not fire startup events; tables come from reset_database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(reset_database):
    async with AsyncSessionLocal() as session:
        yield session


# ------------------------------------------------------------------
# Accounts
# ------------------------------------------------------------------
async def login_headers(client, email, password):
    res = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await create_user(
        db_session,
        name="Super Admin",
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        role=UserRole.Admin,
    )


@pytest_asyncio.fixture
async def admin_headers(client, admin_user):
    return await login_headers(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest_asyncio.fixture
async def staff_headers(client, db_session):
    await create_user(
        db_session,
        name="Office Staff",
        email="staff@campus.edu",
        password="StaffPass123",
        role=UserRole.Staff,
    )
    return await login_headers(client, "staff@campus.edu", "StaffPass123")


# ------------------------------------------------------------------
# Program registry
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def course(db_session):
    return await create_course(
        db_session,
        CourseCreate(
            name="Computer Science",
            code="CS101",
            department="Engineering",
            duration=4,
            total_fee=120000,
        ),
    )


def admission_payload(course_id, **overrides):
    payload = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "a@x.com",
        "contact_number": "9876543210",
        "date_of_birth": "2006-04-12",
        "gender": "Female",
        "applied_course_id": str(course_id),
        "academic_year": "2025",
        "previous_education": [
            {"institution_name": "City High School", "degree": "XII", "percentage": 91.4}
        ],
    }
    payload.update(overrides)
    return payload


def random_email(prefix="user"):
    return f"{prefix}-{uuid.uuid4().hex[:8]}@campus.edu"
