# app/api/endpoints/metrics.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func
from sqlmodel import select
import redis.asyncio as redis
import socket
import time

from app.core.config import settings
from app.api.deps import get_db_session
from app.core.database import test_connection
from app.core.rbac import require_admin
from app.models.admission import Admission
from app.models.audit import AuditLog
from app.models.fee import Fee
from app.models.student import Student
from app.models.user import User

router = APIRouter(
    prefix="/api/metrics",
    tags=["System & Metrics"]
)

START_TIME = time.time()


# ===================================================================
# 1. SERVICE HEALTH (public)
# ===================================================================
@router.get("/health")
async def system_health():
    try:
        await test_connection()
        db_status = "Connected"
    except Exception:
        db_status = "Error"

    smtp_status = "Not Configured"
    if settings.SMTP_HOST:
        try:
            sock = socket.create_connection((settings.SMTP_HOST, settings.SMTP_PORT), timeout=2)
            sock.close()
            smtp_status = "Connected"
        except OSError:
            smtp_status = "Error"

    return {
        "status": "Online",
        "uptime_seconds": int(time.time() - START_TIME),
        "database": db_status,
        "smtp_server": smtp_status,
        "environment": settings.ENV,
    }


# ===================================================================
# 2. ADMIN DASHBOARD
# ===================================================================
@router.get("/dashboard-stats")
async def get_dashboard_stats(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    status_res = await session.execute(
        select(Admission.status, func.count(Admission.id)).group_by(Admission.status)
    )
    admissions = {status.value: count for status, count in status_res.all()}

    total_students = (await session.execute(select(func.count(Student.id)))).scalar_one()

    fee_res = await session.execute(
        select(
            func.coalesce(func.sum(Fee.paid_amount), 0),
            func.coalesce(func.sum(Fee.remaining_amount), 0),
        )
    )
    collected, outstanding = fee_res.one()

    logs_res = await session.execute(select(AuditLog).order_by(AuditLog.timestamp.desc()).limit(5))

    return {
        "admissions": {
            "total": sum(admissions.values()),
            "by_status": admissions,
        },
        "students": total_students,
        "fees": {
            "collected": round(float(collected), 2),
            "outstanding": round(float(outstanding), 2),
        },
        "recent_activity": logs_res.scalars().all(),
    }


# ===================================================================
# 3. RATE LIMIT STORE (admin)
# ===================================================================
@router.get("/redis-stats")
async def get_redis_statistics(
    _: User = Depends(require_admin),
):
    if not settings.REDIS_URL:
        return {"status": "Disabled", "message": "Redis is not configured."}

    client = None
    try:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2
        )

        info = await client.info()
        active_limits = []
        async for key in client.scan_iter(match="LIMITER/*", count=100):
            active_limits.append(key)
            if len(active_limits) >= 20:
                break

        return {
            "status": "Online",
            "redis_version": info.get("redis_version"),
            "connected_clients": info.get("connected_clients"),
            "used_memory": info.get("used_memory_human"),
            "total_keys": await client.dbsize(),
            "active_rate_limit_windows": len(active_limits),
        }

    except redis.ConnectionError:
        return {"status": "Offline", "detail": "Redis server unreachable."}
    finally:
        if client:
            await client.aclose()
