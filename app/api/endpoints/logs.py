# app/api/endpoints/logs.py

from fastapi import APIRouter, Depends, Query
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session
from app.core.rbac import require_admin
from app.models.user import User
from app.models.audit import AuditLog
from app.schemas.audit import AuditLogRead

router = APIRouter(prefix="/api/admin", tags=["Audit & Logs"])


# -------------------------------------------------------------------
# ADMISSION WORKFLOW AUDIT LOGS
# -------------------------------------------------------------------
@router.get("/audit-logs", response_model=List[AuditLogRead])
async def get_audit_logs(
    action: Optional[str] = Query(None),
    actor_role: Optional[str] = Query(None),
    admission_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    query = select(AuditLog).order_by(AuditLog.timestamp.desc()).limit(limit)

    if action:
        query = query.where(AuditLog.action == action)
    if actor_role:
        query = query.where(AuditLog.actor_role == actor_role)
    if admission_id:
        query = query.where(AuditLog.admission_id == admission_id)

    result = await session.execute(query)
    return result.scalars().all()
