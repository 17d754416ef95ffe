# app/services/audit_service.py

from uuid import UUID
from typing import Optional, Dict, Any

from loguru import logger

from app.models.audit import AuditLog
from app.core.database import AsyncSessionLocal


async def log_activity(
    action: str,
    actor_id: Optional[UUID] = None,
    actor_role: Optional[str] = None,
    actor_name: Optional[str] = None,
    admission_id: Optional[UUID] = None,
    remarks: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
):
    """
    Creates an audit log entry in its own DB session.
    Meant for BackgroundTasks: the request session is closed by then.
    """
    async with AsyncSessionLocal() as session:
        try:
            session.add(
                AuditLog(
                    actor_id=actor_id,
                    actor_role=actor_role,
                    actor_name=actor_name,
                    admission_id=admission_id,
                    action=action,
                    remarks=remarks,
                    details=details or {}
                )
            )
            await session.commit()

        except Exception:
            # The response has already gone out; log and keep the pool healthy
            logger.exception(f"Audit log write failed for action {action}")
            await session.rollback()
