# app/api/endpoints/users.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_db_session
from app.core.exceptions import NotFoundError
from app.core.rbac import require_admin
from app.schemas.user import UserCreate, UserRead, UserStatusUpdate
from app.services.auth_service import create_user, list_users, set_user_active
from app.models.user import User

router = APIRouter(prefix="/api/users", tags=["Users"])


# -------------------------------------------------------------------
# Create ANY user (Admin only)
# -------------------------------------------------------------------
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin)
):
    try:
        return await create_user(
            session,
            data.name,
            data.email,
            data.password,
            role=data.role,
            contact_number=data.contact_number,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# -------------------------------------------------------------------
# List all users (Admin only)
# -------------------------------------------------------------------
@router.get("/", response_model=List[UserRead])
async def list_users_endpoint(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin)
):
    return await list_users(session)


# -------------------------------------------------------------------
# Activate / deactivate (Admin only)
# -------------------------------------------------------------------
@router.patch("/{user_id}/status", response_model=UserRead)
async def update_user_status(
    user_id: UUID,
    data: UserStatusUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_admin)
):
    if user_id == current_user.id and not data.is_active:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    try:
        return await set_user_active(session, user_id, data.is_active)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
