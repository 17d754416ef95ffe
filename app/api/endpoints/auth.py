# app/api/endpoints/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db_session
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.models.user import User
from app.schemas.auth import LoginRequest, TokenWithUser
from app.schemas.user import UserRead
from app.services.auth_service import authenticate_user, create_login_response

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN (all roles)
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    user = await authenticate_user(session, payload.email, payload.password)

    if not user:
        logger.warning(f"Failed login for {payload.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info(f"User {user.email} logged in")
    return create_login_response(user)


# -------------------------------------------------------------------
# CURRENT USER (reachable before a forced password change)
# -------------------------------------------------------------------
@router.get("/me", response_model=UserRead)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
