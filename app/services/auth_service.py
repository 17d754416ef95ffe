# app/services/auth_service.py

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger
import uuid

from app.models.user import User, UserRole
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.schemas.auth import TokenWithUser
from app.schemas.user import UserRead


# ============================================================================
# FETCH USER BY EMAIL
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


# ============================================================================
# FETCH USER BY ID
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole,
    contact_number: str | None = None,
) -> User:
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=email.lower(),
        password_hash=hash_password(password),
        role=role,
        contact_number=contact_number,
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this email already exists")


# ============================================================================
# STUDENT ACCOUNT FOR AN APPROVED ADMISSION (caller adds + commits)
# ============================================================================
def build_student_account(
    name: str,
    email: str,
    password: str,
    contact_number: str | None = None,
) -> User:
    """
    Account created on the applicant's behalf. The password is a
    placeholder, so the user has to replace it before anything else.
    """
    return User(
        id=uuid.uuid4(),
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=UserRole.Student,
        contact_number=contact_number,
        must_reset_password=True,
    )


# ============================================================================
# AUTHENTICATE (email + password)
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email.lower())
    if not user:
        return None

    if not user.is_active:
        logger.warning(f"Login attempt on deactivated account {user.email}")
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ============================================================================
# CREATE LOGIN RESPONSE
# ============================================================================
def create_login_response(user: User) -> TokenWithUser:
    role_str = user.role.value if isinstance(user.role, UserRole) else str(user.role)

    token = create_access_token(
        subject=str(user.id),
        data={"role": role_str},
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
        must_reset_password=user.must_reset_password,
    )


# ============================================================================
# CHANGE PASSWORD (also clears the forced reset flag)
# ============================================================================
async def change_password(
    session: AsyncSession,
    user: User,
    old_password: str,
    new_password: str,
) -> User:
    if not verify_password(old_password, user.password_hash):
        raise ValueError("Old password incorrect")

    if old_password == new_password:
        raise ValueError("New password must be different")

    user.password_hash = hash_password(new_password)
    user.must_reset_password = False

    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


# ============================================================================
# LIST USERS
# ============================================================================
async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


# ============================================================================
# ACTIVATE / DEACTIVATE USER
# ============================================================================
async def set_user_active(session: AsyncSession, user_id: uuid.UUID, is_active: bool) -> User:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.is_active = is_active
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user
