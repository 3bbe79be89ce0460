import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_admin_user
from core.errors import BusinessRuleViolation, ConflictError, NotFoundError
from db.database import atomic, get_async_session
from db.users import User
from schemas.users import UserAdminRead, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _admin_read(u: User) -> UserAdminRead:
    return UserAdminRead(
        **u.to_schema,
        is_active=bool(u.is_active),
        has_password=bool(u.hashed_password),
        created_at=u.created_at,
    )


@router.get("", response_model=List[UserAdminRead])
async def list_users(
    db: AsyncSession = Depends(get_async_session),
    admin: User = Depends(current_admin_user),
):
    res = await db.execute(select(User).order_by(func.lower(User.email).asc()))
    return [_admin_read(u) for u in res.scalars().all()]


@router.post("", response_model=UserAdminRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_async_session),
    admin: User = Depends(current_admin_user),
):
    """Create an account without a password; the user sets it on first login."""
    existing = await db.execute(select(User).where(func.lower(User.email) == payload.email))
    if existing.scalar_one_or_none():
        raise ConflictError("User already exists")

    async with atomic(db):
        u = User(
            email=payload.email,
            full_name=payload.full_name,
            role=payload.role,
            hashed_password=None,
            is_active=True,
            is_superuser=False,
            is_verified=False,
        )
        db.add(u)
    await db.refresh(u)
    logger.info("user created: %s role=%s by %s", u.id, u.role.value, admin.id)
    return _admin_read(u)


@router.patch("/{user_id}", response_model=UserAdminRead)
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_async_session),
    admin: User = Depends(current_admin_user),
):
    u = await db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")

    data = payload.model_dump(exclude_unset=True)
    if u.id == admin.id and (data.get("is_active") is False or data.get("role") not in (None, admin.role)):
        raise BusinessRuleViolation("You cannot deactivate or demote your own account")

    async with atomic(db):
        for field, value in data.items():
            if field in ("role", "is_active") and value is None:
                continue
            setattr(u, field, value)
    await db.refresh(u)
    logger.info("user updated: %s fields=%s by %s", u.id, sorted(data), admin.id)
    return _admin_read(u)
