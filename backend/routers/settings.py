from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_admin_user
from core.errors import NotFoundError, ValidationError
from db.database import atomic, get_async_session
from db.system_setting import SystemSetting as SystemSettingModel
from db.users import User
from schemas.inventory import SuccessResponse
from schemas.reference import SystemSettingRead, SystemSettingUpsert

router = APIRouter()


async def _find(db: AsyncSession, key: str):
    res = await db.execute(select(SystemSettingModel).where(SystemSettingModel.key == key))
    return res.scalar_one_or_none()


@router.get("", response_model=List[SystemSettingRead])
async def list_settings(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    res = await db.execute(select(SystemSettingModel).order_by(SystemSettingModel.key.asc()))
    return [SystemSettingRead(**s.to_schema) for s in res.scalars().all()]


@router.get("/{key}", response_model=SystemSettingRead)
async def get_setting(
    key: str,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    s = await _find(db, key)
    if not s:
        raise NotFoundError("Setting not found")
    return SystemSettingRead(**s.to_schema)


@router.put("/{key}", response_model=SystemSettingRead)
async def upsert_setting(
    key: str,
    payload: SystemSettingUpsert,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    key = key.strip()
    if not key:
        raise ValidationError.for_field("key", "key is required")

    s = await _find(db, key)
    data = payload.model_dump(exclude_unset=True)
    async with atomic(db):
        if s is None:
            s = SystemSettingModel(key=key, value=payload.value, description=payload.description)
            db.add(s)
        else:
            for field, value in data.items():
                setattr(s, field, value)
    return SystemSettingRead(**s.to_schema)


@router.delete("/{key}", response_model=SuccessResponse)
async def delete_setting(
    key: str,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    s = await _find(db, key)
    if not s:
        raise NotFoundError("Setting not found")
    async with atomic(db):
        await db.delete(s)
    return SuccessResponse(success=True)
