from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user, current_admin_user
from core.errors import ConflictError, NotFoundError
from db.database import atomic, get_async_session
from db.inventory.item import Item
from db.storage_location import StorageLocation as StorageLocationModel
from db.users import User
from schemas.inventory import SuccessResponse
from schemas.reference import StorageLocationCreate, StorageLocationRead, StorageLocationUpdate

router = APIRouter()


async def _get_location(db: AsyncSession, location_id: UUID) -> StorageLocationModel:
    res = await db.execute(select(StorageLocationModel).where(StorageLocationModel.id == location_id))
    loc = res.scalar_one_or_none()
    if not loc:
        raise NotFoundError("Storage location not found")
    return loc


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: UUID = None) -> None:
    stmt = select(StorageLocationModel).where(func.lower(StorageLocationModel.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(StorageLocationModel.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none():
        raise ConflictError("Storage location already exists")


@router.get("", response_model=List[StorageLocationRead])
async def list_locations(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    stmt = select(StorageLocationModel)
    if not include_inactive:
        stmt = stmt.where(StorageLocationModel.is_active == True)  # noqa: E712
    res = await db.execute(stmt.order_by(func.lower(StorageLocationModel.name).asc()))
    return [StorageLocationRead(**loc.to_schema) for loc in res.scalars().all()]


@router.post("", response_model=StorageLocationRead, status_code=status.HTTP_201_CREATED)
async def create_location(
    payload: StorageLocationCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    await _ensure_unique_name(db, payload.name)
    async with atomic(db):
        loc = StorageLocationModel(**payload.model_dump())
        db.add(loc)
    return StorageLocationRead(**loc.to_schema)


@router.put("/{location_id}", response_model=StorageLocationRead)
async def update_location(
    location_id: UUID,
    payload: StorageLocationUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    loc = await _get_location(db, location_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        await _ensure_unique_name(db, data["name"], exclude_id=loc.id)
    async with atomic(db):
        for field, value in data.items():
            setattr(loc, field, value)
    return StorageLocationRead(**loc.to_schema)


@router.delete("/{location_id}", response_model=SuccessResponse)
async def delete_location(
    location_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    await _get_location(db, location_id)
    async with atomic(db):
        await db.execute(
            update(Item).where(Item.storage_location_id == location_id).values(storage_location_id=None)
        )
        await db.execute(delete(StorageLocationModel).where(StorageLocationModel.id == location_id))
    return SuccessResponse(success=True)
