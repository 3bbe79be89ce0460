from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user, current_admin_user
from core.errors import ConflictError, NotFoundError
from db.category import Category as CategoryModel
from db.database import atomic, get_async_session
from db.inventory.item import Item
from db.users import User
from schemas.inventory import SuccessResponse
from schemas.reference import CategoryCreate, CategoryRead, CategoryUpdate

router = APIRouter()


async def _get_category(db: AsyncSession, category_id: UUID) -> CategoryModel:
    res = await db.execute(select(CategoryModel).where(CategoryModel.id == category_id))
    c = res.scalar_one_or_none()
    if not c:
        raise NotFoundError("Category not found")
    return c


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: UUID = None) -> None:
    stmt = select(CategoryModel).where(func.lower(CategoryModel.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(CategoryModel.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none():
        raise ConflictError("Category already exists")


@router.get("", response_model=List[CategoryRead])
async def list_categories(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    stmt = select(CategoryModel)
    if not include_inactive:
        stmt = stmt.where(CategoryModel.is_active == True)  # noqa: E712
    res = await db.execute(stmt.order_by(func.lower(CategoryModel.name).asc()))
    return [CategoryRead(**c.to_schema) for c in res.scalars().all()]


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    await _ensure_unique_name(db, payload.name)
    async with atomic(db):
        c = CategoryModel(**payload.model_dump())
        db.add(c)
    return CategoryRead(**c.to_schema)


@router.put("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: UUID,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    c = await _get_category(db, category_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        await _ensure_unique_name(db, data["name"], exclude_id=c.id)
    async with atomic(db):
        for field, value in data.items():
            setattr(c, field, value)
    return CategoryRead(**c.to_schema)


@router.delete("/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    await _get_category(db, category_id)
    async with atomic(db):
        await db.execute(update(Item).where(Item.category_id == category_id).values(category_id=None))
        await db.execute(delete(CategoryModel).where(CategoryModel.id == category_id))
    return SuccessResponse(success=True)
