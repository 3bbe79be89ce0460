from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user, current_admin_user
from core.errors import ConflictError, NotFoundError
from db.database import atomic, get_async_session
from db.inventory.item import Item
from db.supplier import Supplier as SupplierModel
from db.users import User
from schemas.inventory import SuccessResponse
from schemas.suppliers import SupplierCreate, SupplierRead, SupplierUpdate

router = APIRouter()


async def _get_supplier(db: AsyncSession, supplier_id: UUID) -> SupplierModel:
    res = await db.execute(select(SupplierModel).where(SupplierModel.id == supplier_id))
    m = res.scalar_one_or_none()
    if not m:
        raise NotFoundError("Supplier not found")
    return m


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: UUID = None) -> None:
    stmt = select(SupplierModel).where(func.lower(SupplierModel.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(SupplierModel.id != exclude_id)
    existing = await db.execute(stmt)
    if existing.scalar_one_or_none():
        raise ConflictError("Supplier already exists")


@router.get("", response_model=List[SupplierRead])
async def list_suppliers(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    stmt = select(SupplierModel)
    if not include_inactive:
        stmt = stmt.where(SupplierModel.is_active == True)  # noqa: E712
    res = await db.execute(stmt.order_by(func.lower(SupplierModel.name).asc()))
    return [SupplierRead(**s.to_schema) for s in res.scalars().all()]


@router.post("", response_model=SupplierRead, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    payload: SupplierCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    await _ensure_unique_name(db, payload.name)

    async with atomic(db):
        m = SupplierModel(**payload.model_dump())
        db.add(m)
    return SupplierRead(**m.to_schema)


@router.put("/{supplier_id}", response_model=SupplierRead)
async def update_supplier(
    supplier_id: UUID,
    payload: SupplierUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    m = await _get_supplier(db, supplier_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        await _ensure_unique_name(db, data["name"], exclude_id=m.id)

    async with atomic(db):
        for field, value in data.items():
            setattr(m, field, value)
    return SupplierRead(**m.to_schema)


@router.delete("/{supplier_id}", response_model=SuccessResponse)
async def delete_supplier(
    supplier_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin_user),
):
    await _get_supplier(db, supplier_id)
    async with atomic(db):
        await db.execute(update(Item).where(Item.supplier_id == supplier_id).values(supplier_id=None))
        await db.execute(delete(SupplierModel).where(SupplierModel.id == supplier_id))
    return SuccessResponse(success=True)
