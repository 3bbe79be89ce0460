import time
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user
from core.converters import item_to_schema, transaction_to_schema
from db.database import get_async_session
from db.users import User
from schemas.inventory import (
    ItemBatchRead,
    ItemCreate,
    ItemListResponse,
    ItemRead,
    ItemUpdate,
    Pagination,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    SuccessResponse,
)
from services import items as item_service
from services import stock as stock_service

router = APIRouter()


@router.get("", response_model=ItemListResponse)
async def list_items(
    page: int = Query(1, ge=1),
    limit: int = Query(item_service.DEFAULT_PAGE_SIZE, ge=1, le=item_service.MAX_PAGE_SIZE),
    search: Optional[str] = None,
    category_id: Optional[UUID] = Query(None, alias="categoryId"),
    supplier_id: Optional[UUID] = Query(None, alias="supplierId"),
    location_id: Optional[UUID] = Query(None, alias="locationId"),
    has_expiry: Optional[bool] = Query(None, alias="hasExpiry"),
    is_critical: Optional[bool] = Query(None, alias="isCritical"),
    low_stock: bool = Query(False, alias="lowStock"),
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    List items with pagination, search and filters.

    - search matches brand, base name or display name (case-insensitive substring).
    - Each item carries its batches that still hold stock, soonest expiry first.
    """
    filters = item_service.ItemFilters(
        search=search,
        category_id=category_id,
        supplier_id=supplier_id,
        location_id=location_id,
        has_expiry=has_expiry,
        is_critical=is_critical,
        low_stock=low_stock,
    )
    items, total = await item_service.list_items(db, filters, page=page, limit=limit)
    return ItemListResponse(
        items=[item_to_schema(it, batches=[b for b in it.batches if b.quantity > 0]) for it in items],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=item_service.total_pages(total, limit),
        ),
    )


@router.get("/low-stock", response_model=List[ItemRead])
async def list_low_stock_items(
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Items at or below their reorder quantity."""
    items = await item_service.list_low_stock(db)
    return [item_to_schema(it, batches=[b for b in it.batches if b.quantity > 0]) for it in items]


@router.post("", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await item_service.create_item(db, payload, user)
    return item_to_schema(item)


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await item_service.load_item(db, item_id)
    return item_to_schema(item)


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: UUID,
    payload: ItemUpdate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await item_service.update_item(db, item_id, payload, user)
    return item_to_schema(item)


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_item(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    await item_service.delete_item(db, item_id, user)
    return SuccessResponse(success=True)


@router.get("/{item_id}/batches", response_model=List[ItemBatchRead])
async def list_item_batches(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    batches = await item_service.list_batches(db, item_id)
    return [ItemBatchRead(**b.to_schema) for b in batches]


@router.post("/{item_id}/stock", response_model=StockAdjustmentResponse)
async def adjust_stock(
    item_id: UUID,
    payload: StockAdjustmentRequest,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Adjust stock (ADD / REMOVE / SET).

    Stock update, audit transaction and batch change commit as one unit.
    `duration` is the handler time in milliseconds.
    """
    started = time.perf_counter()
    item, tx = await stock_service.adjust_stock(db, item_id, payload, user)
    return StockAdjustmentResponse(
        item=item_to_schema(item),
        transaction=transaction_to_schema(tx, item_display_name=item.display_name, user_name=user.full_name),
        duration=int((time.perf_counter() - started) * 1000),
    )
