from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user
from core.converters import transaction_to_schema
from db.database import get_async_session
from db.inventory.item import Item
from db.inventory.transaction import Transaction, TransactionType
from db.users import User
from schemas.inventory import Pagination, TransactionListResponse
from schemas.validators import to_naive_utc
from services.items import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, total_pages

router = APIRouter()


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    item_id: Optional[UUID] = Query(None, alias="itemId"),
    user_id: Optional[UUID] = Query(None, alias="userId"),
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Audit log, newest first. Zero-amount rows are item create/update records."""
    stmt = (
        select(Transaction, Item.display_name, User.full_name, User.email)
        .join(Item, Transaction.item_id == Item.id)
        .outerjoin(User, Transaction.user_id == User.id)
    )
    count_stmt = select(func.count(Transaction.id))

    conditions = []
    if item_id:
        conditions.append(Transaction.item_id == item_id)
    if user_id:
        conditions.append(Transaction.user_id == user_id)
    if transaction_type:
        conditions.append(Transaction.transaction_type == transaction_type)
    if start_date:
        conditions.append(Transaction.created_at >= to_naive_utc(start_date))
    if end_date:
        conditions.append(Transaction.created_at <= to_naive_utc(end_date))
    if conditions:
        stmt = stmt.where(*conditions)
        count_stmt = count_stmt.where(*conditions)

    total = int((await db.execute(count_stmt)).scalar_one())
    res = await db.execute(
        stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = res.all()

    return TransactionListResponse(
        transactions=[
            transaction_to_schema(tx, item_display_name=item_name, user_name=full_name or email)
            for (tx, item_name, full_name, email) in rows
        ],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
    )
