import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.converters import display_name
from core.errors import NotFoundError, ValidationError
from db.database import atomic
from db.category import Category
from db.inventory.batch import ItemBatch
from db.inventory.item import Item
from db.inventory.transaction import Transaction, TransactionType
from db.storage_location import StorageLocation
from db.supplier import Supplier
from db.users import User
from schemas.inventory import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

ITEM_CREATED_NOTE = "Item created"
ITEM_UPDATED_NOTE = "Item updated"

_DISPLAY_NAME_FIELDS = ("brand", "base_name", "size", "qty_weight")
_REFERENCE_FIELDS = (
    ("category_id", Category, "Category"),
    ("supplier_id", Supplier, "Supplier"),
    ("storage_location_id", StorageLocation, "Storage location"),
)


@dataclass
class ItemFilters:
    search: Optional[str] = None
    category_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    has_expiry: Optional[bool] = None
    is_critical: Optional[bool] = None
    low_stock: bool = False


def _with_relations(stmt, with_batches: bool = True):
    opts = [
        selectinload(Item.category),
        selectinload(Item.supplier),
        selectinload(Item.storage_location),
    ]
    if with_batches:
        opts.append(selectinload(Item.batches))
    return stmt.options(*opts).execution_options(populate_existing=True)


async def load_item(db: AsyncSession, item_id: UUID) -> Item:
    res = await db.execute(_with_relations(select(Item).where(Item.id == item_id)))
    item = res.scalar_one_or_none()
    if not item:
        raise NotFoundError("Item not found")
    return item


def _apply_filters(stmt, filters: ItemFilters):
    search = (filters.search or "").strip()
    if search:
        # Literal substring: % and _ in the term are escaped, not wildcards.
        stmt = stmt.where(
            or_(
                Item.brand.icontains(search, autoescape=True),
                Item.base_name.icontains(search, autoescape=True),
                Item.display_name.icontains(search, autoescape=True),
            )
        )
    if filters.category_id:
        stmt = stmt.where(Item.category_id == filters.category_id)
    if filters.supplier_id:
        stmt = stmt.where(Item.supplier_id == filters.supplier_id)
    if filters.location_id:
        stmt = stmt.where(Item.storage_location_id == filters.location_id)
    if filters.has_expiry is not None:
        stmt = stmt.where(Item.has_expiry == filters.has_expiry)
    if filters.is_critical is not None:
        stmt = stmt.where(Item.is_critical == filters.is_critical)
    if filters.low_stock:
        stmt = stmt.where(Item.current_stock <= Item.reorder_qty)
    return stmt


async def list_items(
    db: AsyncSession,
    filters: ItemFilters,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Item], int]:
    """Return one page of items (critical first, then by display name) and the total count."""
    total = (await db.execute(_apply_filters(select(func.count(Item.id)), filters))).scalar_one()

    stmt = _with_relations(_apply_filters(select(Item), filters))
    stmt = stmt.order_by(Item.is_critical.desc(), Item.display_name.asc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    res = await db.execute(stmt)
    return list(res.scalars().all()), int(total)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def list_low_stock(db: AsyncSession) -> List[Item]:
    stmt = _with_relations(_apply_filters(select(Item), ItemFilters(low_stock=True)))
    stmt = stmt.order_by(Item.is_critical.desc(), Item.display_name.asc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_batches(db: AsyncSession, item_id: UUID) -> List[ItemBatch]:
    await load_item(db, item_id)
    res = await db.execute(
        select(ItemBatch)
        .where(ItemBatch.item_id == item_id)
        .order_by(ItemBatch.expiry_date.asc(), ItemBatch.created_at.asc())
    )
    return list(res.scalars().all())


async def _check_references(db: AsyncSession, data: dict) -> None:
    for field, model, label in _REFERENCE_FIELDS:
        ref_id = data.get(field)
        if ref_id is None:
            continue
        if await db.get(model, ref_id) is None:
            raise ValidationError.for_field(field, f"{label} not found")


def _audit_row(item: Item, actor: User, note: str) -> Transaction:
    return Transaction(
        item_id=item.id,
        user_id=actor.id,
        transaction_type=TransactionType.STOCK_IN,
        amount=0,
        stock_after=int(item.current_stock),
        notes=note,
    )


async def create_item(db: AsyncSession, payload: ItemCreate, actor: User) -> Item:
    data = payload.model_dump()
    await _check_references(db, data)

    async with atomic(db):
        item = Item(**data, display_name=display_name(*(data[f] for f in _DISPLAY_NAME_FIELDS)))
        db.add(item)
        await db.flush()
        db.add(_audit_row(item, actor, ITEM_CREATED_NOTE))

    logger.info("item created: %s (%s) by %s", item.id, item.display_name, actor.id)
    return await load_item(db, item.id)


async def update_item(db: AsyncSession, item_id: UUID, payload: ItemUpdate, actor: User) -> Item:
    item = await load_item(db, item_id)
    data = payload.model_dump(exclude_unset=True)
    await _check_references(db, data)

    async with atomic(db):
        for field, value in data.items():
            setattr(item, field, value)
        # Stored values overlaid with the incoming ones; an explicit null clears a part.
        item.display_name = display_name(*(getattr(item, f) for f in _DISPLAY_NAME_FIELDS))
        db.add(_audit_row(item, actor, ITEM_UPDATED_NOTE))

    logger.info("item updated: %s fields=%s by %s", item.id, sorted(data), actor.id)
    return await load_item(db, item.id)


async def delete_item(db: AsyncSession, item_id: UUID, actor: User) -> None:
    """Delete an item with its batches and transactions as one unit."""
    async with atomic(db):
        res = await db.execute(select(Item.id).where(Item.id == item_id).with_for_update())
        if res.scalar_one_or_none() is None:
            raise NotFoundError("Item not found")
        await db.execute(delete(ItemBatch).where(ItemBatch.item_id == item_id))
        await db.execute(delete(Transaction).where(Transaction.item_id == item_id))
        await db.execute(delete(Item).where(Item.id == item_id))

    logger.info("item deleted: %s by %s", item_id, actor.id)
