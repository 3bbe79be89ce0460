"""
Stock adjustment.

One call = one unit of work: the item's stock update, the audit transaction
and the optional batch mutation commit together or not at all.

    ADD     new = current + q     delta = +q
    REMOVE  new = current - q     delta = -q
    SET     new = q               delta = q - current

The resulting stock must stay >= 0. The item row is read FOR UPDATE so two
adjustments on the same item serialize instead of losing an update. A
conflicting transaction surfaces as an error; nothing is retried.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import BusinessRuleViolation, NotFoundError
from db.database import atomic
from db.inventory.batch import ItemBatch
from db.inventory.item import Item
from db.inventory.transaction import Transaction, TransactionType
from db.users import User
from schemas.inventory import StockAdjustmentRequest
from schemas.validators import utcnow
from services.items import load_item

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockChange:
    new_quantity: int
    delta: int

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType.for_delta(self.delta)


def compute_stock_change(current: int, adjustment_type: str, quantity: int) -> StockChange:
    if adjustment_type == "ADD":
        return StockChange(new_quantity=current + quantity, delta=quantity)
    if adjustment_type == "REMOVE":
        return StockChange(new_quantity=current - quantity, delta=-quantity)
    if adjustment_type == "SET":
        return StockChange(new_quantity=quantity, delta=quantity - current)
    raise ValueError(f"unknown adjustment type: {adjustment_type}")


async def _load_item_for_update(db: AsyncSession, item_id: UUID) -> Item:
    res = await db.execute(
        select(Item)
        .where(Item.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    item = res.scalar_one_or_none()
    if not item:
        raise NotFoundError("Item not found")
    return item


async def _load_batch(db: AsyncSession, item: Item, batch_id: UUID) -> ItemBatch:
    res = await db.execute(
        select(ItemBatch)
        .where(ItemBatch.id == batch_id, ItemBatch.item_id == item.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    batch = res.scalar_one_or_none()
    if not batch:
        raise NotFoundError("Batch not found")
    return batch


async def adjust_stock(
    db: AsyncSession,
    item_id: UUID,
    adjustment: StockAdjustmentRequest,
    actor: User,
) -> Tuple[Item, Transaction]:
    async with atomic(db):
        item = await _load_item_for_update(db, item_id)

        change = compute_stock_change(int(item.current_stock), adjustment.type, adjustment.quantity)
        if change.new_quantity < 0:
            raise BusinessRuleViolation(
                "Stock cannot be negative",
                details=[{
                    "field": "quantity",
                    "message": f"current stock is {int(item.current_stock)}, requested {adjustment.type} {adjustment.quantity}",
                }],
            )

        # Resolve the batch before any write so an unknown id changes nothing.
        batch: Optional[ItemBatch] = None
        if item.has_expiry and adjustment.batch_id and adjustment.type in ("ADD", "REMOVE"):
            batch = await _load_batch(db, item, adjustment.batch_id)

        item.current_stock = change.new_quantity

        tx = Transaction(
            item_id=item.id,
            user_id=actor.id,
            transaction_type=change.transaction_type,
            amount=change.delta,
            stock_after=change.new_quantity,
            notes=adjustment.reason,
            # Only a batch actually touched by this adjustment is recorded.
            batch_id=batch.id if batch is not None else None,
        )
        db.add(tx)

        if item.has_expiry:
            created = await _apply_batch_policy(db, item, adjustment, batch)
            if created is not None:
                tx.batch_id = created.id

    # Reload server-side defaults (timestamps) and relationships for the response.
    await db.refresh(tx)
    item = await load_item(db, item.id)

    logger.info(
        "stock adjusted: item=%s type=%s qty=%s delta=%s stock_after=%s user=%s",
        item.id, adjustment.type, adjustment.quantity, change.delta, change.new_quantity, actor.id,
    )
    return item, tx


async def _apply_batch_policy(
    db: AsyncSession,
    item: Item,
    adjustment: StockAdjustmentRequest,
    batch: Optional[ItemBatch],
) -> Optional[ItemBatch]:
    """
    SET, and ADD/REMOVE without batch info, leave batches alone.

    Returns the batch created by an ADD with a new batch code, if any.
    """
    if adjustment.type == "ADD":
        if batch is not None:
            batch.quantity = int(batch.quantity) + adjustment.quantity
        elif adjustment.batch_code and adjustment.expiry_date:
            created = ItemBatch(
                id=uuid.uuid4(),
                item_id=item.id,
                batch_code=adjustment.batch_code,
                quantity=adjustment.quantity,
                expiry_date=adjustment.expiry_date,
                date_received=adjustment.date_received or utcnow(),
            )
            db.add(created)
            return created
    elif adjustment.type == "REMOVE" and batch is not None:
        remaining = int(batch.quantity) - adjustment.quantity
        if remaining > 0:
            batch.quantity = remaining
        else:
            await db.delete(batch)
    return None
