from typing import Iterable, Optional

from db.inventory.batch import ItemBatch
from db.inventory.item import Item
from db.inventory.transaction import Transaction
from schemas.inventory import (
    CategoryRef,
    ItemBatchRead,
    ItemRead,
    StorageLocationRef,
    SupplierRef,
    TransactionRead,
)


def display_name(
    brand: Optional[str],
    base_name: Optional[str],
    size: Optional[str],
    qty_weight: Optional[str],
) -> str:
    """Space-joined, blank-filtered brand/base name/size/qty-weight."""
    parts = [brand, base_name, size, qty_weight]
    return " ".join(p.strip() for p in parts if p and p.strip())


def item_to_schema(item: Item, batches: Optional[Iterable[ItemBatch]] = None) -> ItemRead:
    """
    Convert an Item (with category/supplier/storage_location loaded) to ItemRead.

    `batches` defaults to the loaded `item.batches` relationship; the list
    endpoint passes only the positive-quantity ones.
    """
    if batches is None:
        batches = item.batches
    return ItemRead(
        id=item.id,
        brand=item.brand,
        base_name=item.base_name,
        size=item.size,
        qty_weight=item.qty_weight,
        display_name=item.display_name,
        description=item.description,
        image_url=item.image_url,
        has_expiry=bool(item.has_expiry),
        is_critical=bool(item.is_critical),
        storage_location_id=item.storage_location_id,
        category_id=item.category_id,
        supplier_id=item.supplier_id,
        cost=float(item.cost) if item.cost is not None else None,
        reorder_qty=int(item.reorder_qty),
        current_stock=int(item.current_stock),
        is_low_stock=item.is_low_stock,
        created_at=item.created_at,
        updated_at=item.updated_at,
        category=(
            CategoryRef(id=item.category.id, name=item.category.name, color=item.category.color)
            if item.category else None
        ),
        supplier=SupplierRef(id=item.supplier.id, name=item.supplier.name) if item.supplier else None,
        storage_location=(
            StorageLocationRef(
                id=item.storage_location.id,
                name=item.storage_location.name,
                description=item.storage_location.description,
            )
            if item.storage_location else None
        ),
        batches=[ItemBatchRead(**b.to_schema) for b in batches],
    )


def transaction_to_schema(
    tx: Transaction,
    item_display_name: Optional[str] = None,
    user_name: Optional[str] = None,
) -> TransactionRead:
    return TransactionRead(**tx.to_schema, item_display_name=item_display_name, user_name=user_name)
