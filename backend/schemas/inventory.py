from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from db.inventory.transaction import TransactionType
from schemas.base import ApiModel
from schemas.validators import (
    optional_text,
    reject_explicit_nulls,
    require_text,
    to_naive_utc,
    validate_http_url,
)


StockAdjustmentType = Literal["ADD", "REMOVE", "SET"]

# Columns that may be omitted on update but never set to null.
_NON_NULLABLE_ON_UPDATE = ("base_name", "has_expiry", "is_critical", "reorder_qty")


class ItemCreate(ApiModel):
    brand: Optional[str] = None
    base_name: str
    size: Optional[str] = None
    qty_weight: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    has_expiry: bool = False
    is_critical: bool = False
    storage_location_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    cost: Optional[float] = Field(default=None, ge=0)
    reorder_qty: int = Field(default=10, ge=0)
    current_stock: int = Field(default=0, ge=0)

    @field_validator("base_name")
    @classmethod
    def _base_name(cls, v: str) -> str:
        return require_text(v, "Item name is required")

    @field_validator("brand", "size", "qty_weight", "description")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)


class ItemUpdate(ApiModel):
    """Partial update. Stock changes go through the stock endpoint, not here."""

    brand: Optional[str] = None
    base_name: Optional[str] = None
    size: Optional[str] = None
    qty_weight: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    has_expiry: Optional[bool] = None
    is_critical: Optional[bool] = None
    storage_location_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    cost: Optional[float] = Field(default=None, ge=0)
    reorder_qty: Optional[int] = Field(default=None, ge=0)

    @field_validator("base_name")
    @classmethod
    def _base_name(cls, v: Optional[str]) -> str:
        return require_text(v, "Item name is required")

    @field_validator("brand", "size", "qty_weight", "description")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)

    @model_validator(mode="after")
    def _no_null_for_required(self):
        return reject_explicit_nulls(self, _NON_NULLABLE_ON_UPDATE)


class StockAdjustmentRequest(ApiModel):
    type: StockAdjustmentType
    quantity: int = Field(gt=0)
    reason: str
    batch_id: Optional[UUID] = None
    batch_code: Optional[str] = None
    expiry_date: Optional[datetime] = None
    date_received: Optional[datetime] = None

    @field_validator("reason")
    @classmethod
    def _reason(cls, v: str) -> str:
        return require_text(v, "Reason is required")

    @field_validator("batch_code")
    @classmethod
    def _batch_code(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)

    @field_validator("expiry_date", "date_received")
    @classmethod
    def _naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class CategoryRef(ApiModel):
    id: UUID
    name: str
    color: Optional[str] = None


class SupplierRef(ApiModel):
    id: UUID
    name: str


class StorageLocationRef(ApiModel):
    id: UUID
    name: str
    description: Optional[str] = None


class ItemBatchRead(ApiModel):
    id: UUID
    item_id: UUID
    batch_code: Optional[str] = None
    quantity: int
    expiry_date: Optional[datetime] = None
    date_received: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ItemRead(ApiModel):
    id: UUID
    brand: Optional[str] = None
    base_name: str
    size: Optional[str] = None
    qty_weight: Optional[str] = None
    display_name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    has_expiry: bool
    is_critical: bool
    storage_location_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    cost: Optional[float] = None
    reorder_qty: int
    current_stock: int
    is_low_stock: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategoryRef] = None
    supplier: Optional[SupplierRef] = None
    storage_location: Optional[StorageLocationRef] = None
    batches: List[ItemBatchRead] = []


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ItemListResponse(ApiModel):
    items: List[ItemRead]
    pagination: Pagination


class TransactionRead(ApiModel):
    id: UUID
    item_id: UUID
    user_id: Optional[UUID] = None
    transaction_type: TransactionType
    amount: int
    stock_after: int
    batch_id: Optional[UUID] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    item_display_name: Optional[str] = None
    user_name: Optional[str] = None


class TransactionListResponse(ApiModel):
    transactions: List[TransactionRead]
    pagination: Pagination


class StockAdjustmentResponse(ApiModel):
    item: ItemRead
    transaction: TransactionRead
    duration: int


class SuccessResponse(ApiModel):
    success: bool = True
