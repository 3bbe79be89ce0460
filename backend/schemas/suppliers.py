from typing import Literal, Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from schemas.base import ApiModel
from schemas.validators import optional_text, reject_explicit_nulls, require_text, validate_http_url


SupplierType = Literal["DISTRIBUTOR", "RETAILER", "ONLINE", "WHOLESALE", "PRODUCER", "OTHER"]
MinOrderType = Literal["QUANTITY", "ITEMS", "PRICE"]

# Columns that may be omitted on update but never set to null.
_NON_NULLABLE_ON_UPDATE = ("name", "is_active")


class SupplierRead(ApiModel):
    id: UUID
    name: str
    business_name: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    supplier_type: Optional[SupplierType] = None
    min_order_type: Optional[MinOrderType] = None
    min_order_value: Optional[float] = None
    is_active: bool = True


class SupplierCreate(ApiModel):
    name: str
    business_name: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    supplier_type: Optional[SupplierType] = None
    min_order_type: Optional[MinOrderType] = None
    min_order_value: Optional[float] = Field(default=None, ge=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return require_text(v, "Supplier name is required")

    @field_validator("business_name", "contact_name", "phone", "address", "notes")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)

    @field_validator("website")
    @classmethod
    def _website(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)


class SupplierUpdate(ApiModel):
    name: Optional[str] = None
    business_name: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    supplier_type: Optional[SupplierType] = None
    min_order_type: Optional[MinOrderType] = None
    min_order_value: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> str:
        return require_text(v, "Supplier name is required")

    @field_validator("business_name", "contact_name", "phone", "address", "notes")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)

    @field_validator("website")
    @classmethod
    def _website(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v)

    @model_validator(mode="after")
    def _no_null_for_required(self):
        return reject_explicit_nulls(self, _NON_NULLABLE_ON_UPDATE)
