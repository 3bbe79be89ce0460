from typing import Optional
from uuid import UUID

from pydantic import field_validator, model_validator

from schemas.base import ApiModel
from schemas.validators import optional_text, reject_explicit_nulls, require_text, validate_hex_color

# Columns that may be omitted on update but never set to null.
_NON_NULLABLE_ON_UPDATE = ("name", "is_active")


class CategoryRead(ApiModel):
    id: UUID
    name: str
    color: Optional[str] = None
    is_active: bool = True


class CategoryCreate(ApiModel):
    name: str
    color: Optional[str] = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return require_text(v, "Category name is required")

    @field_validator("color")
    @classmethod
    def _color(cls, v: Optional[str]) -> Optional[str]:
        return validate_hex_color(v)


class CategoryUpdate(ApiModel):
    name: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> str:
        return require_text(v, "Category name is required")

    @field_validator("color")
    @classmethod
    def _color(cls, v: Optional[str]) -> Optional[str]:
        return validate_hex_color(v)

    @model_validator(mode="after")
    def _no_null_for_required(self):
        return reject_explicit_nulls(self, _NON_NULLABLE_ON_UPDATE)


class StorageLocationRead(ApiModel):
    id: UUID
    name: str
    description: Optional[str] = None
    is_active: bool = True


class StorageLocationCreate(ApiModel):
    name: str
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return require_text(v, "Location name is required")

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class StorageLocationUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> str:
        return require_text(v, "Location name is required")

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)

    @model_validator(mode="after")
    def _no_null_for_required(self):
        return reject_explicit_nulls(self, _NON_NULLABLE_ON_UPDATE)


class SystemSettingRead(ApiModel):
    id: UUID
    key: str
    value: str
    description: Optional[str] = None


class SystemSettingUpsert(ApiModel):
    value: str
    description: Optional[str] = None

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)
