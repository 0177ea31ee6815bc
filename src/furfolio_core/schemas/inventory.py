"""
Inventory Pydantic schemas for input validation and JSON export.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.inventory import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    InventoryTag,
    ItemCategory,
)
from ..utils.validation import validate_money, validate_sku


def _money(v: object) -> Optional[Decimal]:
    if v is None:
        return None
    result = validate_money(v)  # type: ignore[arg-type]
    if not result.is_valid:
        raise ValueError(result.first_error)
    return result.value


class InventoryItemCreate(BaseModel):
    """Schema for adding an item to inventory."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    category: ItemCategory = ItemCategory.SUPPLIES
    stock_level: int = Field(0, ge=0)
    low_stock_threshold: int = Field(DEFAULT_LOW_STOCK_THRESHOLD, ge=0)
    cost: Optional[Decimal] = None
    price: Optional[Decimal] = None
    expiration_date: Optional[datetime] = None
    batch_number: Optional[str] = Field(None, max_length=64)
    average_monthly_usage: Optional[int] = Field(None, ge=0)
    vendor_name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    tag_tokens: List[InventoryTag] = Field(default_factory=list)

    @field_validator("sku")
    @classmethod
    def validate_sku_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        result = validate_sku(v)
        if not result.is_valid:
            raise ValueError(result.first_error)
        return result.value

    @field_validator("cost", "price", mode="before")
    @classmethod
    def validate_amounts(cls, v: object) -> Optional[Decimal]:
        return _money(v)

    def to_model_kwargs(self) -> dict:
        data = self.model_dump()
        data["tag_tokens"] = [tag.value for tag in self.tag_tokens]
        return data


class InventoryItemUpdate(BaseModel):
    """Partial update; stock changes go through the inventory manager."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[ItemCategory] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    cost: Optional[Decimal] = None
    price: Optional[Decimal] = None
    expiration_date: Optional[datetime] = None
    average_monthly_usage: Optional[int] = Field(None, ge=0)
    vendor_name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None

    @field_validator("cost", "price", mode="before")
    @classmethod
    def validate_amounts(cls, v: object) -> Optional[Decimal]:
        return _money(v)

    @model_validator(mode="after")
    def require_change(self) -> "InventoryItemUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class InventoryItemExport(BaseModel):
    """JSON export of an inventory item, including computed figures."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    name: str
    sku: Optional[str] = None
    category: ItemCategory
    stock_level: int
    low_stock_threshold: int
    cost: Optional[Decimal] = None
    price: Optional[Decimal] = None
    stock_value: Decimal
    margin_percent: Optional[float] = None
    expiration_date: Optional[datetime] = None
    batch_number: Optional[str] = None
    vendor_name: Optional[str] = None
    tag_tokens: List[str] = Field(default_factory=list)
    is_archived: bool
    is_discontinued: bool
    pending_reorder: bool
    is_low_stock: bool
    suggested_reorder_quantity: int
    last_updated: datetime
