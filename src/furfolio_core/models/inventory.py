"""
Inventory item model for the furfolio-core package.

This module contains the InventoryItem SQLAlchemy model for shampoos, tools,
treats and retail stock, with valuation, expiry and reorder helpers.
"""

import enum
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..audit import AuditableMixin
from ..utils.datetime_utils import ensure_utc, get_current_utc
from .base import BaseModel

DEFAULT_LOW_STOCK_THRESHOLD = 5
EXPIRING_SOON_DAYS = 30
LOW_STOCK_NOTIFICATION = "LowStock"


def should_reorder(stock: int, threshold: int) -> bool:
    """Whether a stock level has reached the reorder threshold."""
    return stock <= threshold


class ItemCategory(enum.Enum):
    SHAMPOO = "shampoo"
    CONDITIONER = "conditioner"
    TOOLS = "tools"
    SUPPLIES = "supplies"
    TREATS = "treats"
    RETAIL = "retail"
    OTHER = "other"


class InventoryTag(enum.Enum):
    PERISHABLE = "perishable"
    HIGH_VALUE = "high_value"
    POPULAR = "popular"
    LOCAL_VENDOR = "local_vendor"
    ECO_FRIENDLY = "eco_friendly"
    PROMO = "promo"
    SAMPLE = "sample"
    SEASONAL = "seasonal"
    DISCONTINUED = "discontinued"


class InventoryItem(AuditableMixin, BaseModel):
    """
    Stocked product or supply.

    Attributes:
        stock_level: Units on hand, never negative
        low_stock_threshold: Level at or below which a reorder is suggested
        pending_reorder: Set when a reorder was requested and cleared when
            stock is received
        average_monthly_usage: Optional usage estimate driving the
            suggested reorder quantity
    """

    __tablename__ = "inventory_items"
    __audit_log_name__ = "inventory_item"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("category", ItemCategory.SUPPLIES)
        kwargs.setdefault("stock_level", 0)
        kwargs.setdefault("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD)
        kwargs.setdefault("tag_tokens", [])
        kwargs.setdefault("is_archived", False)
        kwargs.setdefault("is_discontinued", False)
        kwargs.setdefault("pending_reorder", False)
        kwargs.setdefault("last_updated", get_current_utc())
        super().__init__(**kwargs)

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    sku: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[ItemCategory] = mapped_column(
        Enum(ItemCategory), nullable=False, default=ItemCategory.SUPPLIES
    )
    stock_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    low_stock_threshold: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD
    )
    cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=get_current_utc
    )
    expiration_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    batch_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    tag_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    average_monthly_usage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_discontinued: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pending_reorder: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    vendor_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    last_stock_changed_by: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    last_stock_change_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_notification_type: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )

    __table_args__ = (
        CheckConstraint("stock_level >= 0", name="check_inventory_stock_non_negative"),
        CheckConstraint(
            "low_stock_threshold >= 0", name="check_inventory_threshold_non_negative"
        ),
    )

    @property
    def stock_value(self) -> Decimal:
        return Decimal(self.stock_level) * Decimal(self.price or 0)

    @property
    def margin_percent(self) -> Optional[float]:
        """Gross margin as a percentage of price, None without a positive price."""
        if self.price is None or self.price <= 0:
            return None
        price = Decimal(self.price)
        cost = Decimal(self.cost or 0)
        return float((price - cost) / price * 100)

    @property
    def is_expired(self) -> bool:
        if self.expiration_date is None:
            return False
        return ensure_utc(self.expiration_date) < get_current_utc()

    @property
    def is_expiring_soon(self) -> bool:
        if self.expiration_date is None or self.is_expired:
            return False
        horizon = get_current_utc() + timedelta(days=EXPIRING_SOON_DAYS)
        return ensure_utc(self.expiration_date) <= horizon

    @property
    def suggested_reorder_quantity(self) -> int:
        """Enough for two months of usage (or two thresholds) minus what is on hand."""
        basis = self.average_monthly_usage or self.low_stock_threshold
        return max(0, basis * 2 - self.stock_level)

    @property
    def is_active(self) -> bool:
        return not self.is_archived and not self.is_discontinued

    @property
    def is_in_stock(self) -> bool:
        return not self.is_archived and self.stock_level > 0

    @property
    def is_low_stock(self) -> bool:
        return self.is_active and should_reorder(self.stock_level, self.low_stock_threshold)

    @property
    def accessibility_label(self) -> str:
        label = f"{self.name}, {self.stock_level} in stock"
        if self.is_low_stock:
            label += ", low stock"
        if self.is_expired:
            label += ", expired"
        elif self.is_expiring_soon:
            label += ", expiring soon"
        if self.is_discontinued:
            label += ", discontinued"
        return label

    @property
    def tags(self) -> List[InventoryTag]:
        return self._tokens_as("tag_tokens", InventoryTag)

    def add_tag(self, tag: InventoryTag) -> bool:
        return self._add_token("tag_tokens", tag.value)

    def remove_tag(self, tag: InventoryTag) -> bool:
        return self._remove_token("tag_tokens", tag.value)

    def has_tag(self, tag: InventoryTag) -> bool:
        return self._has_token("tag_tokens", tag.value)

    def set_stock(self, new_level: int, user: Optional[str] = None) -> None:
        """Record a stock level change without writing an audit entry."""
        now = get_current_utc()
        self.stock_level = max(0, new_level)
        self.last_updated = now
        self.last_stock_change_date = now
        self.last_stock_changed_by = user

    def change_stock(
        self, amount: int, user: Optional[str] = None, reason: Optional[str] = None
    ) -> int:
        """
        Adjust stock by ``amount`` (negative to remove), clamping at zero.

        Flags the item for reorder the first time it drops to or below its
        threshold.

        Returns:
            The new stock level
        """
        previous = self.stock_level
        self.set_stock(previous + amount, user)

        text = f"Stock changed from {previous} to {self.stock_level}"
        if reason:
            text += f" ({reason})"
        self.add_audit(text, user=user or "system")

        if (
            should_reorder(self.stock_level, self.low_stock_threshold)
            and not self.pending_reorder
        ):
            self.pending_reorder = True
            self.last_notification_type = LOW_STOCK_NOTIFICATION

        return self.stock_level

    def archive_item(self, user: Optional[str] = None) -> None:
        self.is_archived = True
        self.last_updated = get_current_utc()
        self.add_audit("Item archived", user=user)

    def discontinue_item(self, user: Optional[str] = None) -> None:
        self.is_discontinued = True
        self.add_tag(InventoryTag.DISCONTINUED)
        self.last_updated = get_current_utc()
        self.add_audit("Item discontinued", user=user)

    def export_json(self) -> str:
        from ..schemas.inventory import InventoryItemExport

        return InventoryItemExport.model_validate(self).model_dump_json(indent=2)

    def __repr__(self) -> str:
        return f"<InventoryItem(id={self.id}, name='{self.name}', stock={self.stock_level})>"
