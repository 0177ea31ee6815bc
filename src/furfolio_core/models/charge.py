"""Charge model: money billed to an owner for a service or product."""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..utils.datetime_utils import get_current_utc
from .base import BaseModel

if TYPE_CHECKING:
    from .dog import Dog
    from .owner import Owner


class ChargeType(enum.Enum):
    FULL_GROOM = "full_groom"
    BASIC_BATH = "basic_bath"
    NAIL_TRIM = "nail_trim"
    CUSTOM = "custom"
    PRODUCT = "product"

    @property
    def display_name(self) -> str:
        return {
            ChargeType.FULL_GROOM: "Full Groom",
            ChargeType.BASIC_BATH: "Basic Bath",
            ChargeType.NAIL_TRIM: "Nail Trim",
            ChargeType.CUSTOM: "Custom Service",
            ChargeType.PRODUCT: "Product",
        }[self]


class PaymentMethod(enum.Enum):
    UNPAID = "unpaid"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    ZELLE = "zelle"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return {
            PaymentMethod.UNPAID: "Unpaid",
            PaymentMethod.CASH: "Cash",
            PaymentMethod.CREDIT_CARD: "Credit Card",
            PaymentMethod.DEBIT_CARD: "Debit Card",
            PaymentMethod.ZELLE: "Zelle",
            PaymentMethod.OTHER: "Other",
        }[self]


class Charge(BaseModel):
    __tablename__ = "charges"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("date", get_current_utc())
        kwargs.setdefault("charge_type", ChargeType.FULL_GROOM)
        kwargs.setdefault("is_paid", False)
        kwargs.setdefault("payment_method", PaymentMethod.UNPAID)
        kwargs.setdefault("tags", [])
        super().__init__(**kwargs)

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    charge_type: Mapped[ChargeType] = mapped_column(Enum(ChargeType), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod), nullable=False, default=PaymentMethod.UNPAID
    )
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True
    )
    dog_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("dogs.id", ondelete="SET NULL"), nullable=True
    )
    appointment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True
    )

    owner: Mapped[Optional["Owner"]] = relationship(
        "Owner", back_populates="charges", lazy="selectin"
    )
    dog: Mapped[Optional["Dog"]] = relationship("Dog", lazy="selectin")

    __table_args__ = (CheckConstraint("amount >= 0", name="check_charge_amount"),)

    @property
    def summary(self) -> str:
        status = "Paid" if self.is_paid else "Unpaid"
        return f"{self.charge_type.display_name}: ${Decimal(self.amount):,.2f} ({status})"

    def mark_paid(self, method: PaymentMethod) -> None:
        self.is_paid = method != PaymentMethod.UNPAID
        self.payment_method = method
