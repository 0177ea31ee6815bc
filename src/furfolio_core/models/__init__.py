"""
Database models for the furfolio-core package.

This module contains SQLAlchemy models for all core entities of the
grooming business: owners and their dogs, appointments and charges,
inventory, tasks, staff and their shifts, user accounts and sessions,
health records and loyalty.
"""

from .appointment import Appointment, AppointmentStatus, ServiceType
from .base import Base, BaseModel
from .charge import Charge, ChargeType, PaymentMethod
from .dog import Dog, DogTag
from .health import (
    HealthObservation,
    ObservationType,
    VaccinationBadge,
    VaccinationRecord,
    VaccineType,
)
from .inventory import InventoryItem, InventoryTag, ItemCategory, should_reorder
from .loyalty import (
    POINTS_PER_REWARD,
    REWARD_EXPIRY_DAYS,
    LoyaltyBadge,
    LoyaltyProgram,
    LoyaltyTier,
    RewardType,
)
from .owner import Owner, OwnerBadge
from .session import UserSession
from .shift import StaffShift
from .staff import StaffBadge, StaffMember, StaffRole
from .task import RecurrenceRule, Task, TaskBadge, TaskPriority
from .user import User, UserBadge, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "Owner",
    "OwnerBadge",
    "Dog",
    "DogTag",
    "Appointment",
    "AppointmentStatus",
    "ServiceType",
    "Charge",
    "ChargeType",
    "PaymentMethod",
    "InventoryItem",
    "InventoryTag",
    "ItemCategory",
    "should_reorder",
    "Task",
    "TaskBadge",
    "TaskPriority",
    "RecurrenceRule",
    "StaffMember",
    "StaffRole",
    "StaffBadge",
    "StaffShift",
    "User",
    "UserRole",
    "UserBadge",
    "UserSession",
    "VaccinationRecord",
    "VaccineType",
    "VaccinationBadge",
    "HealthObservation",
    "ObservationType",
    "LoyaltyProgram",
    "LoyaltyTier",
    "LoyaltyBadge",
    "RewardType",
    "POINTS_PER_REWARD",
    "REWARD_EXPIRY_DAYS",
]
