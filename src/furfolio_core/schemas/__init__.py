"""
Pydantic schemas for data validation and serialization.

This module contains the input schemas used before records are created and
the export schemas behind each model's ``export_json``.
"""

from .appointment import AppointmentCreate, ChargeCreate
from .health import (
    HealthObservationCreate,
    VaccinationRecordCreate,
    VaccinationRecordExport,
)
from .inventory import InventoryItemCreate, InventoryItemExport, InventoryItemUpdate
from .loyalty import LoyaltyProgramExport
from .notification import NotificationRequest
from .owner import DogCreate, OwnerCreate
from .staff import StaffMemberCreate, StaffMemberExport
from .task import TaskCreate, TaskExport

__all__ = [
    "OwnerCreate",
    "DogCreate",
    "AppointmentCreate",
    "ChargeCreate",
    "InventoryItemCreate",
    "InventoryItemUpdate",
    "InventoryItemExport",
    "TaskCreate",
    "TaskExport",
    "StaffMemberCreate",
    "StaffMemberExport",
    "VaccinationRecordCreate",
    "VaccinationRecordExport",
    "HealthObservationCreate",
    "LoyaltyProgramExport",
    "NotificationRequest",
]
