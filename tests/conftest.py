"""
Pytest configuration and fixtures for furfolio-core tests.

This module provides the in-memory database fixtures, audit log isolation,
and factory classes for building test entities.
"""

import random
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from furfolio_core.audit import reset_audit_logs
from furfolio_core.database import DataStore, SessionManager, create_engine
from furfolio_core.models import (
    Appointment,
    AppointmentStatus,
    Charge,
    ChargeType,
    Dog,
    InventoryItem,
    ItemCategory,
    Owner,
    ServiceType,
    Task,
)
from furfolio_core.utils.datetime_utils import get_current_utc

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

fake = Faker()


@pytest.fixture(autouse=True)
def isolated_audit_logs():
    """Give every test empty audit logs."""
    reset_audit_logs()
    yield
    reset_audit_logs()


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine; StaticPool keeps one shared connection."""
    engine = create_engine(TEST_DATABASE_URL)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_manager(test_engine: AsyncEngine) -> AsyncGenerator[SessionManager, None]:
    manager = SessionManager(test_engine)
    await manager.create_tables()
    yield manager
    await manager.drop_tables()


@pytest_asyncio.fixture
async def async_session(
    session_manager: SessionManager,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide an async database session for testing.

    Each test gets a fresh database, so the session is simply closed at the
    end without committing.
    """
    async with session_manager.get_session() as session:
        yield session


@pytest_asyncio.fixture
async def data_store(async_session: AsyncSession) -> DataStore:
    return DataStore(async_session)


# Factory classes for creating test entities
class OwnerFactory:
    """Factory for creating test Owner instances."""

    @staticmethod
    def build(**kwargs) -> Owner:
        defaults = {
            "owner_name": fake.name(),
            "email": fake.email(),
            "phone": "(555) 123-4567",
            "address": fake.street_address(),
        }
        defaults.update(kwargs)
        return Owner(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> Owner:
        owner = OwnerFactory.build(**kwargs)
        session.add(owner)
        await session.flush()
        return owner


class DogFactory:
    """Factory for creating test Dog instances."""

    @staticmethod
    def build(owner: Optional[Owner] = None, **kwargs) -> Dog:
        defaults = {
            "name": random.choice(["Buddy", "Max", "Bella", "Lucy", "Charlie", "Daisy"]),
            "breed": random.choice(["Poodle", "Shih Tzu", "Labrador", "Schnauzer"]),
            "weight_kg": Decimal("12.50"),
        }
        defaults.update(kwargs)
        if owner is not None:
            defaults.setdefault("owner", owner)
            defaults.setdefault("owner_id", owner.id)
        else:
            defaults.setdefault("owner_id", uuid.uuid4())
        return Dog(**defaults)


class AppointmentFactory:
    """Factory for creating test Appointment instances."""

    @staticmethod
    def build(
        owner: Optional[Owner] = None, dog: Optional[Dog] = None, **kwargs
    ) -> Appointment:
        defaults = {
            "scheduled_at": get_current_utc() - timedelta(days=7),
            "service_type": ServiceType.FULL_GROOM,
            "status": AppointmentStatus.COMPLETED,
        }
        defaults.update(kwargs)
        if owner is not None:
            defaults.setdefault("owner", owner)
            defaults.setdefault("owner_id", owner.id)
        else:
            defaults.setdefault("owner_id", uuid.uuid4())
        if dog is not None:
            defaults.setdefault("dog", dog)
            defaults.setdefault("dog_id", dog.id)
        else:
            defaults.setdefault("dog_id", uuid.uuid4())
        return Appointment(**defaults)


class ChargeFactory:
    """Factory for creating test Charge instances."""

    @staticmethod
    def build(
        owner: Optional[Owner] = None, dog: Optional[Dog] = None, **kwargs
    ) -> Charge:
        defaults = {
            "date": get_current_utc() - timedelta(days=3),
            "amount": Decimal("65.00"),
            "charge_type": ChargeType.FULL_GROOM,
        }
        defaults.update(kwargs)
        if owner is not None:
            defaults.setdefault("owner", owner)
            defaults.setdefault("owner_id", owner.id)
        else:
            defaults.setdefault("owner_id", uuid.uuid4())
        if dog is not None:
            defaults.setdefault("dog", dog)
            defaults.setdefault("dog_id", dog.id)
        return Charge(**defaults)


class InventoryItemFactory:
    """Factory for creating test InventoryItem instances."""

    @staticmethod
    def build(**kwargs) -> InventoryItem:
        defaults = {
            "name": f"{fake.word().capitalize()} Shampoo",
            "sku": f"SKU-{uuid.uuid4().hex[:8].upper()}",
            "category": ItemCategory.SHAMPOO,
            "stock_level": 10,
            "low_stock_threshold": 5,
            "cost": Decimal("4.00"),
            "price": Decimal("10.00"),
        }
        defaults.update(kwargs)
        return InventoryItem(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> InventoryItem:
        item = InventoryItemFactory.build(**kwargs)
        session.add(item)
        await session.flush()
        return item


class TaskFactory:
    @staticmethod
    def build(**kwargs) -> Task:
        defaults = {"title": fake.sentence(nb_words=4).rstrip(".")}
        defaults.update(kwargs)
        return Task(**defaults)


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    return (now or get_current_utc()) - timedelta(days=days)
