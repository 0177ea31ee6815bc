"""
Tests for the inventory manager service.
"""

import uuid

import pytest

from furfolio_core.audit import AuditLog, get_audit_log
from furfolio_core.exceptions import DataLoadException, ValidationException
from furfolio_core.models import Task, TaskPriority
from furfolio_core.schemas import InventoryItemCreate, InventoryItemUpdate
from furfolio_core.services import (
    InventoryManager,
    LoggingNotificationBackend,
    NotificationService,
    has_open_task,
    reorder_task_title,
    should_reorder,
)
from furfolio_core.utils.config import RemoteConfig

from .conftest import InventoryItemFactory, TaskFactory


@pytest.fixture
def notification_backend():
    return LoggingNotificationBackend()


@pytest.fixture
def inventory_manager(data_store, notification_backend):
    """Inventory manager wired to an in-memory store and notifier."""
    notifier = NotificationService(backend=notification_backend)
    notifier.request_authorization(True)
    return InventoryManager(
        data_store, notification_service=notifier, remote_config=RemoteConfig({})
    )


async def _open_tasks(data_store):
    return await data_store.fetch_all(Task, Task.completed.is_(False))


class TestHelpers:
    """Test the module-level helpers."""

    @pytest.mark.parametrize(
        "stock, threshold, expected",
        [(0, 5, True), (5, 5, True), (6, 5, False), (0, 0, True)],
    )
    def test_should_reorder(self, stock, threshold, expected):
        assert should_reorder(stock, threshold) is expected

    def test_reorder_task_title(self):
        assert reorder_task_title("Oatmeal Shampoo") == "Re-order: Oatmeal Shampoo"

    def test_has_open_task(self):
        title = reorder_task_title("Brush")
        done = TaskFactory.build(title=title, completed=True)
        other = TaskFactory.build(title="Re-order: Comb")

        assert not has_open_task([done, other], title)
        assert has_open_task([done, TaskFactory.build(title=title)], title)


class TestAddItem:
    @pytest.mark.asyncio
    async def test_add_item(self, inventory_manager):
        item = await inventory_manager.add_item(
            InventoryItemCreate(name="Oatmeal Shampoo", stock_level=12), user="maria"
        )

        entries = inventory_manager.audit_log.entries()
        assert item.id is not None
        assert entries[-1].entry == "Added item Oatmeal Shampoo with stock 12"
        assert entries[-1].user == "maria"
        assert entries[-1].subject_id == str(item.id)


class TestUseStock:
    """Test cases for InventoryManager.use_stock."""

    @pytest.mark.asyncio
    async def test_use_stock_above_threshold(self, inventory_manager, data_store):
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=10, low_stock_threshold=5)
        )

        result = await inventory_manager.use_stock(item.id, quantity=2, user="sam")

        assert result.stock_level == 8
        assert result.last_stock_changed_by == "sam"
        assert inventory_manager.audit_log.entries()[-1].entry == (
            "Used 2 unit(s). New stock: 8"
        )
        assert await _open_tasks(data_store) == []
        assert inventory_manager.low_stock_item_count == 0

    @pytest.mark.asyncio
    async def test_use_stock_creates_reorder_task(
        self, inventory_manager, data_store, notification_backend
    ):
        """Test dropping to the threshold opens a reorder task."""
        item = await data_store.insert(
            InventoryItemFactory.build(
                name="Oatmeal Shampoo", stock_level=6, low_stock_threshold=5
            )
        )

        await inventory_manager.use_stock(item.id)

        tasks = await _open_tasks(data_store)
        assert len(tasks) == 1
        task = tasks[0]
        assert task.title == "Re-order: Oatmeal Shampoo"
        assert task.priority == TaskPriority.MEDIUM
        assert task.created_by == "system"
        assert task.details == "Stock is at 5. Threshold is 5. Suggested reorder: 5."
        assert item.pending_reorder
        assert item.last_notification_type == "LowStock"
        assert inventory_manager.low_stock_item_count == 1
        assert notification_backend.delivered[0].title == "Low stock"
        assert notification_backend.delivered[0].category == "LowStock"

    @pytest.mark.asyncio
    async def test_no_duplicate_reorder_task(self, inventory_manager, data_store):
        """Test a second usage does not open another task."""
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=4, low_stock_threshold=5)
        )

        await inventory_manager.use_stock(item.id)
        await inventory_manager.use_stock(item.id)

        assert len(await _open_tasks(data_store)) == 1
        assert item.stock_level == 2

    @pytest.mark.asyncio
    async def test_completed_task_allows_new_one(self, inventory_manager, data_store):
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=4, low_stock_threshold=5)
        )
        await inventory_manager.use_stock(item.id)
        (task,) = await _open_tasks(data_store)
        task.mark_completed()
        await data_store.flush()

        await inventory_manager.use_stock(item.id)

        tasks = await data_store.fetch_all(Task)
        assert len(tasks) == 2
        assert len([t for t in tasks if not t.completed]) == 1

    @pytest.mark.asyncio
    async def test_overuse_depletes_to_zero(self, inventory_manager, data_store):
        item = await data_store.insert(InventoryItemFactory.build(stock_level=3))

        result = await inventory_manager.use_stock(item.id, quantity=10)

        assert result.stock_level == 0
        actions = [e.entry for e in inventory_manager.audit_log.entries()]
        assert "Stock depleted to 0" in actions

    @pytest.mark.asyncio
    async def test_archived_item_unchanged(self, inventory_manager, data_store):
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=3, is_archived=True)
        )

        result = await inventory_manager.use_stock(item.id)

        assert result.stock_level == 3
        assert await _open_tasks(data_store) == []
        assert len(inventory_manager.audit_log) == 0

    @pytest.mark.asyncio
    async def test_invalid_quantity(self, inventory_manager):
        with pytest.raises(ValidationException):
            await inventory_manager.use_stock(uuid.uuid4(), quantity=0)

    @pytest.mark.asyncio
    async def test_missing_item(self, inventory_manager):
        with pytest.raises(DataLoadException):
            await inventory_manager.use_stock(uuid.uuid4())


class TestReceiveStock:
    @pytest.mark.asyncio
    async def test_receive_clears_pending_reorder(self, inventory_manager, data_store):
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=2, pending_reorder=True)
        )

        result = await inventory_manager.receive_stock(item.id, 10, user="maria")

        assert result.stock_level == 12
        assert not result.pending_reorder
        assert inventory_manager.audit_log.entries()[-1].entry == (
            "Received 10 unit(s). New stock: 12"
        )
        assert inventory_manager.low_stock_item_count == 0

    @pytest.mark.asyncio
    async def test_receive_invalid_quantity(self, inventory_manager):
        with pytest.raises(ValidationException):
            await inventory_manager.receive_stock(uuid.uuid4(), -3)


class TestBatchOperations:
    """Test cases for batch reorder checks and predictions."""

    @pytest.mark.asyncio
    async def test_batch_check_low_stock(self, inventory_manager, data_store):
        await data_store.insert_all(
            [
                InventoryItemFactory.build(name="Shampoo", stock_level=1),
                InventoryItemFactory.build(name="Towels", stock_level=0),
                InventoryItemFactory.build(name="Brushes", stock_level=20),
                InventoryItemFactory.build(
                    name="Old Spray", stock_level=0, is_discontinued=True
                ),
            ]
        )

        created = await inventory_manager.batch_check_low_stock()

        assert sorted(task.title for task in created) == [
            "Re-order: Shampoo",
            "Re-order: Towels",
        ]
        assert inventory_manager.low_stock_item_count == 2
        assert inventory_manager.low_stock_accessibility_label == (
            "There are 2 items low on stock"
        )

        assert await inventory_manager.batch_check_low_stock() == []

    @pytest.mark.asyncio
    async def test_predict_restock_needs(self, inventory_manager, data_store):
        await data_store.insert_all(
            [
                InventoryItemFactory.build(
                    name="Shampoo", stock_level=2, average_monthly_usage=10
                ),
                InventoryItemFactory.build(name="Brushes", stock_level=20),
            ]
        )

        suggestions = await inventory_manager.predict_restock_needs()

        assert len(suggestions) == 1
        assert suggestions[0].item.name == "Shampoo"
        assert suggestions[0].suggested_quantity == 18

    @pytest.mark.asyncio
    async def test_shared_audit_log(self, inventory_manager, data_store):
        """Test managers write to the shared inventory log by default."""
        item = await data_store.insert(InventoryItemFactory.build(stock_level=10))

        await inventory_manager.use_stock(item.id)

        assert inventory_manager.audit_log is get_audit_log("inventory_manager")

    @pytest.mark.asyncio
    async def test_injected_empty_log_is_kept(self, data_store):
        own_log = AuditLog("own_inventory", 10)
        manager = InventoryManager(data_store, audit_log=own_log)
        item = await data_store.insert(InventoryItemFactory.build(stock_level=10))

        await manager.use_stock(item.id)

        assert manager.audit_log is own_log
        assert len(own_log) == 1
        assert len(get_audit_log("inventory_manager")) == 0


class TestUpdateItem:
    """Test cases for InventoryManager.update_item."""

    @pytest.mark.asyncio
    async def test_update_details(self, inventory_manager, data_store):
        item = await data_store.insert(
            InventoryItemFactory.build(name="Shampoo", stock_level=10)
        )

        result = await inventory_manager.update_item(
            item.id,
            InventoryItemUpdate(vendor_name="Pawsome Supply", notes="Ships Fridays"),
            user="maria",
        )

        assert result.vendor_name == "Pawsome Supply"
        assert result.notes == "Ships Fridays"
        entry = inventory_manager.audit_log.entries()[-1]
        assert entry.entry == "Updated notes, vendor_name"
        assert entry.user == "maria"
        assert await _open_tasks(data_store) == []

    @pytest.mark.asyncio
    async def test_raised_threshold_opens_reorder_task(
        self, inventory_manager, data_store
    ):
        item = await data_store.insert(
            InventoryItemFactory.build(name="Towels", stock_level=10, low_stock_threshold=5)
        )

        await inventory_manager.update_item(
            item.id, InventoryItemUpdate(low_stock_threshold=12)
        )

        tasks = await _open_tasks(data_store)
        assert [task.title for task in tasks] == ["Re-order: Towels"]
        assert inventory_manager.low_stock_item_count == 1

    @pytest.mark.asyncio
    async def test_update_missing_item(self, inventory_manager):
        with pytest.raises(DataLoadException):
            await inventory_manager.update_item(
                uuid.uuid4(), InventoryItemUpdate(notes="gone")
            )


class TestInventoryAlertsFlag:
    """Test cases for the remote inventory alerts switch."""

    @pytest.mark.asyncio
    async def test_alerts_disabled_skips_notification(
        self, data_store, notification_backend
    ):
        notifier = NotificationService(backend=notification_backend)
        notifier.request_authorization(True)
        manager = InventoryManager(
            data_store,
            notification_service=notifier,
            remote_config=RemoteConfig({"enable_inventory_alerts": False}),
        )
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=6, low_stock_threshold=5)
        )

        await manager.use_stock(item.id)

        assert notification_backend.delivered == []
        assert len(await _open_tasks(data_store)) == 1
        assert item.pending_reorder

    @pytest.mark.asyncio
    async def test_alerts_flag_from_environment(
        self, data_store, notification_backend, monkeypatch
    ):
        monkeypatch.setenv("FURFOLIO_REMOTE_ENABLE_INVENTORY_ALERTS", "false")
        notifier = NotificationService(backend=notification_backend)
        notifier.request_authorization(True)
        manager = InventoryManager(data_store, notification_service=notifier)
        item = await data_store.insert(
            InventoryItemFactory.build(stock_level=1, low_stock_threshold=5)
        )

        await manager.use_stock(item.id)

        assert notification_backend.delivered == []
