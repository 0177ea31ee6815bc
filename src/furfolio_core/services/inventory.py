"""
Inventory stock management.

``InventoryManager`` applies stock usage and receipts, opens reorder tasks
when an item runs low, and keeps a running count of low-stock items.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..audit import AuditEntry, AuditLog, get_audit_log
from ..database.data_store import DataStore
from ..exceptions import ValidationException
from ..models.inventory import LOW_STOCK_NOTIFICATION, InventoryItem, should_reorder
from ..models.task import Task, TaskPriority
from ..schemas.inventory import InventoryItemCreate, InventoryItemUpdate
from ..utils.config import RemoteConfig, RemoteConfigKey
from ..utils.datetime_utils import get_current_utc
from .notifications import NotificationService

logger = logging.getLogger(__name__)

INVENTORY_AUDIT_LOG = "inventory_manager"
INVENTORY_AUDIT_CAPACITY = 500

__all__ = [
    "InventoryManager",
    "RestockSuggestion",
    "has_open_task",
    "reorder_task_title",
    "should_reorder",
]


def reorder_task_title(item_name: str) -> str:
    return f"Re-order: {item_name}"


def has_open_task(tasks: Iterable[Task], title: str) -> bool:
    """Whether any incomplete task in ``tasks`` has exactly ``title``."""
    return any(task.title == title and not task.completed for task in tasks)


@dataclass
class RestockSuggestion:
    item: InventoryItem
    suggested_quantity: int


class InventoryManager:
    """
    Stock operations over a ``DataStore``.

    Args:
        data_store: Store the items and tasks live in
        notification_service: Optional service told about low stock
        audit_log: Audit log override, defaults to the shared
            "inventory_manager" log
        remote_config: Source of the ``enable_inventory_alerts`` flag, read
            from the environment when omitted
    """

    def __init__(
        self,
        data_store: DataStore,
        notification_service: Optional[NotificationService] = None,
        audit_log: Optional[AuditLog[AuditEntry]] = None,
        remote_config: Optional[RemoteConfig] = None,
    ):
        self.data_store = data_store
        self.remote_config = (
            remote_config if remote_config is not None else RemoteConfig()
        )
        self.notification_service = notification_service
        self.audit_log = (
            audit_log
            if audit_log is not None
            else get_audit_log(INVENTORY_AUDIT_LOG, INVENTORY_AUDIT_CAPACITY)
        )
        self.low_stock_item_count = 0

    def _add_audit(
        self, item: InventoryItem, action: str, user: Optional[str] = None
    ) -> AuditEntry:
        entry = self.audit_log.record(
            action, user=user or "system", subject_id=str(item.id)
        )
        item.last_updated = get_current_utc()
        return entry

    def _notify_low_stock(self, item: InventoryItem) -> None:
        logger.info(f"Low stock alert for {item.name}")
        if self.notification_service is None:
            return
        if not self.remote_config.get_bool(RemoteConfigKey.ENABLE_INVENTORY_ALERTS):
            logger.debug("Inventory alerts are disabled, notification skipped")
            return
        self.notification_service.notify_now(
            title="Low stock",
            body=f"Low stock alert for {item.name}",
            category=LOW_STOCK_NOTIFICATION,
        )

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if quantity < 1:
            raise ValidationException(
                "Quantity must be at least 1", field="quantity", value=quantity
            )

    async def add_item(
        self, data: InventoryItemCreate, user: Optional[str] = None
    ) -> InventoryItem:
        item = InventoryItem(**data.to_model_kwargs())
        await self.data_store.insert(item)
        self._add_audit(item, f"Added item {item.name} with stock {item.stock_level}", user)
        logger.info(f"Added inventory item {item.name}")
        return item

    async def update_item(
        self, item_id: uuid.UUID, data: InventoryItemUpdate, user: Optional[str] = None
    ) -> InventoryItem:
        """
        Apply a partial update to an item's details.

        A changed threshold can make the item low on stock, so the reorder
        check runs afterwards.

        Raises:
            DataLoadException: If no item has ``item_id``
        """
        item = await self.data_store.get(InventoryItem, item_id)
        changes = data.model_dump(exclude_unset=True)
        item.update_fields(**changes)
        self._add_audit(item, f"Updated {', '.join(sorted(changes))}", user)

        await self.check_for_low_stock_and_create_task(item)
        await self.data_store.flush(operation="update_item")
        await self.update_low_stock_count()
        return item

    async def use_stock(
        self, item_id: uuid.UUID, quantity: int = 1, user: Optional[str] = None
    ) -> InventoryItem:
        """
        Remove ``quantity`` units from an item.

        Using more than is on hand empties the item instead of failing.
        Archived and discontinued items are returned unchanged.

        Raises:
            ValidationException: If quantity is smaller than one
            DataLoadException: If no item has ``item_id``
        """
        self._check_quantity(quantity)
        item = await self.data_store.get(InventoryItem, item_id)

        if not item.is_active:
            logger.warning(
                f"Item {item.name} is archived/discontinued. No stock change."
            )
            return item

        if item.stock_level < quantity:
            logger.warning(
                f"Attempted to use more stock than available for {item.name}. "
                f"Setting to 0."
            )
            item.set_stock(0, user)
            self._add_audit(item, "Stock depleted to 0", user)
        else:
            item.set_stock(item.stock_level - quantity, user)
            self._add_audit(
                item, f"Used {quantity} unit(s). New stock: {item.stock_level}", user
            )

        await self.check_for_low_stock_and_create_task(item)
        await self.data_store.flush(operation="use_stock")
        await self.update_low_stock_count()
        return item

    async def receive_stock(
        self, item_id: uuid.UUID, quantity: int, user: Optional[str] = None
    ) -> InventoryItem:
        """
        Add received units to an item and clear its pending reorder.

        Raises:
            ValidationException: If quantity is smaller than one
            DataLoadException: If no item has ``item_id``
        """
        self._check_quantity(quantity)
        item = await self.data_store.get(InventoryItem, item_id)

        item.set_stock(item.stock_level + quantity, user)
        item.pending_reorder = False
        self._add_audit(
            item, f"Received {quantity} unit(s). New stock: {item.stock_level}", user
        )

        await self.data_store.flush(operation="receive_stock")
        await self.update_low_stock_count()
        return item

    async def check_for_low_stock_and_create_task(
        self, item: InventoryItem
    ) -> Optional[Task]:
        """
        Open a reorder task for a low-stock item.

        No task is created when the item is not low on stock or a task with
        the same title is still open.

        Returns:
            The new task, or None
        """
        if not item.is_low_stock:
            return None

        title = reorder_task_title(item.name)
        existing = await self.data_store.fetch_all(
            Task, Task.title == title, Task.completed.is_(False)
        )
        if has_open_task(existing, title):
            logger.debug(f"Reorder task already open for {item.name}")
            return None

        quantity = item.suggested_reorder_quantity
        task = Task(
            title=title,
            details=(
                f"Stock is at {item.stock_level}. Threshold is "
                f"{item.low_stock_threshold}. Suggested reorder: {quantity}."
            ),
            priority=TaskPriority.MEDIUM,
            created_by="system",
        )
        await self.data_store.insert(task)
        self._add_audit(item, f"Created reorder task for {quantity} units")
        self._notify_low_stock(item)
        item.pending_reorder = True
        item.last_notification_type = LOW_STOCK_NOTIFICATION
        logger.info(f"Created reorder task for {item.name} ({quantity} units)")
        return task

    async def _low_stock_items(self) -> List[InventoryItem]:
        items = await self.data_store.fetch_all(InventoryItem)
        return [item for item in items if item.is_low_stock]

    async def update_low_stock_count(self) -> int:
        self.low_stock_item_count = len(await self._low_stock_items())
        return self.low_stock_item_count

    async def batch_check_low_stock(self) -> List[Task]:
        """Run the reorder check for every low-stock item."""
        created = []
        for item in await self._low_stock_items():
            task = await self.check_for_low_stock_and_create_task(item)
            if task is not None:
                created.append(task)
        await self.data_store.flush(operation="batch_check_low_stock")
        await self.update_low_stock_count()
        return created

    async def predict_restock_needs(self) -> List[RestockSuggestion]:
        return [
            RestockSuggestion(item=item, suggested_quantity=item.suggested_reorder_quantity)
            for item in await self._low_stock_items()
        ]

    @property
    def low_stock_accessibility_label(self) -> str:
        return f"There are {self.low_stock_item_count} items low on stock"
