"""
Async data store used by the services.

``DataStore`` wraps an ``AsyncSession`` with the handful of operations the
services need and converts SQLAlchemy failures into package exceptions.
"""

import logging
import uuid
from typing import Any, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import DataLoadException, DataSaveException, DuplicateEntryException
from ..models.base import BaseModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class DataStore:
    """
    Thin persistence facade over a single async session.

    ``insert`` and ``delete`` stage changes and flush them immediately so
    constraint violations surface at the call site. Committing is left to
    the caller (usually ``SessionManager.get_transaction``).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, obj: ModelT) -> ModelT:
        self.session.add(obj)
        await self.flush(operation=f"insert {type(obj).__name__}")
        return obj

    async def insert_all(self, objs: Iterable[ModelT]) -> List[ModelT]:
        items = list(objs)
        self.session.add_all(items)
        await self.flush(operation="insert_all")
        return items

    async def fetch_by_id(
        self, model: Type[ModelT], record_id: uuid.UUID
    ) -> Optional[ModelT]:
        """
        Load a record by primary key.

        Returns:
            The record, or None when no row has that id

        Raises:
            DataLoadException: If the query fails
        """
        try:
            return await self.session.get(model, record_id)
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to load {model.__name__} {record_id}: {e}",
                extra={"exception_data": {"model": model.__name__}},
            )
            raise DataLoadException(
                f"Failed to load {model.__name__}",
                model_name=model.__name__,
                record_id=record_id,
                original_error=e,
            )

    async def get(self, model: Type[ModelT], record_id: uuid.UUID) -> ModelT:
        """
        Load a record that must exist.

        Raises:
            DataLoadException: If the record is missing or the query fails
        """
        obj = await self.fetch_by_id(model, record_id)
        if obj is None:
            raise DataLoadException(
                f"{model.__name__} not found",
                model_name=model.__name__,
                record_id=record_id,
            )
        return obj

    async def fetch_all(
        self,
        model: Type[ModelT],
        *where: Any,
        order_by: Optional[Any] = None,
    ) -> Sequence[ModelT]:
        """
        Load every record of ``model`` matching the ``where`` clauses.

        Args:
            model: Mapped model class
            *where: SQLAlchemy filter expressions
            order_by: Optional column or expression to sort by

        Raises:
            DataLoadException: If the query fails
        """
        stmt = select(model)
        if where:
            stmt = stmt.where(*where)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {model.__name__} records: {e}")
            raise DataLoadException(
                f"Failed to load {model.__name__} records",
                model_name=model.__name__,
                original_error=e,
            )
        return result.scalars().all()

    async def delete(self, obj: BaseModel) -> None:
        await self.session.delete(obj)
        await self.flush(operation=f"delete {type(obj).__name__}")

    async def flush(self, operation: Optional[str] = None) -> None:
        """
        Flush pending changes.

        Raises:
            DuplicateEntryException: On a unique constraint violation
            DataSaveException: On any other database failure
        """
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_unique_violation(e):
                logger.warning(f"Duplicate entry during {operation or 'flush'}: {e.orig}")
                raise DuplicateEntryException(entity=operation, original_error=e)
            logger.error(f"Integrity error during {operation or 'flush'}: {e.orig}")
            raise DataSaveException(operation=operation, original_error=e)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Failed to save changes during {operation or 'flush'}: {e}",
                extra={"exception_data": {"operation": operation}},
            )
            raise DataSaveException(operation=operation, original_error=e)
