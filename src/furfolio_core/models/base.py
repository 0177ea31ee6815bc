"""
Base model class for all SQLAlchemy models in the furfolio-core package.

This module provides the foundational base model class that all other models
inherit from, including common fields, token list helpers and utility methods.

The BaseModel class follows modern SQLAlchemy 2.0 patterns with:
- UUID primary keys generated client side, so records have an identity
  (and an audit subject) before they are flushed
- Automatic timestamp management
- Dialect-neutral column types, so the same models run on PostgreSQL and SQLite
- Helpers for the badge and tag token lists stored in JSON columns

Example:
    >>> from furfolio_core.models.base import BaseModel
    >>> from sqlalchemy.orm import Mapped, mapped_column
    >>> from sqlalchemy import String

    >>> class Kennel(BaseModel):
    ...     __tablename__ = "kennels"
    ...     name: Mapped[str] = mapped_column(String(100))

    >>> kennel = Kennel(name="Front")
    >>> kennel.id is not None
    True
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import JSON, DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from ..utils.datetime_utils import get_current_utc

T = TypeVar("T", bound="BaseModel")
TokenEnum = TypeVar("TokenEnum", bound=Enum)


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy models.

    Attributes:
        type_annotation_map: Maps Python types to SQLAlchemy column types
    """

    type_annotation_map = {
        uuid.UUID: Uuid(as_uuid=True),
        datetime: DateTime(timezone=True),
    }


class BaseModel(Base):
    """
    Abstract base model class providing common functionality for all entities.

    Attributes:
        id (UUID): Primary key, generated when the instance is created
        created_at (datetime): Timestamp when record was created (UTC)
        updated_at (datetime): Timestamp when record was last updated (UTC)

    Note:
        This is an abstract base class and cannot be instantiated directly.
        All concrete models must define a __tablename__ attribute.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        server_default=func.now(),
        onupdate=get_current_utc,
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("id", uuid.uuid4())
        now = get_current_utc()
        kwargs.setdefault("created_at", now)
        kwargs.setdefault("updated_at", now)
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model instance to a JSON-serializable dictionary.

        Datetimes and dates become ISO strings, UUIDs become strings,
        Decimals become floats and enums become their values.
        """
        return {
            column.name: _serialize_value(getattr(self, column.key))
            for column in self.__table__.columns
        }

    @classmethod
    def get_table_name(cls) -> str:
        return cls.__tablename__

    def update_fields(self, **kwargs: Any) -> None:
        """
        Update multiple fields on the model instance in a single operation.

        Raises:
            AttributeError: If any field name doesn't exist on the model.
        """
        for field_name, value in kwargs.items():
            if hasattr(self, field_name):
                setattr(self, field_name, value)
            else:
                raise AttributeError(
                    f"'{self.__class__.__name__}' has no attribute '{field_name}'"
                )

    # Token list helpers. JSON columns are not mutation tracked, so every
    # change assigns a new list.

    def _get_tokens(self, attribute: str) -> List[str]:
        return list(getattr(self, attribute) or [])

    def _has_token(self, attribute: str, token: str) -> bool:
        return token in self._get_tokens(attribute)

    def _add_token(self, attribute: str, token: str) -> bool:
        tokens = self._get_tokens(attribute)
        if token in tokens:
            return False
        tokens.append(token)
        setattr(self, attribute, tokens)
        return True

    def _remove_token(self, attribute: str, token: str) -> bool:
        tokens = self._get_tokens(attribute)
        if token not in tokens:
            return False
        tokens.remove(token)
        setattr(self, attribute, tokens)
        return True

    def _tokens_as(self, attribute: str, enum_cls: Type[TokenEnum]) -> List[TokenEnum]:
        """Map stored tokens back to ``enum_cls``, skipping unknown values."""
        values = {member.value for member in enum_cls}
        return [enum_cls(token) for token in self._get_tokens(attribute) if token in values]


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value


def token_values(tokens: Optional[Iterable[Any]]) -> List[str]:
    """Convert enum members or strings to a de-duplicated list of token strings."""
    result: List[str] = []
    for token in tokens or []:
        value = token.value if isinstance(token, Enum) else str(token)
        if value not in result:
            result.append(value)
    return result
