"""
User session model for the furfolio-core package.

Tracks who is signed in on a device and the session token, with every
login, logout and token refresh written to the session audit log.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ..audit import AuditableMixin
from ..exceptions import ValidationException
from ..utils.datetime_utils import get_current_utc
from .base import BaseModel

SESSION_AUDIT_CAPACITY = 100


class UserSession(AuditableMixin, BaseModel):
    __tablename__ = "user_sessions"
    __audit_log_name__ = "user_session"
    __audit_capacity__ = SESSION_AUDIT_CAPACITY

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("is_logged_in", False)
        super().__init__(**kwargs)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    token: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    is_logged_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    logged_in_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    logged_out_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    token_refreshed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def status_description(self) -> str:
        return "Logged in" if self.is_logged_in else "Logged out"

    @staticmethod
    def _require_token(token: str) -> None:
        if not token or not token.strip():
            raise ValidationException(
                "Session token cannot be empty", field="token", value=token
            )

    def login(self, user_id: uuid.UUID, token: str) -> None:
        """
        Sign ``user_id`` in with ``token``.

        Raises:
            ValidationException: If the token is empty
        """
        self._require_token(token)
        self.user_id = user_id
        self.token = token
        self.is_logged_in = True
        self.logged_in_at = get_current_utc()
        self.logged_out_at = None
        self.add_audit("login", detail=str(user_id))

    def logout(self) -> None:
        previous_user = self.user_id
        self.user_id = None
        self.token = None
        self.is_logged_in = False
        self.logged_out_at = get_current_utc()
        self.add_audit(
            "logout", detail=str(previous_user) if previous_user is not None else None
        )

    def refresh_token(self, new_token: str) -> None:
        """
        Replace the session token.

        Raises:
            ValidationException: If the token is empty
        """
        self._require_token(new_token)
        self.token = new_token
        self.token_refreshed_at = get_current_utc()
        self.add_audit("token_refreshed")
