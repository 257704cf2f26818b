from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from src.domain.value_objects.notification_type import NotificationStatus, NotificationType
from src.domain.value_objects.role import Role


@dataclass(slots=True, frozen=True)
class NotificationBody:
    title: str
    message: str
    link: str | None = None
    json: dict[str, Any] | None = None


@dataclass(slots=True)
class Notification:
    id: UUID
    user_id: UUID | None
    type: NotificationType
    title: str
    message: str
    link: str | None = None
    target_roles: list[Role] | None = None
    # Legacy broadcast flag, superseded by GlobalNotification; never set on new rows
    is_global: bool = False
    json: dict[str, Any] | None = None
    status: NotificationStatus = NotificationStatus.UNREAD
    read_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        user_id: UUID,
        type: NotificationType,
        body: NotificationBody,
        *,
        target_roles: list[Role] | None = None,
        created_at: datetime | None = None,
    ) -> Notification:
        return cls(
            id=uuid4(),
            user_id=user_id,
            type=type,
            title=body.title,
            message=body.message,
            link=body.link,
            target_roles=list(target_roles) if target_roles is not None else None,
            is_global=False,
            json=body.json,
            status=NotificationStatus.UNREAD,
            read_at=None,
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def is_read(self) -> bool:
        return self.status is NotificationStatus.READ


@dataclass(slots=True, frozen=True)
class NotificationEntry:
    """One recipient and its own body, for fan-outs with per-user content."""

    user_id: UUID
    body: NotificationBody
