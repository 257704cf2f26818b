from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from src.domain.models.user import ViewerSummary
from src.domain.value_objects.notification_type import NotificationType
from src.domain.value_objects.role import Role

DEFAULT_PRIORITY = "normal"


@dataclass(slots=True)
class GlobalNotification:
    id: UUID
    title: str
    message: str
    type: NotificationType = NotificationType.SYSTEM
    # Empty means every role
    target_roles: list[Role] = field(default_factory=list)
    link: str | None = None
    priority: str = DEFAULT_PRIORITY
    icon: str | None = None
    json: dict[str, Any] | None = None
    starts_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        title: str,
        message: str,
        *,
        now: datetime,
        type: NotificationType | None = None,
        target_roles: list[Role] | None = None,
        link: str | None = None,
        priority: str | None = None,
        icon: str | None = None,
        json: dict[str, Any] | None = None,
        starts_at: datetime | None = None,
        expires_at: datetime | None = None,
        is_active: bool | None = None,
    ) -> GlobalNotification:
        return cls(
            id=uuid4(),
            title=title,
            message=message,
            type=type or NotificationType.SYSTEM,
            target_roles=list(target_roles or []),
            link=link,
            priority=priority or DEFAULT_PRIORITY,
            icon=icon,
            json=json,
            starts_at=starts_at or now,
            expires_at=expires_at,
            is_active=is_active is not False,
            created_at=now,
            updated_at=now,
        )

    def targets(self, role: Role) -> bool:
        if not self.target_roles:
            return True
        return role in self.target_roles

    def is_live(self, at: datetime) -> bool:
        if not self.is_active or self.starts_at > at:
            return False
        return self.expires_at is None or self.expires_at >= at

    def is_visible_to(self, role: Role, at: datetime) -> bool:
        return self.is_live(at) and self.targets(role)


@dataclass(slots=True)
class GlobalNotificationView:
    id: UUID
    user_id: UUID
    global_notification_id: UUID
    viewed_at: datetime
    dismissed: bool = False


@dataclass(slots=True)
class GlobalNotificationWithStatus:
    notification: GlobalNotification
    viewed: bool
    dismissed: bool


@dataclass(slots=True)
class GlobalNotificationWithViewCount:
    notification: GlobalNotification
    view_count: int


@dataclass(slots=True)
class ViewWithViewer:
    view: GlobalNotificationView
    user: ViewerSummary
