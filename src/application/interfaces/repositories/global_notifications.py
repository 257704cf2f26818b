from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from src.domain.models.global_notification import (
    GlobalNotification,
    GlobalNotificationView,
    GlobalNotificationWithStatus,
    GlobalNotificationWithViewCount,
    ViewWithViewer,
)


class GlobalNotificationRepository(Protocol):
    async def add(self, notification: GlobalNotification) -> GlobalNotification: ...

    async def get(self, notification_id: UUID) -> GlobalNotification | None: ...

    async def exists(self, notification_id: UUID) -> bool: ...

    async def update(self, notification_id: UUID, data: dict[str, Any]) -> GlobalNotification | None:
        """Apply `data` to the row; returns None when the row does not exist."""
        ...

    async def delete(self, notification_id: UUID) -> bool: ...

    async def list_live_with_status(
        self, user_id: UUID, at: datetime
    ) -> list[GlobalNotificationWithStatus]:
        """Active, started and unexpired rows (any role) joined with `user_id`'s view."""
        ...

    async def list_live(self, at: datetime) -> list[GlobalNotification]: ...

    async def list_with_view_counts(
        self, *, limit: int, offset: int
    ) -> list[GlobalNotificationWithViewCount]: ...

    async def count(self) -> int: ...


class GlobalNotificationViewRepository(Protocol):
    async def upsert(
        self,
        user_id: UUID,
        global_notification_id: UUID,
        *,
        viewed_at: datetime,
        dismissed: bool | None,
    ) -> GlobalNotificationView:
        """Insert or update the (user, notification) view atomically.

        `dismissed=None` keeps the stored flag on update and inserts False.
        """
        ...

    async def get(self, user_id: UUID, global_notification_id: UUID) -> GlobalNotificationView | None: ...

    async def count_by_dismissed(self, global_notification_id: UUID) -> tuple[int, int]:
        """Return (not dismissed, dismissed) view counts."""
        ...

    async def list_with_viewers(self, global_notification_id: UUID) -> list[ViewWithViewer]: ...
