from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.models.notification import Notification


class NotificationRepository(Protocol):
    async def add(self, notification: Notification) -> Notification: ...

    async def add_many(self, notifications: list[Notification]) -> int: ...

    async def get(self, notification_id: UUID) -> Notification | None: ...

    async def list_for_user(self, user_id: UUID) -> list[Notification]: ...

    async def count_unread(self, user_id: UUID) -> int: ...

    async def mark_as_read(self, notification_id: UUID, user_id: UUID, read_at: datetime) -> int: ...

    async def mark_all_as_read(self, user_id: UUID, read_at: datetime) -> int: ...
