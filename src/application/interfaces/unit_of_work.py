from __future__ import annotations

from typing import Protocol

from src.application.interfaces.repositories.global_notifications import (
    GlobalNotificationRepository,
    GlobalNotificationViewRepository,
)
from src.application.interfaces.repositories.notifications import NotificationRepository
from src.application.interfaces.repositories.users import UserRepository


class UnitOfWork(Protocol):
    users: UserRepository
    notifications: NotificationRepository
    global_notifications: GlobalNotificationRepository
    global_notification_views: GlobalNotificationViewRepository

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
