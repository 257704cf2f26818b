from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.errors import NotFound, ValidationError
from src.application.interfaces.unit_of_work import UnitOfWork
from src.application.notifications.dto import (
    CreateGlobalNotificationInput,
    GlobalNotificationPage,
    NotificationStats,
    RoleViewBreakdown,
    UpdateGlobalNotificationInput,
    ViewAnalytics,
)
from src.domain.models.global_notification import (
    GlobalNotification,
    GlobalNotificationView,
    GlobalNotificationWithStatus,
)
from src.domain.models.user import CurrentUser
from src.utils.datetime_tz import DEFAULT_TZ, local_hour, utcnow

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]
Clock = Callable[[], datetime]

DEFAULT_PAGE_SIZE = 50
DEFAULT_RECENT_VIEWS = 10


def view_percentage(viewed: int, targeted: int) -> int:
    """Percentage rounded half up; 0 when nobody is targeted."""
    if targeted <= 0:
        return 0
    return int(math.floor(viewed / targeted * 100 + 0.5))


class GlobalNotificationsService:
    """Role-targeted broadcast notifications with per-user view tracking."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        clock: Clock = utcnow,
        tz: ZoneInfo = DEFAULT_TZ,
        page_size: int = DEFAULT_PAGE_SIZE,
        recent_views_limit: int = DEFAULT_RECENT_VIEWS,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._tz = tz
        self._page_size = page_size
        self._recent_views_limit = recent_views_limit

    async def create(self, payload: CreateGlobalNotificationInput) -> GlobalNotification:
        notification = GlobalNotification.create(
            payload.title,
            payload.message,
            now=self._clock(),
            type=payload.type,
            target_roles=payload.target_roles,
            link=payload.link,
            priority=payload.priority,
            icon=payload.icon,
            json=payload.payload,
            starts_at=payload.starts_at,
            expires_at=payload.expires_at,
            is_active=payload.is_active,
        )
        async with self._uow_factory() as uow:
            created = await uow.global_notifications.add(notification)
            await uow.commit()
        logger.info(
            "Global notification created: id=%s type=%s roles=%s",
            created.id,
            created.type.value,
            [r.value for r in created.target_roles] or "all",
        )
        return created

    async def update(
        self, notification_id: UUID, payload: UpdateGlobalNotificationInput
    ) -> GlobalNotification:
        data = payload.changes()
        data["updated_at"] = self._clock()
        async with self._uow_factory() as uow:
            updated = await uow.global_notifications.update(notification_id, data)
            if updated is None:
                raise NotFound(f"Global notification {notification_id} not found")
            await uow.commit()
        logger.info(
            "Global notification updated: id=%s fields=%s",
            notification_id,
            sorted(k for k in data if k != "updated_at"),
        )
        return updated

    async def get_active_notifications(
        self, user: CurrentUser
    ) -> list[GlobalNotificationWithStatus]:
        """Notifications visible to `user` right now, newest first, with view state."""
        now = self._clock()
        async with self._uow_factory() as uow:
            items = await uow.global_notifications.list_live_with_status(user.user_id, now)
        # Role containment is evaluated in-process
        return [item for item in items if item.notification.targets(user.role)]

    async def count_unviewed(self, user: CurrentUser) -> int:
        items = await self.get_active_notifications(user)
        return sum(1 for item in items if not item.viewed)

    async def mark_as_viewed(
        self, notification_id: UUID, user_id: UUID, dismissed: bool = False
    ) -> GlobalNotificationView | None:
        async with self._uow_factory() as uow:
            if not await uow.global_notifications.exists(notification_id):
                logger.info(
                    "View ignored for missing global notification: id=%s user=%s",
                    notification_id,
                    user_id,
                )
                return None
            view = await uow.global_notification_views.upsert(
                user_id,
                notification_id,
                viewed_at=self._clock(),
                dismissed=dismissed,
            )
            await uow.commit()
        return view

    async def dismiss_notification(
        self, notification_id: UUID, user_id: UUID
    ) -> GlobalNotificationView | None:
        return await self.mark_as_viewed(notification_id, user_id, dismissed=True)

    async def mark_all_as_viewed(self, user: CurrentUser) -> int:
        now = self._clock()
        async with self._uow_factory() as uow:
            live = await uow.global_notifications.list_live(now)
        notification_ids = [n.id for n in live if n.targets(user.role)]
        # Disjoint keys, so each upsert gets its own unit of work
        await asyncio.gather(*(self._touch_view(nid, user.user_id) for nid in notification_ids))
        logger.info(
            "Global notifications marked as viewed: user=%s count=%s",
            user.user_id,
            len(notification_ids),
        )
        return len(notification_ids)

    async def _touch_view(self, notification_id: UUID, user_id: UUID) -> None:
        async with self._uow_factory() as uow:
            await uow.global_notification_views.upsert(
                user_id,
                notification_id,
                viewed_at=self._clock(),
                dismissed=None,
            )
            await uow.commit()

    async def get_notification_stats(self, notification_id: UUID) -> NotificationStats:
        async with self._uow_factory() as uow:
            notification = await uow.global_notifications.get(notification_id)
            if notification is None:
                raise NotFound(f"Global notification {notification_id} not found")
            targeted = await uow.users.count(
                is_enabled=True, roles=notification.target_roles or None
            )
            # A dismissed view is not counted as viewed
            viewed, dismissed = await uow.global_notification_views.count_by_dismissed(
                notification_id
            )
        return NotificationStats(
            notification_id=notification.id,
            title=notification.title,
            targeted_users=targeted,
            viewed_count=viewed,
            view_percentage=view_percentage(viewed, targeted),
            dismissed_count=dismissed,
            created_at=notification.created_at,
        )

    async def get_all_notifications(
        self, limit: int | None = None, offset: int = 0
    ) -> GlobalNotificationPage:
        limit = self._page_size if limit is None else limit
        if limit < 1:
            raise ValidationError("limit must be >= 1")
        if offset < 0:
            raise ValidationError("offset must be >= 0")
        async with self._uow_factory() as uow:
            items = await uow.global_notifications.list_with_view_counts(
                limit=limit, offset=offset
            )
            total = await uow.global_notifications.count()
        return GlobalNotificationPage(notifications=items, total=total)

    async def delete(self, notification_id: UUID) -> None:
        async with self._uow_factory() as uow:
            deleted = await uow.global_notifications.delete(notification_id)
            if not deleted:
                raise NotFound(f"Global notification {notification_id} not found")
            await uow.commit()
        logger.info("Global notification deleted: id=%s", notification_id)

    async def get_view_analytics(
        self, notification_id: UUID, tz: ZoneInfo | None = None
    ) -> ViewAnalytics:
        tz = tz or self._tz
        async with self._uow_factory() as uow:
            if not await uow.global_notifications.exists(notification_id):
                raise NotFound(f"Global notification {notification_id} not found")
            views = await uow.global_notification_views.list_with_viewers(notification_id)

        views_by_role: dict[str, RoleViewBreakdown] = {}
        views_by_hour: dict[int, int] = {}
        total_dismissed = 0
        for item in views:
            bucket = views_by_role.setdefault(item.user.role.value, RoleViewBreakdown())
            bucket.total += 1
            if item.view.dismissed:
                bucket.dismissed += 1
                total_dismissed += 1
            hour = local_hour(item.view.viewed_at, tz)
            views_by_hour[hour] = views_by_hour.get(hour, 0) + 1

        recent = sorted(views, key=lambda item: item.view.viewed_at, reverse=True)
        return ViewAnalytics(
            total_views=len(views),
            total_dismissed=total_dismissed,
            views_by_role=views_by_role,
            views_by_hour=views_by_hour,
            recent_views=recent[: self._recent_views_limit],
        )
