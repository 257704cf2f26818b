from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from uuid import UUID

from src.application.interfaces.unit_of_work import UnitOfWork
from src.application.notifications.dto import CreateNotificationInput
from src.application.services.global_notifications import GlobalNotificationsService
from src.domain.models.notification import Notification, NotificationBody, NotificationEntry
from src.domain.models.user import CurrentUser
from src.domain.value_objects.notification_type import NotificationType
from src.utils.datetime_tz import utcnow

logger = logging.getLogger(__name__)


class NotificationsService:
    """User-addressed notifications and their read state."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        global_notifications: GlobalNotificationsService,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self.global_notifications = global_notifications
        self._clock = clock

    async def create(self, payload: CreateNotificationInput) -> Notification:
        notification = Notification.create(
            user_id=payload.user_id,
            type=payload.type,
            body=NotificationBody(
                title=payload.title,
                message=payload.message,
                link=payload.link,
                json=payload.payload,
            ),
            target_roles=payload.target_roles,
            created_at=self._clock(),
        )
        async with self._uow_factory() as uow:
            saved = await uow.notifications.add(notification)
            await uow.commit()
        logger.info(
            "Notification created: id=%s user=%s type=%s",
            saved.id,
            saved.user_id,
            saved.type.value,
        )
        return saved

    async def get_related_notifications(self, user: CurrentUser) -> list[Notification]:
        async with self._uow_factory() as uow:
            return await uow.notifications.list_for_user(user.user_id)

    async def count_unread(self, user_id: UUID) -> int:
        async with self._uow_factory() as uow:
            return await uow.notifications.count_unread(user_id)

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> bool:
        """Mark one owned notification as read; False when nothing matched."""
        async with self._uow_factory() as uow:
            matched = await uow.notifications.mark_as_read(
                notification_id, user_id, read_at=self._clock()
            )
            await uow.commit()
        if matched != 1:
            logger.debug(
                "Mark as read matched %s rows: id=%s user=%s", matched, notification_id, user_id
            )
        return matched == 1

    async def mark_all_as_read(self, user: CurrentUser) -> bool:
        async with self._uow_factory() as uow:
            marked = await uow.notifications.mark_all_as_read(user.user_id, read_at=self._clock())
            await uow.commit()
        # Separate transaction; a retry converges since both steps are idempotent
        viewed = await self.global_notifications.mark_all_as_viewed(user)
        logger.info(
            "Marked all as read: user=%s notifications=%s global=%s",
            user.user_id,
            marked,
            viewed,
        )
        return True

    async def notify(
        self, user_id: UUID, type: NotificationType | str, body: NotificationBody
    ) -> Notification:
        return await self.create(
            CreateNotificationInput(
                user_id=user_id,
                type=NotificationType(type),
                title=body.title,
                message=body.message,
                link=body.link,
                payload=body.json,
            )
        )

    async def notify_bulk(
        self, user_ids: Iterable[UUID], type: NotificationType | str, body: NotificationBody
    ) -> int:
        return await self.notify_bulk_custom(
            [NotificationEntry(user_id=user_id, body=body) for user_id in user_ids], type
        )

    async def notify_bulk_custom(
        self, entries: Iterable[NotificationEntry], type: NotificationType | str
    ) -> int:
        ntype = NotificationType(type)
        now = self._clock()
        notifications = [
            Notification.create(user_id=entry.user_id, type=ntype, body=entry.body, created_at=now)
            for entry in entries
        ]
        if not notifications:
            return 0
        async with self._uow_factory() as uow:
            inserted = await uow.notifications.add_many(notifications)
            await uow.commit()
        logger.info("Bulk notifications created: type=%s count=%s", ntype.value, inserted)
        return inserted
