from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.repositories.notifications import NotificationRepository
from src.domain.models.notification import Notification
from src.domain.value_objects.notification_type import NotificationStatus
from src.domain.value_objects.role import Role
from src.infrastructure.db.orm.notification import NotificationORM
from src.utils.datetime_tz import as_utc, as_utc_or_none


def _not_legacy_global():
    return or_(NotificationORM.is_global.is_(None), NotificationORM.is_global == False)  # noqa: E712


class NotificationsSQLAlchemyRepository(NotificationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: NotificationORM) -> Notification:
        return Notification(
            id=orm.id,
            user_id=orm.user_id,
            type=orm.type,
            title=orm.title,
            message=orm.message,
            link=orm.link,
            target_roles=[Role(r) for r in orm.target_roles] if orm.target_roles else None,
            is_global=bool(orm.is_global),
            json=orm.json,
            status=orm.status,
            read_at=as_utc_or_none(orm.read_at),
            created_at=as_utc(orm.created_at),
        )

    def _to_row(self, notification: Notification) -> dict:
        roles = notification.target_roles
        return {
            "id": notification.id,
            "user_id": notification.user_id,
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "link": notification.link,
            "target_roles": [r.value for r in roles] if roles is not None else None,
            "is_global": notification.is_global,
            "json": notification.json,
            "status": notification.status,
            "read_at": notification.read_at,
            "created_at": notification.created_at,
        }

    async def add(self, notification: Notification) -> Notification:
        orm = NotificationORM(**self._to_row(notification))
        self.session.add(orm)
        await self.session.flush()
        return self._to_domain(orm)

    async def add_many(self, notifications: list[Notification]) -> int:
        if not notifications:
            return 0
        # Single multi-row INSERT
        await self.session.execute(
            insert(NotificationORM), [self._to_row(n) for n in notifications]
        )
        return len(notifications)

    async def get(self, notification_id: UUID) -> Notification | None:
        stmt = select(NotificationORM).where(NotificationORM.id == notification_id)
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def list_for_user(self, user_id: UUID) -> list[Notification]:
        stmt = (
            select(NotificationORM)
            .where(NotificationORM.user_id == user_id, _not_legacy_global())
            .order_by(NotificationORM.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def count_unread(self, user_id: UUID) -> int:
        stmt = select(func.count()).where(
            NotificationORM.user_id == user_id,
            NotificationORM.status == NotificationStatus.UNREAD,
            _not_legacy_global(),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def mark_as_read(self, notification_id: UUID, user_id: UUID, read_at: datetime) -> int:
        stmt = (
            update(NotificationORM)
            .where(NotificationORM.id == notification_id, NotificationORM.user_id == user_id)
            .values(status=NotificationStatus.READ, read_at=read_at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def mark_all_as_read(self, user_id: UUID, read_at: datetime) -> int:
        stmt = (
            update(NotificationORM)
            .where(NotificationORM.user_id == user_id)
            .values(status=NotificationStatus.READ, read_at=read_at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
