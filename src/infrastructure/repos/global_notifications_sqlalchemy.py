from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.errors import InfrastructureError
from src.application.interfaces.repositories.global_notifications import (
    GlobalNotificationRepository,
    GlobalNotificationViewRepository,
)
from src.domain.models.global_notification import (
    GlobalNotification,
    GlobalNotificationView,
    GlobalNotificationWithStatus,
    GlobalNotificationWithViewCount,
    ViewWithViewer,
)
from src.domain.models.user import ViewerSummary
from src.domain.value_objects.role import Role
from src.infrastructure.db.orm.global_notification import GlobalNotificationORM
from src.infrastructure.db.orm.global_notification_view import GlobalNotificationViewORM
from src.infrastructure.db.orm.user import UserORM
from src.utils.datetime_tz import as_utc, as_utc_or_none

_UPDATABLE = {
    "title",
    "message",
    "type",
    "target_roles",
    "link",
    "priority",
    "icon",
    "json",
    "starts_at",
    "expires_at",
    "is_active",
    "updated_at",
}


def _live_at(at: datetime):
    return and_(
        GlobalNotificationORM.is_active.is_(True),
        GlobalNotificationORM.starts_at <= at,
        or_(GlobalNotificationORM.expires_at.is_(None), GlobalNotificationORM.expires_at >= at),
    )


def _role_values(roles) -> list[str]:
    return [Role.parse(r).value for r in roles or []]


class GlobalNotificationsSQLAlchemyRepository(GlobalNotificationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: GlobalNotificationORM) -> GlobalNotification:
        return GlobalNotification(
            id=orm.id,
            title=orm.title,
            message=orm.message,
            type=orm.type,
            target_roles=[Role(r) for r in orm.target_roles or []],
            link=orm.link,
            priority=orm.priority,
            icon=orm.icon,
            json=orm.json,
            starts_at=as_utc(orm.starts_at),
            expires_at=as_utc_or_none(orm.expires_at),
            is_active=orm.is_active,
            created_at=as_utc(orm.created_at),
            updated_at=as_utc(orm.updated_at),
        )

    async def add(self, notification: GlobalNotification) -> GlobalNotification:
        orm = GlobalNotificationORM(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            target_roles=_role_values(notification.target_roles),
            link=notification.link,
            priority=notification.priority,
            icon=notification.icon,
            json=notification.json,
            starts_at=notification.starts_at,
            expires_at=notification.expires_at,
            is_active=notification.is_active,
            created_at=notification.created_at,
            updated_at=notification.updated_at,
        )
        self.session.add(orm)
        await self.session.flush()
        return self._to_domain(orm)

    async def _get_orm(self, notification_id: UUID) -> GlobalNotificationORM | None:
        stmt = select(GlobalNotificationORM).where(GlobalNotificationORM.id == notification_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, notification_id: UUID) -> GlobalNotification | None:
        orm = await self._get_orm(notification_id)
        return self._to_domain(orm) if orm else None

    async def exists(self, notification_id: UUID) -> bool:
        stmt = select(GlobalNotificationORM.id).where(GlobalNotificationORM.id == notification_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def update(self, notification_id: UUID, data: dict[str, Any]) -> GlobalNotification | None:
        orm = await self._get_orm(notification_id)
        if not orm:
            return None
        for key, value in data.items():
            if key not in _UPDATABLE:
                continue
            if key == "target_roles":
                value = _role_values(value)
            setattr(orm, key, value)
        await self.session.flush()
        return self._to_domain(orm)

    async def delete(self, notification_id: UUID) -> bool:
        # Views go first so backends without FK enforcement stay consistent
        await self.session.execute(
            delete(GlobalNotificationViewORM).where(
                GlobalNotificationViewORM.global_notification_id == notification_id
            )
        )
        result = await self.session.execute(
            delete(GlobalNotificationORM).where(GlobalNotificationORM.id == notification_id)
        )
        return (result.rowcount or 0) > 0

    async def list_live_with_status(
        self, user_id: UUID, at: datetime
    ) -> list[GlobalNotificationWithStatus]:
        stmt = (
            select(
                GlobalNotificationORM,
                GlobalNotificationViewORM.id,
                GlobalNotificationViewORM.dismissed,
            )
            .outerjoin(
                GlobalNotificationViewORM,
                and_(
                    GlobalNotificationViewORM.global_notification_id == GlobalNotificationORM.id,
                    GlobalNotificationViewORM.user_id == user_id,
                ),
            )
            .where(_live_at(at))
            .order_by(GlobalNotificationORM.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [
            GlobalNotificationWithStatus(
                notification=self._to_domain(orm),
                viewed=view_id is not None,
                dismissed=bool(dismissed),
            )
            for orm, view_id, dismissed in result.all()
        ]

    async def list_live(self, at: datetime) -> list[GlobalNotification]:
        stmt = (
            select(GlobalNotificationORM)
            .where(_live_at(at))
            .order_by(GlobalNotificationORM.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def list_with_view_counts(
        self, *, limit: int, offset: int
    ) -> list[GlobalNotificationWithViewCount]:
        stmt = (
            select(GlobalNotificationORM, func.count(GlobalNotificationViewORM.id))
            .outerjoin(
                GlobalNotificationViewORM,
                GlobalNotificationViewORM.global_notification_id == GlobalNotificationORM.id,
            )
            .group_by(GlobalNotificationORM.id)
            .order_by(GlobalNotificationORM.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [
            GlobalNotificationWithViewCount(notification=self._to_domain(orm), view_count=count)
            for orm, count in result.all()
        ]

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(GlobalNotificationORM)
        )
        return result.scalar_one()


class GlobalNotificationViewsSQLAlchemyRepository(GlobalNotificationViewRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: GlobalNotificationViewORM) -> GlobalNotificationView:
        return GlobalNotificationView(
            id=orm.id,
            user_id=orm.user_id,
            global_notification_id=orm.global_notification_id,
            viewed_at=as_utc(orm.viewed_at),
            dismissed=orm.dismissed,
        )

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert
        if dialect == "sqlite":
            return sqlite_insert
        raise InfrastructureError(f"Upsert not supported for dialect '{dialect}'")

    async def upsert(
        self,
        user_id: UUID,
        global_notification_id: UUID,
        *,
        viewed_at: datetime,
        dismissed: bool | None,
    ) -> GlobalNotificationView:
        insert = self._insert()
        stmt = insert(GlobalNotificationViewORM).values(
            id=uuid4(),
            user_id=user_id,
            global_notification_id=global_notification_id,
            viewed_at=viewed_at,
            dismissed=bool(dismissed),
        )
        changes: dict[str, Any] = {"viewed_at": viewed_at}
        if dismissed is not None:
            changes["dismissed"] = dismissed
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "global_notification_id"],
            set_=changes,
        ).returning(
            GlobalNotificationViewORM.id,
            GlobalNotificationViewORM.user_id,
            GlobalNotificationViewORM.global_notification_id,
            GlobalNotificationViewORM.viewed_at,
            GlobalNotificationViewORM.dismissed,
        )
        result = await self.session.execute(stmt)
        row = result.one()
        return GlobalNotificationView(
            id=row.id,
            user_id=row.user_id,
            global_notification_id=row.global_notification_id,
            viewed_at=as_utc(row.viewed_at),
            dismissed=bool(row.dismissed),
        )

    async def get(
        self, user_id: UUID, global_notification_id: UUID
    ) -> GlobalNotificationView | None:
        stmt = select(GlobalNotificationViewORM).where(
            GlobalNotificationViewORM.user_id == user_id,
            GlobalNotificationViewORM.global_notification_id == global_notification_id,
        )
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def count_by_dismissed(self, global_notification_id: UUID) -> tuple[int, int]:
        stmt = (
            select(GlobalNotificationViewORM.dismissed, func.count())
            .where(GlobalNotificationViewORM.global_notification_id == global_notification_id)
            .group_by(GlobalNotificationViewORM.dismissed)
        )
        result = await self.session.execute(stmt)
        counts = {bool(flag): n for flag, n in result.all()}
        return counts.get(False, 0), counts.get(True, 0)

    async def list_with_viewers(self, global_notification_id: UUID) -> list[ViewWithViewer]:
        stmt = (
            select(GlobalNotificationViewORM, UserORM.id, UserORM.role, UserORM.email)
            .join(UserORM, UserORM.id == GlobalNotificationViewORM.user_id)
            .where(GlobalNotificationViewORM.global_notification_id == global_notification_id)
            .order_by(GlobalNotificationViewORM.viewed_at.desc())
        )
        result = await self.session.execute(stmt)
        return [
            ViewWithViewer(
                view=self._to_domain(orm),
                user=ViewerSummary(id=uid, role=role, email=email),
            )
            for orm, uid, role, email in result.all()
        ]
