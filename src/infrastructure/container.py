from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.application.services.global_notifications import GlobalNotificationsService
from src.application.services.notifications import NotificationsService
from src.config.logging import configure_logging
from src.config.settings import Settings, get_settings
from src.infrastructure.db.base import Base
from src.infrastructure.db.session import (
    SQLAlchemyUnitOfWork,
    create_engine,
    create_session_factory,
)
from src.utils.datetime_tz import resolve_timezone, utcnow

logger = logging.getLogger(__name__)


@dataclass
class NotificationContainer:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    notifications: NotificationsService
    global_notifications: GlobalNotificationsService

    def unit_of_work(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(self.session_factory)

    async def create_schema(self) -> None:
        """Create all tables directly; production databases go through alembic."""
        # Registers the mapped tables on Base.metadata
        from src.infrastructure.db.orm import (  # noqa: F401
            global_notification,
            global_notification_view,
            notification,
            user,
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_container(
    settings: Settings | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> NotificationContainer:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    engine = create_engine(settings.database_url, echo=settings.sql_echo)
    session_factory = create_session_factory(engine)
    clock = clock or utcnow

    def uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    global_notifications = GlobalNotificationsService(
        uow_factory,
        clock=clock,
        tz=resolve_timezone(settings.app_timezone),
        page_size=settings.global_notifications_page_size,
        recent_views_limit=settings.analytics_recent_views,
    )
    notifications = NotificationsService(uow_factory, global_notifications, clock=clock)
    logger.info(
        "Notification container ready: env=%s timezone=%s",
        settings.environment,
        settings.app_timezone,
    )
    return NotificationContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        notifications=notifications,
        global_notifications=global_notifications,
    )
