from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.db.base import Base


class GlobalNotificationViewORM(Base):
    __tablename__ = "global_notification_views"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "global_notification_id",
            name="ux_global_notification_views_user_notification",
        ),
        Index("ix_global_notification_views_notification", "global_notification_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    global_notification_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("global_notifications.id", ondelete="CASCADE"),
        nullable=False,
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    dismissed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
