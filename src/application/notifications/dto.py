from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.application.errors import ValidationError
from src.domain.models.global_notification import (
    GlobalNotificationWithViewCount,
    ViewWithViewer,
)
from src.domain.models.user import CurrentUser
from src.domain.value_objects.notification_type import NotificationType
from src.domain.value_objects.role import Role
from src.utils.datetime_tz import as_utc_or_none


def _parse_roles(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, Role)):
        value = [value]
    return [Role.parse(v) for v in value]


def to_current_user(user_id: UUID, role: str | Role) -> CurrentUser:
    """Build the caller identity from the auth layer's raw claims."""
    try:
        return CurrentUser(user_id=user_id, role=role)
    except ValueError as exc:
        raise ValidationError(str(exc), details={"role": str(role)}) from exc


class CreateNotificationInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID
    type: NotificationType
    title: str
    message: str
    link: str | None = None
    target_roles: list[Role] | None = None
    payload: dict[str, Any] | None = Field(default=None, alias="json")

    @field_validator("target_roles", mode="before")
    @classmethod
    def parse_roles(cls, value: Any) -> Any:
        return _parse_roles(value)


class CreateGlobalNotificationInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    message: str
    type: NotificationType | None = None
    target_roles: list[Role] | None = None
    link: str | None = None
    priority: str | None = None
    icon: str | None = None
    payload: dict[str, Any] | None = Field(default=None, alias="json")
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None

    @field_validator("target_roles", mode="before")
    @classmethod
    def parse_roles(cls, value: Any) -> Any:
        return _parse_roles(value)

    @field_validator("starts_at", "expires_at")
    @classmethod
    def normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc_or_none(value)


class UpdateGlobalNotificationInput(BaseModel):
    """Partial update; only explicitly provided fields are applied."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    message: str | None = None
    type: NotificationType | None = None
    target_roles: list[Role] | None = None
    link: str | None = None
    priority: str | None = None
    icon: str | None = None
    payload: dict[str, Any] | None = Field(default=None, alias="json")
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None

    @field_validator("target_roles", mode="before")
    @classmethod
    def parse_roles(cls, value: Any) -> Any:
        return _parse_roles(value)

    @field_validator("starts_at", "expires_at")
    @classmethod
    def normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc_or_none(value)

    # Ignored when empty
    TRUTHY_ONLY: ClassVar[tuple[str, ...]] = ("title", "message", "type", "priority", "starts_at")
    # Applied whenever present; an explicit null clears the column
    NULLABLE: ClassVar[tuple[str, ...]] = (
        "target_roles",
        "link",
        "icon",
        "payload",
        "expires_at",
        "is_active",
    )

    def changes(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        provided = self.model_fields_set
        for name in self.TRUTHY_ONLY:
            value = getattr(self, name)
            if name in provided and value:
                data[name] = value
        for name in self.NULLABLE:
            if name not in provided:
                continue
            value = getattr(self, name)
            if name == "target_roles":
                value = list(value or [])
            elif name == "is_active" and value is None:
                continue
            data["json" if name == "payload" else name] = value
        return data


@dataclass(slots=True)
class NotificationStats:
    notification_id: UUID
    title: str
    targeted_users: int
    viewed_count: int
    view_percentage: int
    dismissed_count: int
    created_at: datetime


@dataclass(slots=True)
class RoleViewBreakdown:
    total: int = 0
    dismissed: int = 0


@dataclass(slots=True)
class ViewAnalytics:
    total_views: int
    total_dismissed: int
    views_by_role: dict[str, RoleViewBreakdown] = field(default_factory=dict)
    views_by_hour: dict[int, int] = field(default_factory=dict)
    recent_views: list[ViewWithViewer] = field(default_factory=list)


@dataclass(slots=True)
class GlobalNotificationPage:
    notifications: list[GlobalNotificationWithViewCount]
    total: int
