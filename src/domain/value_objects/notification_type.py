from __future__ import annotations

from enum import Enum


class NotificationType(str, Enum):
    CONTRACT = "contract"
    PROPERTY = "property"
    APPOINTMENT = "appointment"
    EVENT = "event"
    USER = "user"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"
