from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from src.application.errors import NotFound, ValidationError
from src.application.notifications.dto import (
    CreateGlobalNotificationInput,
    UpdateGlobalNotificationInput,
)
from src.application.services.global_notifications import (
    GlobalNotificationsService,
    view_percentage,
)
from src.domain.models.global_notification import (
    GlobalNotification,
    GlobalNotificationView,
    GlobalNotificationWithStatus,
)
from src.domain.models.user import CurrentUser
from src.domain.value_objects.role import Role

NOW = datetime(2026, 5, 4, 8, 30, tzinfo=timezone.utc)


class StubGlobalNotifications:
    def __init__(self) -> None:
        self.items: dict = {}
        self.updated_with = None
        self.paged = None

    async def add(self, notification):
        self.items[notification.id] = notification
        return notification

    async def get(self, notification_id):
        return self.items.get(notification_id)

    async def exists(self, notification_id):
        return notification_id in self.items

    async def update(self, notification_id, data):
        self.updated_with = data
        return self.items.get(notification_id)

    async def delete(self, notification_id):
        return self.items.pop(notification_id, None) is not None

    async def list_live(self, at):
        return [n for n in self.items.values() if n.is_live(at)]

    async def list_live_with_status(self, user_id, at):
        return [
            GlobalNotificationWithStatus(notification=n, viewed=False, dismissed=False)
            for n in await self.list_live(at)
        ]

    async def list_with_view_counts(self, *, limit, offset):
        self.paged = (limit, offset)
        return []

    async def count(self):
        return len(self.items)


class StubViews:
    def __init__(self) -> None:
        self.upserts: list[tuple] = []

    async def upsert(self, user_id, global_notification_id, *, viewed_at, dismissed):
        self.upserts.append((user_id, global_notification_id, dismissed))
        return GlobalNotificationView(
            id=uuid4(),
            user_id=user_id,
            global_notification_id=global_notification_id,
            viewed_at=viewed_at,
            dismissed=bool(dismissed),
        )

    async def count_by_dismissed(self, global_notification_id):
        return 0, 0

    async def list_with_viewers(self, global_notification_id):
        return []


class StubUsers:
    def __init__(self, total: int = 0) -> None:
        self.total = total
        self.count_args = None

    async def count(self, *, is_enabled=True, roles=None):
        self.count_args = (is_enabled, roles)
        return self.total


class StubUnitOfWork:
    def __init__(self, globals_repo, views, users) -> None:
        self.global_notifications = globals_repo
        self.global_notification_views = views
        self.users = users
        self.commits = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        return None


def make_service(users_total: int = 0):
    uow = StubUnitOfWork(StubGlobalNotifications(), StubViews(), StubUsers(users_total))
    service = GlobalNotificationsService(lambda: uow, clock=lambda: NOW, page_size=25)
    return service, uow


def test_view_percentage_rounds_half_up():
    assert view_percentage(1, 8) == 13
    assert view_percentage(1, 3) == 33
    assert view_percentage(2, 3) == 67
    assert view_percentage(5, 5) == 100


def test_view_percentage_without_targets_is_zero():
    assert view_percentage(0, 0) == 0
    assert view_percentage(3, 0) == 0


@pytest.mark.asyncio
async def test_create_commits_and_stamps_clock():
    service, uow = make_service()
    created = await service.create(
        CreateGlobalNotificationInput(title="t", message="m", target_roles="broker")
    )
    assert created.target_roles == [Role.BROKER]
    assert created.created_at == NOW
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_update_sets_updated_at_and_passes_only_changes():
    service, uow = make_service()
    created = await service.create(CreateGlobalNotificationInput(title="t", message="m"))
    await service.update(created.id, UpdateGlobalNotificationInput(icon="megaphone"))
    assert uow.global_notifications.updated_with == {"icon": "megaphone", "updated_at": NOW}


@pytest.mark.asyncio
async def test_update_missing_raises_without_commit():
    service, uow = make_service()
    with pytest.raises(NotFound):
        await service.update(uuid4(), UpdateGlobalNotificationInput(title="x"))
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_mark_as_viewed_skips_missing_notification():
    service, uow = make_service()
    assert await service.mark_as_viewed(uuid4(), uuid4()) is None
    assert uow.global_notification_views.upserts == []
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_mark_all_as_viewed_only_touches_visible_notifications():
    service, uow = make_service()
    for_brokers = await service.create(
        CreateGlobalNotificationInput(title="b", message="m", target_roles=["broker"])
    )
    await service.create(
        CreateGlobalNotificationInput(title="i", message="m", target_roles=["investor"])
    )
    await service.create(
        CreateGlobalNotificationInput(
            title="later", message="m", starts_at=NOW + timedelta(days=1)
        )
    )
    broker = CurrentUser(user_id=uuid4(), role=Role.BROKER)

    assert await service.mark_all_as_viewed(broker) == 1
    assert uow.global_notification_views.upserts == [(broker.user_id, for_brokers.id, None)]


@pytest.mark.asyncio
async def test_stats_count_targeted_roles():
    service, uow = make_service(users_total=4)
    created = await service.create(
        CreateGlobalNotificationInput(title="t", message="m", target_roles=["investor", "broker"])
    )
    stats = await service.get_notification_stats(created.id)
    assert uow.users.count_args == (True, [Role.INVESTOR, Role.BROKER])
    assert stats.targeted_users == 4
    assert stats.view_percentage == 0


@pytest.mark.asyncio
async def test_stats_for_everyone_do_not_filter_roles():
    service, uow = make_service(users_total=2)
    created = await service.create(CreateGlobalNotificationInput(title="t", message="m"))
    await service.get_notification_stats(created.id)
    assert uow.users.count_args == (True, None)


@pytest.mark.asyncio
async def test_get_all_uses_configured_page_size():
    service, uow = make_service()
    page = await service.get_all_notifications()
    assert page.total == 0
    assert uow.global_notifications.paged == (25, 0)
    with pytest.raises(ValidationError):
        await service.get_all_notifications(limit=-5)


@pytest.mark.asyncio
async def test_delete_missing_raises_not_found():
    service, _ = make_service()
    with pytest.raises(NotFound):
        await service.delete(uuid4())


def test_visibility_rules_on_entity():
    gn = GlobalNotification.create("t", "m", now=NOW, target_roles=[Role.INVESTOR])
    assert gn.is_visible_to(Role.INVESTOR, NOW)
    assert not gn.is_visible_to(Role.ADMIN, NOW)
    assert not gn.is_visible_to(Role.INVESTOR, NOW - timedelta(seconds=1))
    gn.expires_at = NOW + timedelta(hours=1)
    assert gn.is_visible_to(Role.INVESTOR, NOW + timedelta(hours=1))
    assert not gn.is_visible_to(Role.INVESTOR, NOW + timedelta(hours=1, seconds=1))
