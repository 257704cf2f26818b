from __future__ import annotations

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest

from src.application.notifications.dto import CreateGlobalNotificationInput
from src.domain.value_objects.notification_type import NotificationType
from src.domain.value_objects.role import Role


def _payload(**overrides) -> CreateGlobalNotificationInput:
    data = {"title": "Maintenance", "message": "Scheduled downtime tonight"}
    data.update(overrides)
    return CreateGlobalNotificationInput(**data)


@pytest.mark.asyncio
async def test_create_applies_defaults(container, clock):
    created = await container.global_notifications.create(_payload())
    assert created.type == NotificationType.SYSTEM
    assert created.priority == "normal"
    assert created.target_roles == []
    assert created.is_active is True
    assert created.starts_at == clock.now
    assert created.created_at == clock.now


@pytest.mark.asyncio
async def test_empty_target_roles_is_visible_to_every_role(container, seeded_users):
    created = await container.global_notifications.create(_payload())
    for name in ("admin", "superadmin", "investor", "broker"):
        feed = await container.global_notifications.get_active_notifications(seeded_users[name])
        assert [item.notification.id for item in feed] == [created.id]


@pytest.mark.asyncio
async def test_targeted_notification_only_reaches_listed_roles(container, seeded_users):
    created = await container.global_notifications.create(_payload(target_roles=["investor"]))
    investor_feed = await container.global_notifications.get_active_notifications(
        seeded_users["investor"]
    )
    broker_feed = await container.global_notifications.get_active_notifications(
        seeded_users["broker"]
    )
    assert [item.notification.id for item in investor_feed] == [created.id]
    assert broker_feed == []


@pytest.mark.asyncio
async def test_future_expired_and_inactive_notifications_are_hidden(container, seeded_users, clock):
    gn = container.global_notifications
    await gn.create(_payload(title="future", starts_at=clock.now + timedelta(hours=1)))
    await gn.create(
        _payload(
            title="expired",
            starts_at=clock.now - timedelta(days=2),
            expires_at=clock.now - timedelta(minutes=1),
        )
    )
    await gn.create(_payload(title="off", is_active=False))
    live = await gn.create(_payload(title="live", expires_at=clock.now + timedelta(hours=1)))

    feed = await gn.get_active_notifications(seeded_users["investor"])
    assert [item.notification.id for item in feed] == [live.id]


@pytest.mark.asyncio
async def test_scheduled_notification_appears_once_started(container, seeded_users, clock):
    gn = container.global_notifications
    created = await gn.create(_payload(starts_at=clock.now + timedelta(hours=1)))
    assert await gn.get_active_notifications(seeded_users["broker"]) == []
    clock.advance(hours=1)
    feed = await gn.get_active_notifications(seeded_users["broker"])
    assert [item.notification.id for item in feed] == [created.id]


@pytest.mark.asyncio
async def test_feed_is_newest_first(container, seeded_users, clock):
    gn = container.global_notifications
    first = await gn.create(_payload(title="first"))
    clock.advance(minutes=1)
    second = await gn.create(_payload(title="second"))
    feed = await gn.get_active_notifications(seeded_users["admin"])
    assert [item.notification.id for item in feed] == [second.id, first.id]


@pytest.mark.asyncio
async def test_view_lifecycle_scenario(container, seeded_users, clock):
    gn = container.global_notifications
    investor = seeded_users["investor"]
    created = await gn.create(
        _payload(target_roles=["investor", "broker"], expires_at=clock.now + timedelta(hours=1))
    )

    feed = await gn.get_active_notifications(investor)
    assert len(feed) == 1
    assert feed[0].viewed is False
    assert feed[0].dismissed is False

    await gn.mark_as_viewed(created.id, investor.user_id)
    feed = await gn.get_active_notifications(investor)
    assert (feed[0].viewed, feed[0].dismissed) == (True, False)

    await gn.dismiss_notification(created.id, investor.user_id)
    feed = await gn.get_active_notifications(investor)
    assert (feed[0].viewed, feed[0].dismissed) == (True, True)

    assert await gn.get_active_notifications(seeded_users["admin"]) == []


@pytest.mark.asyncio
async def test_repeated_view_keeps_single_row_with_latest_timestamp(
    container, seeded_users, clock
):
    gn = container.global_notifications
    investor = seeded_users["investor"]
    created = await gn.create(_payload())

    first = await gn.mark_as_viewed(created.id, investor.user_id)
    later = clock.advance(minutes=5)
    second = await gn.mark_as_viewed(created.id, investor.user_id)

    assert first.id == second.id
    assert second.viewed_at == later
    async with container.unit_of_work() as uow:
        stored = await uow.global_notification_views.get(investor.user_id, created.id)
        not_dismissed, dismissed = await uow.global_notification_views.count_by_dismissed(
            created.id
        )
    assert stored.viewed_at == later
    assert (not_dismissed, dismissed) == (1, 0)


@pytest.mark.asyncio
async def test_concurrent_view_and_dismiss_collapse_into_one_row(container, seeded_users):
    gn = container.global_notifications
    broker = seeded_users["broker"]
    created = await gn.create(_payload())

    await asyncio.gather(
        gn.mark_as_viewed(created.id, broker.user_id),
        gn.dismiss_notification(created.id, broker.user_id),
        gn.mark_as_viewed(created.id, broker.user_id),
    )

    analytics = await gn.get_view_analytics(created.id)
    assert analytics.total_views == 1


@pytest.mark.asyncio
async def test_dismiss_without_prior_view_creates_dismissed_view(container, seeded_users):
    gn = container.global_notifications
    broker = seeded_users["broker"]
    created = await gn.create(_payload())
    view = await gn.dismiss_notification(created.id, broker.user_id)
    assert view.dismissed is True
    feed = await gn.get_active_notifications(broker)
    assert (feed[0].viewed, feed[0].dismissed) == (True, True)


@pytest.mark.asyncio
async def test_viewing_a_missing_notification_is_a_silent_noop(container, seeded_users):
    result = await container.global_notifications.mark_as_viewed(
        uuid4(), seeded_users["investor"].user_id
    )
    assert result is None


@pytest.mark.asyncio
async def test_mark_all_as_viewed_keeps_dismissed_flag(container, seeded_users, clock):
    gn = container.global_notifications
    investor = seeded_users["investor"]
    dismissed = await gn.create(_payload(title="dismissed"))
    fresh = await gn.create(_payload(title="fresh", target_roles=[Role.INVESTOR]))
    admins_only = await gn.create(_payload(title="admins", target_roles=["admin"]))
    await gn.dismiss_notification(dismissed.id, investor.user_id)

    clock.advance(minutes=10)
    touched = await gn.mark_all_as_viewed(investor)
    assert touched == 2

    async with container.unit_of_work() as uow:
        views = uow.global_notification_views
        dismissed_view = await views.get(investor.user_id, dismissed.id)
        fresh_view = await views.get(investor.user_id, fresh.id)
        admin_view = await views.get(investor.user_id, admins_only.id)
    assert dismissed_view.dismissed is True
    assert dismissed_view.viewed_at == clock.now
    assert fresh_view.dismissed is False
    assert admin_view is None
    assert await gn.count_unviewed(investor) == 0


@pytest.mark.asyncio
async def test_count_unviewed(container, seeded_users):
    gn = container.global_notifications
    broker = seeded_users["broker"]
    first = await gn.create(_payload(title="one"))
    await gn.create(_payload(title="two", target_roles=["broker"]))
    await gn.create(_payload(title="three", target_roles=["investor"]))
    assert await gn.count_unviewed(broker) == 2
    await gn.mark_as_viewed(first.id, broker.user_id)
    assert await gn.count_unviewed(broker) == 1
