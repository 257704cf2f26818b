from __future__ import annotations

import logging
from typing import Iterable

from src.application.events.models import (
    AppointmentStatusChangedEvent,
    ContractCreatedEvent,
    ContractStatusChangedEvent,
    EventCreatedEvent,
    EventStatusChangedEvent,
    PropertyCreatedEvent,
    PropertyOwnerChangedEvent,
    TenantLeaseCreatedEvent,
    UserRegisteredEvent,
)
from src.application.notifications.dto import (
    CreateGlobalNotificationInput,
    CreateNotificationInput,
)
from src.application.notifications.factory import BuiltNotification, build_notification
from src.application.notifications.types import NotificationKind
from src.application.services.global_notifications import GlobalNotificationsService
from src.application.services.notifications import NotificationsService
from src.domain.models.notification import NotificationEntry
from src.domain.value_objects.role import ADMIN_ROLES, Role

logger = logging.getLogger(__name__)

AUDIENCE_ROLES = (Role.INVESTOR, Role.BROKER)


async def dispatch_events(
    notifications: NotificationsService,
    global_notifications: GlobalNotificationsService,
    events: Iterable[object],
) -> None:
    """
    Dispatch domain events post-commit into user or global notifications.
    A failing event is logged and does not stop the remaining ones.
    """
    events = list(events)
    if not events:
        return

    for event in events:
        try:
            if isinstance(event, ContractCreatedEvent):
                await _handle_contract_created(global_notifications, event)
            elif isinstance(event, ContractStatusChangedEvent):
                await _handle_contract_status_changed(notifications, global_notifications, event)
            elif isinstance(event, EventCreatedEvent):
                await _handle_event_created(global_notifications, event)
            elif isinstance(event, EventStatusChangedEvent):
                await _handle_event_status_changed(global_notifications, event)
            elif isinstance(event, PropertyCreatedEvent):
                await _handle_property_created(global_notifications, event)
            elif isinstance(event, PropertyOwnerChangedEvent):
                await _handle_property_owner_changed(notifications, event)
            elif isinstance(event, AppointmentStatusChangedEvent):
                await _handle_appointment_status_changed(
                    notifications, global_notifications, event
                )
            elif isinstance(event, TenantLeaseCreatedEvent):
                await _handle_tenant_lease_created(notifications, event)
            elif isinstance(event, UserRegisteredEvent):
                await _handle_user_registered(global_notifications, event)
            else:
                logger.debug("No notification handler for event %s", type(event).__name__)
        except Exception as e:
            logger.error("Error dispatching event %s: %s", type(event).__name__, e, exc_info=True)


async def _broadcast(
    global_notifications: GlobalNotificationsService,
    built: BuiltNotification,
    roles: Iterable[Role],
) -> None:
    await global_notifications.create(
        CreateGlobalNotificationInput(
            title=built.body.title,
            message=built.body.message,
            type=built.type,
            target_roles=list(roles),
            link=built.body.link,
            payload=built.body.json,
        )
    )


async def _handle_contract_created(
    global_notifications: GlobalNotificationsService, e: ContractCreatedEvent
) -> None:
    kind = (
        NotificationKind.CONTRACT_SUBMITTED
        if e.actor_user_id == e.investor_id
        else NotificationKind.CONTRACT_ASSIGNED
    )
    built = build_notification(
        kind,
        investor_id=e.investor_id,
        contract_id=e.contract_id,
        property_id=e.property_id,
    )
    await _broadcast(global_notifications, built, ADMIN_ROLES)


async def _handle_contract_status_changed(
    notifications: NotificationsService,
    global_notifications: GlobalNotificationsService,
    e: ContractStatusChangedEvent,
) -> None:
    kwargs = dict(
        investor_id=e.investor_id,
        contract_id=e.contract_id,
        property_id=e.property_id,
        new_status=e.new_status,
    )
    if e.actor.is_admin:
        built = build_notification(NotificationKind.CONTRACT_UPDATED_FOR_INVESTOR, **kwargs)
        await notifications.notify(e.investor_id, built.type, built.body)
    else:
        built = build_notification(NotificationKind.CONTRACT_UPDATED_FOR_ADMIN, **kwargs)
        await _broadcast(global_notifications, built, ADMIN_ROLES)


async def _handle_event_created(
    global_notifications: GlobalNotificationsService, e: EventCreatedEvent
) -> None:
    built = build_notification(
        NotificationKind.EVENT_CREATED,
        event_id=e.event_id,
        title=e.title,
        description=e.description,
    )
    await _broadcast(global_notifications, built, AUDIENCE_ROLES)


async def _handle_event_status_changed(
    global_notifications: GlobalNotificationsService, e: EventStatusChangedEvent
) -> None:
    built = build_notification(
        NotificationKind.EVENT_STATUS_UPDATED,
        event_id=e.event_id,
        title=e.title,
        new_status=e.new_status,
    )
    await _broadcast(global_notifications, built, AUDIENCE_ROLES)


async def _handle_property_created(
    global_notifications: GlobalNotificationsService, e: PropertyCreatedEvent
) -> None:
    built = build_notification(
        NotificationKind.PROPERTY_CREATED, property_id=e.property_id, title=e.title
    )
    await _broadcast(global_notifications, built, (Role.BROKER, Role.INVESTOR))


async def _handle_property_owner_changed(
    notifications: NotificationsService, e: PropertyOwnerChangedEvent
) -> None:
    entries = []
    for appointment in e.canceled_appointments:
        built = build_notification(
            NotificationKind.APPOINTMENT_CANCELED,
            appointment_id=appointment.appointment_id,
            booked_by_id=appointment.booked_by_id,
        )
        entries.append(NotificationEntry(user_id=appointment.booked_by_id, body=built.body))
    count = await notifications.notify_bulk_custom(entries, "appointment")
    logger.info(
        "Appointments canceled by owner change notified: property=%s count=%s",
        e.property_id,
        count,
    )


async def _handle_appointment_status_changed(
    notifications: NotificationsService,
    global_notifications: GlobalNotificationsService,
    e: AppointmentStatusChangedEvent,
) -> None:
    kwargs = dict(
        appointment_id=e.appointment_id,
        booked_by_id=e.booked_by_id,
        new_status=e.new_status,
    )
    if e.old_status == e.new_status:
        built = build_notification(NotificationKind.APPOINTMENT_UPDATED, **kwargs)
        await notifications.notify(e.booked_by_id, built.type, built.body)
    elif e.actor.is_admin:
        built = build_notification(NotificationKind.APPOINTMENT_STATUS_UPDATED, **kwargs)
        await notifications.notify(e.booked_by_id, built.type, built.body)
    else:
        built = build_notification(NotificationKind.APPOINTMENT_STATUS_UPDATED_FOR_ADMIN, **kwargs)
        await _broadcast(global_notifications, built, ADMIN_ROLES)


async def _handle_tenant_lease_created(
    notifications: NotificationsService, e: TenantLeaseCreatedEvent
) -> None:
    if e.owner_id is None:
        return
    built = build_notification(
        NotificationKind.TENANT_LEASE_CREATED,
        property_id=e.property_id,
        property_title=e.property_title,
    )
    await notifications.create(
        CreateNotificationInput(
            user_id=e.owner_id,
            type=built.type,
            title=built.body.title,
            message=built.body.message,
            link=built.body.link,
            target_roles=[Role.INVESTOR],
            payload=built.body.json,
        )
    )


async def _handle_user_registered(
    global_notifications: GlobalNotificationsService, e: UserRegisteredEvent
) -> None:
    built = build_notification(
        NotificationKind.USER_REGISTERED, user_id=e.user_id, email=e.email, role=e.role
    )
    await _broadcast(global_notifications, built, ADMIN_ROLES)
