from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.domain.models.notification import NotificationBody
from src.domain.value_objects.notification_type import NotificationType

from .types import ALL_KINDS, NotificationKind


@dataclass
class BuiltNotification:
    kind: str
    type: NotificationType
    body: NotificationBody


def _id(value: Any) -> str | None:
    return str(value) if value is not None else None


def _short_label(s: str | None, *, max_len: int = 60) -> str | None:
    """Shorten titles embedded in messages to keep toasts on one line."""
    if not s:
        return s
    s = str(s)
    return s if len(s) <= max_len else (s[: max(0, max_len - 1)] + "…")


def build_notification(kind: str, **kwargs: Any) -> BuiltNotification:
    """
    Central place to build notification title/message/link/json from templates.
    Keep strings easy to find and translate.
    """
    if kind not in ALL_KINDS:
        # Fallback to pass-through
        return BuiltNotification(
            kind,
            NotificationType(kwargs.get("type", NotificationType.SYSTEM)),
            NotificationBody(
                title=str(kwargs.get("title", "Notification")),
                message=str(kwargs.get("message", "")),
                link=kwargs.get("link"),
                json=dict(kwargs.get("json") or {}) or None,
            ),
        )

    if kind in (
        NotificationKind.CONTRACT_SUBMITTED,
        NotificationKind.CONTRACT_ASSIGNED,
        NotificationKind.CONTRACT_UPDATED_FOR_ADMIN,
        NotificationKind.CONTRACT_UPDATED_FOR_INVESTOR,
    ):
        investor_id = kwargs.get("investor_id")
        contract_id = kwargs.get("contract_id")
        json = {
            "investorId": _id(investor_id),
            "propertyId": _id(kwargs.get("property_id")),
            "contractId": _id(contract_id),
        }
        if kind == NotificationKind.CONTRACT_SUBMITTED:
            title = "Contract Awaiting Review"
            message = (
                "An investor has submitted a new contract for your review. "
                "Please take the necessary actions to proceed."
            )
            link = f"/{investor_id}"
        elif kind == NotificationKind.CONTRACT_ASSIGNED:
            title = "New Investment Assigned"
            message = (
                "A new investment has been added to your account. "
                "Please review the details and take further action if needed."
            )
            link = f"/{investor_id}"
        elif kind == NotificationKind.CONTRACT_UPDATED_FOR_ADMIN:
            title = "Contract Status Updated"
            message = (
                "A contract you are managing has been updated. "
                "Please review the latest changes and take any required actions."
            )
            link = f"/{contract_id}"
        else:
            title = "Investment Status Updated"
            message = (
                "Your investment contract has been updated. "
                "Please review the latest status and follow up if needed."
            )
            link = f"/{contract_id}"
        new_status = kwargs.get("new_status")
        if new_status:
            json["newStatus"] = str(new_status)
        return BuiltNotification(
            kind, NotificationType.CONTRACT, NotificationBody(title, message, link, json)
        )

    if kind == NotificationKind.EVENT_CREATED:
        event_id = kwargs.get("event_id")
        title = f"New Event: {_short_label(kwargs.get('title', 'Event'))}"
        message = str(kwargs.get("description") or "")
        return BuiltNotification(
            kind,
            NotificationType.EVENT,
            NotificationBody(title, message, f"/events/{event_id}", {"eventId": _id(event_id)}),
        )

    if kind == NotificationKind.EVENT_STATUS_UPDATED:
        event_id = kwargs.get("event_id")
        new_status = kwargs.get("new_status", "")
        title = f"Event Status Updated: {_short_label(kwargs.get('title', 'Event'))}"
        message = f"The event status has changed to {new_status}."
        json = {"eventId": _id(event_id), "newStatus": str(new_status)}
        return BuiltNotification(
            kind,
            NotificationType.EVENT,
            NotificationBody(title, message, f"/events/{event_id}", json),
        )

    if kind == NotificationKind.PROPERTY_CREATED:
        property_id = kwargs.get("property_id")
        prop_title = _short_label(kwargs.get("title", "A new property"))
        return BuiltNotification(
            kind,
            NotificationType.PROPERTY,
            NotificationBody(
                "New Property",
                f"**{prop_title}** is now open for investment.",
                f"/{property_id}",
                {"propertyId": _id(property_id)},
            ),
        )

    if kind == NotificationKind.TENANT_LEASE_CREATED:
        property_id = kwargs.get("property_id")
        prop_title = _short_label(kwargs.get("property_title", ""))
        return BuiltNotification(
            kind,
            NotificationType.PROPERTY,
            NotificationBody(
                "New Tenant Lease Created",
                f'A new tenant lease has been created for your property "{prop_title}"',
                f"/properties/{property_id}",
                {"propertyId": _id(property_id)},
            ),
        )

    if kind == NotificationKind.USER_REGISTERED:
        user_id = kwargs.get("user_id")
        role = kwargs.get("role", "")
        role = getattr(role, "value", role)
        email = kwargs.get("email", "")
        return BuiltNotification(
            kind,
            NotificationType.USER,
            NotificationBody(
                "New User Registered",
                f"A new {role} user has registered: {email}",
                f"/users/{user_id}",
                {"userId": _id(user_id), "role": str(role), "email": email},
            ),
        )

    # Appointment templates share link and payload
    appointment_id = kwargs.get("appointment_id")
    booked_by_id = kwargs.get("booked_by_id")
    link = f"/{appointment_id}"
    json = {"appointmentId": _id(appointment_id), "bookedById": _id(booked_by_id)}
    new_status = kwargs.get("new_status", "")
    if kind == NotificationKind.APPOINTMENT_CANCELED:
        title = "Appointment Canceled"
        message = (
            "Your appointment for this property has been canceled due to ownership change."
        )
    elif kind == NotificationKind.APPOINTMENT_STATUS_UPDATED:
        title = "Appointment Status Updated"
        message = f"Your appointment status has been updated to {new_status}."
    elif kind == NotificationKind.APPOINTMENT_STATUS_UPDATED_FOR_ADMIN:
        title = "Appointment Status Updated"
        message = f"An appointment status has been updated to {new_status}."
    else:
        title = "Appointment Updated"
        message = "Your appointment has been updated."
    return BuiltNotification(
        kind, NotificationType.APPOINTMENT, NotificationBody(title, message, link, json)
    )
