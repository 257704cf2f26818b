from __future__ import annotations


class NotificationKind:
    """Canonical template names for notifications raised by domain services."""

    CONTRACT_SUBMITTED = "contract_submitted"
    CONTRACT_ASSIGNED = "contract_assigned"
    CONTRACT_UPDATED_FOR_ADMIN = "contract_updated_for_admin"
    CONTRACT_UPDATED_FOR_INVESTOR = "contract_updated_for_investor"
    EVENT_CREATED = "event_created"
    EVENT_STATUS_UPDATED = "event_status_updated"
    PROPERTY_CREATED = "property_created"
    APPOINTMENT_CANCELED = "appointment_canceled"
    APPOINTMENT_STATUS_UPDATED = "appointment_status_updated"
    APPOINTMENT_STATUS_UPDATED_FOR_ADMIN = "appointment_status_updated_for_admin"
    APPOINTMENT_UPDATED = "appointment_updated"
    TENANT_LEASE_CREATED = "tenant_lease_created"
    USER_REGISTERED = "user_registered"


ALL_KINDS = {
    NotificationKind.CONTRACT_SUBMITTED,
    NotificationKind.CONTRACT_ASSIGNED,
    NotificationKind.CONTRACT_UPDATED_FOR_ADMIN,
    NotificationKind.CONTRACT_UPDATED_FOR_INVESTOR,
    NotificationKind.EVENT_CREATED,
    NotificationKind.EVENT_STATUS_UPDATED,
    NotificationKind.PROPERTY_CREATED,
    NotificationKind.APPOINTMENT_CANCELED,
    NotificationKind.APPOINTMENT_STATUS_UPDATED,
    NotificationKind.APPOINTMENT_STATUS_UPDATED_FOR_ADMIN,
    NotificationKind.APPOINTMENT_UPDATED,
    NotificationKind.TENANT_LEASE_CREATED,
    NotificationKind.USER_REGISTERED,
}
