from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.models.user import CurrentUser


@dataclass(frozen=True)
class ContractCreatedEvent:
    actor_user_id: UUID
    investor_id: UUID
    contract_id: UUID
    property_id: UUID


@dataclass(frozen=True)
class ContractStatusChangedEvent:
    actor: CurrentUser
    investor_id: UUID
    contract_id: UUID
    property_id: UUID
    new_status: str


@dataclass(frozen=True)
class EventCreatedEvent:
    event_id: UUID
    title: str
    description: str = ""


@dataclass(frozen=True)
class EventStatusChangedEvent:
    event_id: UUID
    title: str
    new_status: str


@dataclass(frozen=True)
class PropertyCreatedEvent:
    property_id: UUID
    title: str


@dataclass(frozen=True)
class CanceledAppointment:
    appointment_id: UUID
    booked_by_id: UUID


@dataclass(frozen=True)
class PropertyOwnerChangedEvent:
    property_id: UUID
    # Appointments already canceled by the property owner change
    canceled_appointments: tuple[CanceledAppointment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AppointmentStatusChangedEvent:
    actor: CurrentUser
    appointment_id: UUID
    booked_by_id: UUID
    old_status: str
    new_status: str


@dataclass(frozen=True)
class TenantLeaseCreatedEvent:
    property_id: UUID
    property_title: str
    owner_id: UUID | None = None


@dataclass(frozen=True)
class UserRegisteredEvent:
    user_id: UUID
    email: str
    role: str
