from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from src.domain.value_objects.role import Role


@dataclass(slots=True)
class User:
    id: UUID
    email: str
    role: Role
    is_enabled: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls, email: str, role: Role, *, is_enabled: bool = True) -> User:
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid4(),
            email=email.lower(),
            role=role,
            is_enabled=is_enabled,
            created_at=now,
            updated_at=now,
        )


@dataclass(slots=True, frozen=True)
class CurrentUser:
    """Identity of the caller as resolved by the (external) auth layer."""

    user_id: UUID
    role: Role

    def __post_init__(self) -> None:
        # Raw role strings from the auth layer are normalised here
        object.__setattr__(self, "role", Role.parse(self.role))

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin()


@dataclass(slots=True, frozen=True)
class ViewerSummary:
    id: UUID
    role: Role
    email: str
