from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
    INVESTOR = "investor"
    BROKER = "broker"

    def is_admin(self) -> bool:
        return self in {Role.ADMIN, Role.SUPERADMIN}

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown role: {value}") from exc


ADMIN_ROLES: tuple[Role, ...] = (Role.ADMIN, Role.SUPERADMIN)
