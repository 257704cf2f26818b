from __future__ import annotations

from typing import Iterable, Protocol
from uuid import UUID

from src.domain.models.user import User
from src.domain.value_objects.role import Role


class UserRepository(Protocol):
    async def add(self, user: User) -> User: ...

    async def get(self, user_id: UUID) -> User | None: ...

    async def count(self, *, is_enabled: bool = True, roles: Iterable[Role] | None = None) -> int:
        """Count users; `roles=None` means any role."""
        ...
