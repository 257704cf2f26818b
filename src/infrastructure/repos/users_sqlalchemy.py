from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.errors import ConflictError
from src.application.interfaces.repositories.users import UserRepository
from src.domain.models.user import User
from src.domain.value_objects.role import Role
from src.infrastructure.db.orm.user import UserORM
from src.utils.datetime_tz import as_utc


class UsersSQLAlchemyRepository(UserRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: UserORM) -> User:
        return User(
            id=orm.id,
            email=orm.email,
            role=orm.role,
            is_enabled=orm.is_enabled,
            created_at=as_utc(orm.created_at),
            updated_at=as_utc(orm.updated_at),
        )

    async def add(self, user: User) -> User:
        orm = UserORM(
            id=user.id,
            email=user.email,
            role=user.role,
            is_enabled=user.is_enabled,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Email already registered") from exc
        return self._to_domain(orm)

    async def get(self, user_id: UUID) -> User | None:
        stmt = select(UserORM).where(UserORM.id == user_id)
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def count(self, *, is_enabled: bool = True, roles: Iterable[Role] | None = None) -> int:
        stmt = select(func.count()).select_from(UserORM).where(UserORM.is_enabled == is_enabled)
        if roles is not None:
            stmt = stmt.where(UserORM.role.in_([Role.parse(r) for r in roles]))
        result = await self.session.execute(stmt)
        return result.scalar_one()
