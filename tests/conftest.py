from __future__ import annotations

import os
import sys
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///default.db")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

# ruff: noqa: E402
from src.config.settings import Settings
from src.domain.models.user import CurrentUser, User
from src.domain.value_objects.role import Role
from src.infrastructure.container import NotificationContainer, create_container

T0 = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Manually advanced clock injected into the services."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    db_path = tmp_path / "test.db"
    return Settings.model_validate(
        {
            "database_url": f"sqlite+aiosqlite:///{db_path}",
            "log_level": "INFO",
            "environment": "test",
            "app_timezone": "UTC",
        }
    )


@pytest.fixture()
async def container(
    test_settings: Settings, clock: FrozenClock
) -> AsyncIterator[NotificationContainer]:
    container = create_container(test_settings, clock=clock)
    await container.create_schema()
    try:
        yield container
    finally:
        await container.dispose()


@pytest.fixture()
async def seeded_users(container: NotificationContainer) -> dict[str, CurrentUser]:
    """Enabled users keyed by name plus one disabled investor."""
    specs = {
        "admin": (Role.ADMIN, True),
        "superadmin": (Role.SUPERADMIN, True),
        "investor": (Role.INVESTOR, True),
        "investor2": (Role.INVESTOR, True),
        "broker": (Role.BROKER, True),
        "disabled_investor": (Role.INVESTOR, False),
    }
    users: dict[str, CurrentUser] = {}
    async with container.unit_of_work() as uow:
        for name, (role, enabled) in specs.items():
            user = await uow.users.add(
                User.create(f"{name}@example.com", role, is_enabled=enabled)
            )
            users[name] = CurrentUser(user_id=user.id, role=user.role)
        await uow.commit()
    return users


@pytest.fixture()
def make_user(container: NotificationContainer):
    async def _make(email: str, role: Role) -> CurrentUser:
        async with container.unit_of_work() as uow:
            user = await uow.users.add(User.create(email, role))
            await uow.commit()
        return CurrentUser(user_id=user.id, role=user.role)

    return _make
