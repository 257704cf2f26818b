from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.application.errors import ValidationError
from src.application.notifications.dto import (
    CreateGlobalNotificationInput,
    CreateNotificationInput,
    UpdateGlobalNotificationInput,
    to_current_user,
)
from src.domain.models.user import CurrentUser
from src.domain.value_objects.role import Role


def test_roles_are_parsed_once_at_the_boundary():
    payload = CreateGlobalNotificationInput(
        title="t", message="m", target_roles=[" Investor", Role.BROKER]
    )
    assert payload.target_roles == [Role.INVESTOR, Role.BROKER]


def test_unknown_role_is_rejected():
    with pytest.raises(ValueError):
        Role.parse("landlord")


def test_unknown_role_is_reported_with_other_field_errors():
    with pytest.raises(PydanticValidationError) as exc_info:
        CreateGlobalNotificationInput(title="t", target_roles=["landlord"])
    locs = {err["loc"][0] for err in exc_info.value.errors()}
    assert locs == {"message", "target_roles"}


def test_current_user_accepts_raw_role_strings():
    caller = CurrentUser(user_id=uuid4(), role=" INVESTOR")
    assert caller.role is Role.INVESTOR
    assert caller.is_admin is False
    assert CurrentUser(user_id=uuid4(), role="superadmin").is_admin is True


def test_to_current_user_rejects_unknown_role():
    with pytest.raises(ValidationError) as exc_info:
        to_current_user(uuid4(), "landlord")
    assert exc_info.value.details == {"role": "landlord"}
    assert to_current_user(uuid4(), "Broker").role is Role.BROKER


def test_json_alias_and_field_name_both_populate_payload():
    by_alias = CreateNotificationInput(
        user_id=uuid4(), type="event", title="t", message="m", json={"a": 1}
    )
    by_name = CreateNotificationInput(
        user_id=uuid4(), type="event", title="t", message="m", payload={"a": 1}
    )
    assert by_alias.payload == by_name.payload == {"a": 1}


def test_schedule_is_normalised_to_utc():
    local = datetime(2026, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=-5)))
    payload = CreateGlobalNotificationInput(title="t", message="m", starts_at=local)
    assert payload.starts_at == datetime(2026, 1, 1, 14, 0, tzinfo=timezone.utc)
    assert payload.starts_at.tzinfo == timezone.utc


def test_update_changes_only_include_provided_fields():
    assert UpdateGlobalNotificationInput().changes() == {}
    assert UpdateGlobalNotificationInput(priority="high").changes() == {"priority": "high"}


def test_update_ignores_empty_required_text():
    changes = UpdateGlobalNotificationInput(title="", message=None, type=None).changes()
    assert changes == {}


def test_update_explicit_nulls_clear_optional_fields():
    changes = UpdateGlobalNotificationInput(
        link=None, icon=None, json=None, expires_at=None, target_roles=None
    ).changes()
    assert changes == {
        "link": None,
        "icon": None,
        "json": None,
        "expires_at": None,
        "target_roles": [],
    }


def test_update_is_active_false_is_applied_but_null_is_not():
    assert UpdateGlobalNotificationInput(is_active=False).changes() == {"is_active": False}
    assert UpdateGlobalNotificationInput(is_active=None).changes() == {}
