from __future__ import annotations

from datetime import datetime, timezone

from zoneinfo import ZoneInfo

# Analytics buckets default to UTC unless APP_TIMEZONE says otherwise
DEFAULT_TIMEZONE_NAME = "UTC"
DEFAULT_TZ = ZoneInfo(DEFAULT_TIMEZONE_NAME)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Return `dt` as an aware UTC datetime.

    Naive values are assumed to already be UTC (SQLite drops tzinfo on the
    way back), aware values are converted.
    """
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_utc_or_none(dt: datetime | None) -> datetime | None:
    return as_utc(dt) if dt is not None else None


def local_hour(dt: datetime, tz: ZoneInfo | None = None) -> int:
    """Hour of day (0-23) of `dt` in `tz` (DEFAULT_TZ when omitted)."""
    return as_utc(dt).astimezone(tz or DEFAULT_TZ).hour


def resolve_timezone(name: str | None) -> ZoneInfo:
    if not name:
        return DEFAULT_TZ
    return ZoneInfo(name)
