"""Shared utilities for schema columns."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(v: Any) -> Any:
    """Attach UTC to naive datetimes or return the value as-is.

    SQLite drops tzinfo on round trip, so values read back are naive even when
    they were written as aware UTC timestamps.
    """
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime column that always loads as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if isinstance(value, datetime):
            return ensure_utc(value).astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        return ensure_utc(value)
