"""Column types shared by the models.

Dates are stored as ISO-8601 text (naive UTC).  Older rows may hold a
numeric epoch instead (seconds or milliseconds, stored as text or number);
``Timestamp`` rehydrates all of these into ``datetime`` so callers never see
a primitive in a date field.  Migration 0004 rewrites stored epochs as ISO
text so that ORDER BY on a date column follows date order.
"""

from datetime import date, datetime, timezone

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

# Epoch values above this are milliseconds (year 5138 in seconds).
_MS_THRESHOLD = 1e11


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def coerce_datetime(value) -> datetime | None:
    """Turn a stored primitive into a naive UTC datetime."""
    if value is None or isinstance(value, datetime):
        return _naive_utc(value) if value is not None else None
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return _from_epoch(float(value))
    text = str(value).strip()
    if not text:
        return None
    try:
        return _from_epoch(float(text))
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _naive_utc(datetime.fromisoformat(text))


def is_epoch(value) -> bool:
    """True for a numeric epoch, stored as a number or as numeric text."""
    if isinstance(value, (int, float)):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        float(value)
    except ValueError:
        return False
    return True


def to_storage_text(value) -> str | None:
    """ISO-8601 text as written to a Timestamp column."""
    value = coerce_datetime(value)
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _from_epoch(seconds: float) -> datetime:
    if abs(seconds) > _MS_THRESHOLD:
        seconds = seconds / 1000.0
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Timestamp(TypeDecorator):
    """Datetime column persisted as ISO text, tolerant of legacy epochs."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return to_storage_text(value)

    def process_result_value(self, value, dialect):
        return coerce_datetime(value)
