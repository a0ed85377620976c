"""
Timestamp handling for Firestore snapshots.

Documents arrive with Firestore timestamps, ISO strings, epoch numbers or
exported {"seconds", "nanoseconds"} maps depending on who wrote them.
Everything is normalized to timezone-aware UTC datetimes here, once, at
ingestion. Unparsable values become None and never default to "now".
"""
import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from workin_analytics.errors import MalformedTimestamp

logger = logging.getLogger('workin_analytics.timeutils')

SECONDS_PER_DAY = 86400

# Epoch values above this are treated as milliseconds (year ~5138 in seconds)
_MILLIS_THRESHOLD = 1e11


def utc_now() -> datetime:
    """Default clock provider."""
    return datetime.now(timezone.utc)


def _from_epoch(value: float) -> datetime:
    if abs(value) > _MILLIS_THRESHOLD:
        value = value / 1000.0
    return datetime.fromtimestamp(value, tz=timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse any supported timestamp shape into an aware UTC datetime.

    Returns None for absent values (None, empty string).
    Raises MalformedTimestamp for values that are present but unusable.
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, bool):
        raise MalformedTimestamp(f"boolean is not a timestamp: {value!r}")

    if isinstance(value, (int, float)):
        try:
            return _from_epoch(float(value))
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedTimestamp(f"epoch out of range: {value!r}") from e

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return parse_timestamp(datetime.fromisoformat(text))
        except ValueError as e:
            raise MalformedTimestamp(f"unparsable timestamp string: {value!r}") from e

    if isinstance(value, dict):
        seconds = value.get('seconds', value.get('_seconds'))
        if seconds is None:
            raise MalformedTimestamp(f"timestamp map without seconds: {value!r}")
        nanos = value.get('nanoseconds', value.get('_nanoseconds', 0)) or 0
        try:
            return _from_epoch(float(seconds)) + timedelta(microseconds=int(nanos) // 1000)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise MalformedTimestamp(f"bad timestamp map: {value!r}") from e

    # google.protobuf Timestamp / firestore Timestamp-like objects
    for attr in ('to_datetime', 'ToDatetime'):
        converter = getattr(value, attr, None)
        if callable(converter):
            return parse_timestamp(converter())

    raise MalformedTimestamp(f"unsupported timestamp type: {type(value).__name__}")


def coerce_timestamp(value: Any, field: str = '', record_id: str = '') -> Optional[datetime]:
    """parse_timestamp() that logs and returns None instead of raising."""
    try:
        return parse_timestamp(value)
    except MalformedTimestamp as e:
        logger.warning("Ignoring malformed %s on %s: %s", field or 'timestamp', record_id or '?', e)
        return None


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored (negative when end precedes start)."""
    return math.floor((end - start).total_seconds() / SECONDS_PER_DAY)


def start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
