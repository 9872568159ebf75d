from datetime import datetime
import pytz

from roomshare.errors import ValidationError


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def to_storage(value: datetime) -> datetime:
    """Columns hold naive UTC, the same way SQLite hands them back."""
    return to_utc(value).replace(tzinfo=None)


def parse_instant(raw, field='time') -> datetime:
    if not raw:
        raise ValidationError(f"Missing {field}.", field=field)
    if isinstance(raw, datetime):
        return to_utc(raw)
    try:
        # fromisoformat does not take a trailing 'Z' before Python 3.11
        if isinstance(raw, str) and raw.endswith('Z'):
            raw = raw[:-1] + '+00:00'
        return to_utc(datetime.fromisoformat(raw))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: expected ISO 8601.", field=field)
