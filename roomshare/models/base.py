from datetime import datetime
import pytz


def utcnow():
    # Naive UTC, matching what the DateTime columns store
    return datetime.now(pytz.utc).replace(tzinfo=None)


def isoformat_utc(value):
    if value is None:
        return None
    return pytz.utc.localize(value).isoformat() if value.tzinfo is None else value.isoformat()
