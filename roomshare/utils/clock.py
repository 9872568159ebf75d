from datetime import datetime, timedelta
import pytz

from roomshare.utils.timeutils import to_utc


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(pytz.utc)


class FixedClock:
    """Clock frozen at a given instant; tests move it with advance()."""

    def __init__(self, now: datetime):
        self._now = to_utc(now)

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime):
        self._now = to_utc(now)

    def advance(self, **kwargs):
        self._now = self._now + timedelta(**kwargs)
