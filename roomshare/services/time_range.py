from datetime import datetime, timedelta

from roomshare.errors import InvalidRangeError
from roomshare.utils.timeutils import to_utc


class TimeRange:
    """Half-open interval [start, end) of UTC instants."""

    __slots__ = ('start', 'end')

    def __init__(self, start: datetime, end: datetime):
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidRangeError()
        self.start = start
        self.end = end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: 'TimeRange') -> bool:
        # Touching ranges ([10:00, 12:00) and [12:00, 13:00)) do not overlap
        return self.start < other.end and other.start < self.end

    def __eq__(self, other):
        if not isinstance(other, TimeRange):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return f"TimeRange({self.start.isoformat()}, {self.end.isoformat()})"
