"""
Booking status state machine.

    pending   -> confirmed | refused   (room owner or admin, before the end)
    pending   -> cancelled             (the booking's client, before the end)
    confirmed -> cancelled             (the booking's client, before the end)
    confirmed -> completed             (derived once the end has passed)

cancelled, refused and completed are terminal.
"""
from datetime import datetime

from roomshare.errors import InvalidTransitionError, NotAuthorizedError
from roomshare.utils.timeutils import to_utc


class BookingStatus:
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    REFUSED = 'refused'
    COMPLETED = 'completed'

    ALL = (PENDING, CONFIRMED, CANCELLED, REFUSED, COMPLETED)
    # Statuses that hold the room for their time range
    BLOCKING = frozenset({PENDING, CONFIRMED})
    TERMINAL = frozenset({CANCELLED, REFUSED, COMPLETED})
    INITIAL = frozenset({PENDING, CONFIRMED})


# Transitions an actor may request. Completion is never requested, only derived.
ACTOR_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.REFUSED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
}


def effective_status(status: str, end: datetime, now: datetime) -> str:
    if status == BookingStatus.CONFIRMED and to_utc(now) >= to_utc(end):
        return BookingStatus.COMPLETED
    return status


def check_transition(booking, target: str, actor, now: datetime) -> str:
    """
    Validate `target` for `booking` as requested by `actor`.

    Returns the booking's current (effective) status. Raises
    InvalidTransitionError or NotAuthorizedError.
    """
    now = to_utc(now)
    current = booking.effective_status(now)

    if target not in ACTOR_TRANSITIONS.get(current, ()):
        raise InvalidTransitionError(current, target)

    if target == BookingStatus.CANCELLED:
        if actor.id != booking.client_id:
            raise NotAuthorizedError('Only the client who made the booking can cancel it.')
    elif not actor.can_manage(booking.room):
        raise NotAuthorizedError('Only the room owner or an admin can confirm or refuse a booking.')

    if now >= booking.time_range.end:
        raise InvalidTransitionError(current, target, 'The booking has already ended.')

    return current


def validate_initial_status(status: str) -> str:
    if status not in BookingStatus.INITIAL:
        raise ValueError(
            f"BOOKING_INITIAL_STATUS must be one of {sorted(BookingStatus.INITIAL)}, got {status!r}"
        )
    return status
