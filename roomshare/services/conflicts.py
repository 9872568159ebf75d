from roomshare.services.lifecycle import BookingStatus
from roomshare.services.time_range import TimeRange


def find_conflicts(candidate: TimeRange, bookings, exclude_booking_id=None) -> list:
    """
    Return the bookings that block `candidate`.

    Only pending and confirmed bookings block. When rescheduling, pass the
    booking's own id as `exclude_booking_id` so its previous range is ignored.
    """
    conflicts = []
    for booking in bookings:
        if booking.status not in BookingStatus.BLOCKING:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        if candidate.overlaps(booking.time_range):
            conflicts.append(booking)
    return conflicts
