import logging

from flask import current_app

from roomshare.errors import (
    CapacityExceededError, BookingConflictError, InvalidRangeError, NotAuthorizedError,
    NotFoundError, RoomNotApprovedError, ValidationError, InvalidTransitionError,
)
from roomshare.extensions import db
from roomshare.models import Booking, Review, Room
from roomshare.services import conflicts, lifecycle, pricing
from roomshare.services.lifecycle import BookingStatus
from roomshare.services.locks import room_locks
from roomshare.services.time_range import TimeRange
from roomshare.utils.clock import SystemClock
from roomshare.utils.timeutils import to_storage

logger = logging.getLogger(__name__)


def get_booking_service() -> 'BookingService':
    return current_app.extensions['booking_service']


class BookingService:
    """
    Creates, prices, reschedules and moves bookings through their lifecycle.

    `clock` supplies the current instant for every time-dependent rule and
    `initial_status` is the deployment-wide status of new bookings
    ('confirmed' for instant booking, 'pending' for owner approval).
    """

    def __init__(self, clock=None, initial_status=BookingStatus.CONFIRMED, locks=None):
        self.clock = clock or SystemClock()
        self.initial_status = lifecycle.validate_initial_status(initial_status)
        self.locks = locks or room_locks

    def now(self):
        return self.clock.now()

    # --- PRICING ---

    @staticmethod
    def compute_price(rate_amount, rate_unit, start_time, end_time) -> float:
        return pricing.compute_price(rate_amount, rate_unit, TimeRange(start_time, end_time))

    def compute_quote(self, room_id, start_time, end_time):
        """Price preview for a room, without booking it."""
        room = self._get_room(room_id)
        time_range = TimeRange(start_time, end_time)
        return {
            'room_id': room.id,
            'rate_amount': room.rate_amount,
            'rate_unit': room.rate_unit,
            'units': pricing.billable_units(room.rate_unit, time_range),
            'total_price': pricing.compute_price(room.rate_amount, room.rate_unit, time_range),
        }

    # --- CONFLICTS ---

    @staticmethod
    def blocking_bookings(room_id):
        """All bookings of the room whose status holds the room."""
        return Booking.query.filter(
            Booking.room_id == room_id,
            Booking.status.in_(BookingStatus.BLOCKING)
        ).order_by(Booking.start_time).all()

    def find_conflicts(self, room_id, start_time, end_time, exclude_booking_id=None):
        candidate = TimeRange(start_time, end_time)
        return conflicts.find_conflicts(candidate, self.blocking_bookings(room_id), exclude_booking_id)

    def _ensure_no_conflict(self, room_id, time_range, exclude_booking_id=None):
        found = conflicts.find_conflicts(time_range, self.blocking_bookings(room_id), exclude_booking_id)
        if found:
            ids = [b.id for b in found]
            logger.warning("Booking conflict on room %s for %r with bookings %s", room_id, time_range, ids)
            raise BookingConflictError(ids)

    # --- CREATION ---

    def create_booking(self, room_id, client, start_time, end_time, party_size=1):
        """
        Main entry point to book a room.

        The conflict check and the insert run under the room's lock and in a
        single transaction: either the booking is committed or nothing is.
        """
        if client is None or not client.is_client or not client.active:
            raise NotAuthorizedError('Only active clients can book rooms.')

        # Locks are only handed out for rooms that exist
        self._get_room(room_id)

        with self.locks.hold(room_id):
            try:
                room = self._lock_room(room_id)

                # 1. Moderation
                if not room.is_bookable:
                    raise RoomNotApprovedError()

                # 2. Capacity Check
                party_size = self._check_party_size(room, party_size)

                # 3. Range
                time_range = self._future_range(start_time, end_time)

                # 4. Availability Check
                self._ensure_no_conflict(room.id, time_range)

                # 5. Price
                total = pricing.compute_price(room.rate_amount, room.rate_unit, time_range)

                # 6. Transaction
                booking = Booking(
                    client_id=client.id,
                    room_id=room.id,
                    start_time=to_storage(time_range.start),
                    end_time=to_storage(time_range.end),
                    party_size=party_size,
                    total_price=total,
                    status=self.initial_status
                )
                db.session.add(booking)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise

        logger.info("Booking %s created: room=%s client=%s %r price=%s status=%s",
                    booking.id, room_id, client.id, time_range, total, booking.status)
        return booking

    def reschedule_booking(self, booking_id, actor, start_time, end_time, party_size=None):
        """
        Move a booking to a new range (and optionally a new party size).

        Allowed for the booking's client or an admin while the booking still
        holds the room. Its own previous range never counts as a conflict.
        """
        booking = self._get_booking(booking_id)
        if not (actor.is_admin or actor.id == booking.client_id):
            raise NotAuthorizedError('Not allowed to modify this booking.')

        with self.locks.hold(booking.room_id):
            try:
                room = self._lock_room(booking.room_id)
                db.session.refresh(booking)
                current = booking.effective_status(self.now())
                if current not in BookingStatus.BLOCKING:
                    raise InvalidTransitionError(current, current, 'Only pending or confirmed bookings can be modified.')

                if party_size is not None:
                    booking.party_size = self._check_party_size(room, party_size)
                elif booking.party_size > room.capacity:
                    raise CapacityExceededError(room.capacity, booking.party_size)

                time_range = self._future_range(start_time, end_time)
                self._ensure_no_conflict(room.id, time_range, exclude_booking_id=booking.id)

                booking.start_time = to_storage(time_range.start)
                booking.end_time = to_storage(time_range.end)
                booking.total_price = pricing.compute_price(room.rate_amount, room.rate_unit, time_range)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise

        logger.info("Booking %s rescheduled by user %s to %r", booking.id, actor.id, time_range)
        return booking

    # --- LIFECYCLE ---

    def cancel_booking(self, booking_id, actor):
        """Cancel a booking. Only its client may, and only before it has ended."""
        booking = self._get_booking(booking_id)
        if actor is None or booking.client_id != actor.id:
            logger.warning("User %s refused cancellation of booking %s", getattr(actor, 'id', None), booking_id)
            raise NotAuthorizedError('Not allowed to cancel this booking.')
        return self._apply_transition(booking, BookingStatus.CANCELLED, actor)

    def transition_booking(self, booking_id, actor, target_status):
        if target_status not in BookingStatus.ALL:
            raise ValidationError(f"Unknown booking status: {target_status!r}.", status=target_status)
        if target_status == BookingStatus.CANCELLED:
            return self.cancel_booking(booking_id, actor)
        return self._apply_transition(self._get_booking(booking_id), target_status, actor)

    def confirm_booking(self, booking_id, actor):
        return self.transition_booking(booking_id, actor, BookingStatus.CONFIRMED)

    def refuse_booking(self, booking_id, actor):
        return self.transition_booking(booking_id, actor, BookingStatus.REFUSED)

    def _apply_transition(self, booking, target_status, actor):
        try:
            previous = lifecycle.check_transition(booking, target_status, actor, self.now())
            booking.status = target_status
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Booking %s: %s -> %s by user %s", booking.id, previous, target_status, actor.id)
        return booking

    def complete_elapsed(self):
        """Persist 'completed' for confirmed bookings whose end has passed. Returns the count."""
        now = to_storage(self.now())
        bookings = Booking.query.filter(
            Booking.status == BookingStatus.CONFIRMED,
            Booking.end_time <= now
        ).all()
        for booking in bookings:
            booking.status = BookingStatus.COMPLETED
        db.session.commit()
        if bookings:
            logger.info("Marked %d elapsed bookings as completed", len(bookings))
        return len(bookings)

    def delete_booking(self, booking_id, actor):
        """Hard delete, for administrators only."""
        if not actor.is_admin:
            raise NotAuthorizedError('Admin privilege required.')
        booking = self._get_booking(booking_id)
        try:
            Review.query.filter_by(booking_id=booking.id).delete()
            db.session.delete(booking)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Booking %s deleted by admin %s", booking_id, actor.id)

    # --- REVIEWS ---

    def review_eligibility(self, booking, client) -> bool:
        if client is None or booking.client_id != client.id:
            return False
        if booking.effective_status(self.now()) != BookingStatus.COMPLETED:
            return False
        return Review.query.filter_by(booking_id=booking.id).first() is None

    # --- QUERIES ---

    def get_booking(self, booking_id, actor):
        booking = self._get_booking(booking_id)
        if not (actor.id == booking.client_id or actor.can_manage(booking.room)):
            raise NotAuthorizedError('Not allowed to view this booking.')
        return booking

    @staticmethod
    def list_client_bookings(client_id):
        return Booking.query.filter(
            Booking.client_id == client_id
        ).order_by(Booking.created_at.desc()).all()

    @staticmethod
    def list_owner_bookings(owner_id):
        return Booking.query.join(Room).filter(
            Room.owner_id == owner_id
        ).order_by(Booking.created_at.desc()).all()

    @staticmethod
    def list_all_bookings():
        return Booking.query.order_by(Booking.created_at.desc()).all()

    # --- HELPERS ---

    @staticmethod
    def _get_room(room_id):
        room = db.session.get(Room, room_id)
        if not room:
            raise NotFoundError('Room not found.')
        return room

    @staticmethod
    def _lock_room(room_id):
        # FOR UPDATE serializes writers across processes on server databases;
        # SQLite ignores it and relies on the in-process room lock.
        room = db.session.query(Room).filter(Room.id == room_id).with_for_update().first()
        if not room:
            raise NotFoundError('Room not found.')
        return room

    @staticmethod
    def _get_booking(booking_id):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError('Booking not found.')
        return booking

    def _future_range(self, start_time, end_time) -> TimeRange:
        """Build the range of a booking, which may not start before now."""
        time_range = TimeRange(start_time, end_time)
        if time_range.start < self.now():
            raise InvalidRangeError('Bookings cannot start in the past.', start_time=time_range.start.isoformat())
        return time_range

    @staticmethod
    def _check_party_size(room, party_size):
        if isinstance(party_size, bool) or (isinstance(party_size, float) and not party_size.is_integer()):
            raise ValidationError('Party size must be an integer.', party_size=party_size)
        try:
            party_size = int(party_size)
        except (TypeError, ValueError):
            raise ValidationError('Party size must be an integer.', party_size=party_size)
        if party_size < 1:
            raise ValidationError('Party size must be at least 1.', party_size=party_size)
        if party_size > room.capacity:
            raise CapacityExceededError(room.capacity, party_size)
        return party_size
