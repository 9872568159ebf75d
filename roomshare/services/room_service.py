import logging

from sqlalchemy import or_

from roomshare.errors import NotAuthorizedError, NotFoundError, RoomInUseError, ValidationError, InvalidRateUnitError
from roomshare.extensions import db
from roomshare.models import Booking, Review, Room, RoomStatus, User
from roomshare.services.lifecycle import BookingStatus
from roomshare.services.pricing import RateUnit

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'description', 'city', 'address', 'equipment',
                   'capacity', 'rate_amount', 'rate_unit', 'available')
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 2000

# Columns the room search may be sorted on; '-field' sorts descending
SORTABLE_FIELDS = {
    'created_at': Room.created_at,
    'title': Room.title,
    'capacity': Room.capacity,
    'rate_amount': Room.rate_amount,
    'rating_average': Room.rating_average,
}
DEFAULT_SORT = '-created_at'


def like_pattern(text: str) -> str:
    """Substring pattern for ILIKE where '%' and '_' typed by the user match literally."""
    escaped = text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


def sort_clauses(sort: str):
    """Turn 'rate_amount,-capacity' into ORDER BY clauses."""
    clauses = []
    for name in (sort or DEFAULT_SORT).split(','):
        name = name.strip()
        descending = name.startswith('-')
        column = SORTABLE_FIELDS.get(name.lstrip('-'))
        if column is None:
            raise ValidationError(f"Cannot sort rooms by {name!r}.", sort=sort,
                                  allowed=sorted(SORTABLE_FIELDS))
        clauses.append(column.desc() if descending else column.asc())
    clauses.append(Room.id.desc())
    return clauses


class RoomService:

    @staticmethod
    def clean_room_data(data: dict, partial=False) -> dict:
        """Validate the editable room fields and return only those."""
        cleaned = {k: data[k] for k in EDITABLE_FIELDS if k in data}

        if not partial:
            for required in ('title', 'capacity', 'rate_amount'):
                if cleaned.get(required) in (None, ''):
                    raise ValidationError(f"Field '{required}' is required.", field=required)

        if 'title' in cleaned:
            title = (cleaned['title'] or '').strip()
            if not title or len(title) > TITLE_MAX_LENGTH:
                raise ValidationError(f"Title must be 1 to {TITLE_MAX_LENGTH} characters.", field='title')
            cleaned['title'] = title

        if 'description' in cleaned:
            description = cleaned['description'] or ''
            if len(description) > DESCRIPTION_MAX_LENGTH:
                raise ValidationError(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters.",
                                      field='description')
            cleaned['description'] = description

        if 'capacity' in cleaned:
            try:
                cleaned['capacity'] = int(cleaned['capacity'])
            except (TypeError, ValueError):
                raise ValidationError('Capacity must be an integer.', field='capacity')
            if cleaned['capacity'] < 1:
                raise ValidationError('Capacity must be at least 1.', field='capacity')

        if 'rate_amount' in cleaned:
            try:
                cleaned['rate_amount'] = float(cleaned['rate_amount'])
            except (TypeError, ValueError):
                raise ValidationError('Rate amount must be a number.', field='rate_amount')
            if cleaned['rate_amount'] < 0:
                raise ValidationError('Rate amount cannot be negative.', field='rate_amount')

        if 'rate_unit' in cleaned and cleaned['rate_unit'] not in RateUnit.ALL:
            raise InvalidRateUnitError(cleaned['rate_unit'])

        if 'equipment' in cleaned:
            equipment = cleaned['equipment'] or []
            if not isinstance(equipment, list):
                raise ValidationError('Equipment must be a list.', field='equipment')
            cleaned['equipment'] = [str(e).strip() for e in equipment if str(e).strip()]

        if 'available' in cleaned:
            cleaned['available'] = bool(cleaned['available'])

        return cleaned

    @staticmethod
    def create_room(owner: User, data: dict) -> Room:
        """New listings wait for moderation."""
        if owner.role not in (User.OWNER, User.ADMIN):
            raise NotAuthorizedError('Only owners can list rooms.')

        room = Room(owner_id=owner.id, status=RoomStatus.PENDING, **RoomService.clean_room_data(data))
        db.session.add(room)
        db.session.commit()
        logger.info("Room %s created by user %s, awaiting approval", room.id, owner.id)
        return room

    @staticmethod
    def update_room(room_id, actor: User, data: dict) -> Room:
        room = RoomService.get_room(room_id)
        if not actor.can_manage(room):
            raise NotAuthorizedError('Not allowed to modify this room.')

        for field, value in RoomService.clean_room_data(data, partial=True).items():
            setattr(room, field, value)

        # An owner's edit must be moderated again
        if not actor.is_admin:
            room.status = RoomStatus.PENDING

        db.session.commit()
        logger.info("Room %s updated by user %s (status=%s)", room.id, actor.id, room.status)
        return room

    @staticmethod
    def delete_room(room_id, actor: User):
        room = RoomService.get_room(room_id)
        if not actor.can_manage(room):
            raise NotAuthorizedError('Not allowed to delete this room.')

        active = Booking.query.filter(
            Booking.room_id == room.id,
            Booking.status.in_(BookingStatus.BLOCKING)
        ).count()
        if active:
            raise RoomInUseError(f"Room still has {active} pending or confirmed bookings.", active_bookings=active)
        # Booking history is only removed by an administrator
        if not actor.is_admin and Booking.query.filter_by(room_id=room.id).first() is not None:
            raise RoomInUseError('Room has past bookings; mark it unavailable instead.')

        try:
            Review.query.filter_by(room_id=room.id).delete()
            Booking.query.filter_by(room_id=room.id).delete()
            db.session.delete(room)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Room %s deleted by user %s", room_id, actor.id)

    @staticmethod
    def _set_status(room_id, actor: User, status):
        if not actor.is_admin:
            raise NotAuthorizedError('Admin privilege required.')
        room = RoomService.get_room(room_id)
        room.status = status
        db.session.commit()
        logger.info("Room %s %s by admin %s", room.id, status, actor.id)
        return room

    @staticmethod
    def approve_room(room_id, actor: User) -> Room:
        return RoomService._set_status(room_id, actor, RoomStatus.APPROVED)

    @staticmethod
    def reject_room(room_id, actor: User) -> Room:
        return RoomService._set_status(room_id, actor, RoomStatus.REJECTED)

    @staticmethod
    def get_room(room_id) -> Room:
        room = db.session.get(Room, room_id)
        if not room:
            raise NotFoundError('Room not found.')
        return room

    @staticmethod
    def get_visible_room(room_id, actor=None) -> Room:
        """Unapproved rooms are only shown to their owner and to admins."""
        room = RoomService.get_room(room_id)
        if room.status != RoomStatus.APPROVED and not (actor and actor.can_manage(room)):
            raise NotFoundError('Room not found.')
        return room

    @staticmethod
    def list_pending_rooms():
        return Room.query.filter_by(status=RoomStatus.PENDING).order_by(Room.created_at.desc()).all()

    @staticmethod
    def list_owner_rooms(owner_id):
        return Room.query.filter_by(owner_id=owner_id).order_by(Room.created_at.desc()).all()

    @staticmethod
    def list_all_rooms():
        return Room.query.order_by(Room.created_at.desc()).all()

    @staticmethod
    def search_rooms(actor=None, search=None, min_capacity=None, min_rate=None, max_rate=None,
                     page=1, limit=12, sort=None):
        """
        Rooms visible to `actor`, one page at a time. Newest first unless
        `sort` names other columns (see SORTABLE_FIELDS).

        Visitors and clients see approved rooms; owners also see their own
        listings whatever their status; admins see everything.
        """
        order_by = sort_clauses(sort)
        query = Room.query

        if actor is None or actor.role == User.CLIENT:
            query = query.filter(Room.status == RoomStatus.APPROVED)
        elif actor.role == User.OWNER:
            query = query.filter(or_(Room.owner_id == actor.id, Room.status == RoomStatus.APPROVED))

        if search:
            pattern = like_pattern(search)
            query = query.filter(or_(
                Room.title.ilike(pattern, escape='\\'),
                Room.description.ilike(pattern, escape='\\'),
                Room.city.ilike(pattern, escape='\\')
            ))
        if min_capacity is not None:
            query = query.filter(Room.capacity >= min_capacity)
        if min_rate is not None:
            query = query.filter(Room.rate_amount >= min_rate)
        if max_rate is not None:
            query = query.filter(Room.rate_amount <= max_rate)

        page = max(page, 1)
        limit = max(limit, 1)
        total = query.count()
        rooms = query.order_by(*order_by) \
            .offset((page - 1) * limit).limit(limit).all()

        pagination = {}
        if page * limit < total:
            pagination['next'] = {'page': page + 1, 'limit': limit}
        if page > 1:
            pagination['prev'] = {'page': page - 1, 'limit': limit}

        return {'total': total, 'count': len(rooms), 'pagination': pagination, 'rooms': rooms}
