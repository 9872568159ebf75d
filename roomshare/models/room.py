from roomshare.extensions import db
from roomshare.models.base import utcnow, isoformat_utc
from roomshare.services.pricing import RateUnit

class RoomStatus:
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    ALL = (PENDING, APPROVED, REJECTED)


class Room(db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    city = db.Column(db.String(100))
    address = db.Column(db.String(255))
    equipment = db.Column(db.JSON, default=list) # e.g. ["projector", "whiteboard"]

    capacity = db.Column(db.Integer, nullable=False)
    rate_amount = db.Column(db.Float, nullable=False, default=0)
    rate_unit = db.Column(db.String(10), nullable=False, default=RateUnit.HOUR)

    status = db.Column(db.String(20), nullable=False, default=RoomStatus.PENDING, index=True)
    available = db.Column(db.Boolean, nullable=False, default=True)

    # Derived from the room's reviews, see ReviewService.recompute_room_rating
    rating_average = db.Column(db.Float, nullable=False, default=0)
    review_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow)

    owner = db.relationship('User', backref=db.backref('rooms', lazy=True))

    __table_args__ = (
        db.CheckConstraint('capacity > 0', name='check_room_capacity_positive'),
        db.CheckConstraint('rate_amount >= 0', name='check_room_rate_non_negative'),
    )

    @property
    def is_bookable(self):
        return self.status == RoomStatus.APPROVED and bool(self.available)

    def to_dict(self):
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'title': self.title,
            'description': self.description,
            'city': self.city,
            'address': self.address,
            'equipment': self.equipment or [],
            'capacity': self.capacity,
            'rate_amount': self.rate_amount,
            'rate_unit': self.rate_unit,
            'status': self.status,
            'available': self.available,
            'rating_average': self.rating_average,
            'review_count': self.review_count,
            'created_at': isoformat_utc(self.created_at)
        }
