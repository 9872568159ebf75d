from roomshare.extensions import db
from roomshare.models.base import utcnow, isoformat_utc
from roomshare.services.lifecycle import BookingStatus, effective_status
from roomshare.services.time_range import TimeRange

class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False, index=True)

    # Naive UTC
    start_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False, index=True)

    party_size = db.Column(db.Integer, nullable=False, default=1)
    total_price = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING, index=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    room = db.relationship('Room', backref=db.backref('bookings', lazy=True))
    client = db.relationship('User', backref=db.backref('bookings', lazy=True))

    __table_args__ = (
        db.CheckConstraint('end_time > start_time', name='check_booking_range'),
        db.CheckConstraint('party_size > 0', name='check_booking_party_size_positive'),
        db.CheckConstraint('total_price >= 0', name='check_booking_price_non_negative'),
    )

    @property
    def time_range(self):
        return TimeRange(self.start_time, self.end_time)

    def effective_status(self, now):
        """Stored status, except that a confirmed booking reads as completed once it has ended."""
        return effective_status(self.status, self.end_time, now)

    def to_dict(self, now=None):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'room_id': self.room_id,
            'start_time': isoformat_utc(self.start_time),
            'end_time': isoformat_utc(self.end_time),
            'party_size': self.party_size,
            'total_price': self.total_price,
            'status': self.effective_status(now) if now is not None else self.status,
            'created_at': isoformat_utc(self.created_at)
        }
