from roomshare.extensions import db
from roomshare.models.base import utcnow, isoformat_utc

class Review(db.Model):
    __tablename__ = 'reviews'

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False, index=True)
    client_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    # At most one review per booking
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, unique=True)

    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)

    room = db.relationship('Room', backref=db.backref('reviews', lazy=True))
    client = db.relationship('User', backref=db.backref('reviews', lazy=True))
    booking = db.relationship('Booking', backref=db.backref('review', uselist=False))

    __table_args__ = (
        db.CheckConstraint('rating >= 1 AND rating <= 5', name='check_review_rating_range'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'client_id': self.client_id,
            'client': self.client.username if self.client else None,
            'booking_id': self.booking_id,
            'rating': self.rating,
            'comment': self.comment,
            'created_at': isoformat_utc(self.created_at)
        }
