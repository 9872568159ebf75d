import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from roomshare.errors import (
    DuplicateReviewError, NotAuthorizedError, NotFoundError, ReviewNotAllowedError, ValidationError,
)
from roomshare.extensions import db
from roomshare.models import Booking, Review, Room

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 1000


def get_review_service() -> 'ReviewService':
    return current_app.extensions['review_service']


def aggregate_ratings(ratings):
    """(average, count) over all ratings, (0, 0) when there are none."""
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    return sum(ratings) / len(ratings), len(ratings)


class ReviewService:
    """Reviews gated by booking eligibility. The room's rating is always recomputed in full."""

    def __init__(self, booking_service):
        self.bookings = booking_service

    @staticmethod
    def validate(rating, comment):
        if isinstance(rating, bool):
            raise ValidationError('Rating must be an integer from 1 to 5.', field='rating')
        try:
            rating = int(rating)
        except (TypeError, ValueError):
            raise ValidationError('Rating must be an integer from 1 to 5.', field='rating')
        if rating < 1 or rating > 5:
            raise ValidationError('Rating must be an integer from 1 to 5.', field='rating')

        comment = (comment or '').strip()
        if not comment:
            raise ValidationError('A comment is required.', field='comment')
        if len(comment) > COMMENT_MAX_LENGTH:
            raise ValidationError(f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters.", field='comment')
        return rating, comment

    @staticmethod
    def recompute_room_rating(room_id):
        room = db.session.get(Room, room_id)
        if room is None:
            return None
        ratings = [r for (r,) in db.session.query(Review.rating).filter(Review.room_id == room_id)]
        room.rating_average, room.review_count = aggregate_ratings(ratings)
        logger.info("Room %s rating recomputed: %.2f over %d reviews",
                    room_id, room.rating_average, room.review_count)
        return room

    def create_review(self, booking_id, client, rating, comment):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError('Booking not found.')
        if client is None or booking.client_id != client.id:
            raise NotAuthorizedError('You can only review your own bookings.')
        if Review.query.filter_by(booking_id=booking.id).first() is not None:
            raise DuplicateReviewError()
        if not self.bookings.review_eligibility(booking, client):
            raise ReviewNotAllowedError("You can only review a booking once it is completed.")

        rating, comment = self.validate(rating, comment)
        review = Review(
            room_id=booking.room_id,
            client_id=client.id,
            booking_id=booking.id,
            rating=rating,
            comment=comment
        )
        try:
            db.session.add(review)
            db.session.flush()
            self.recompute_room_rating(booking.room_id)
            db.session.commit()
        except IntegrityError:
            # Lost a race against another review of the same booking
            db.session.rollback()
            raise DuplicateReviewError()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Review %s created for booking %s by user %s", review.id, booking.id, client.id)
        return review

    def update_review(self, review_id, actor, rating=None, comment=None):
        review = self._get_review(review_id)
        if not (actor.is_admin or actor.id == review.client_id):
            raise NotAuthorizedError('Not allowed to modify this review.')

        review.rating, review.comment = self.validate(
            review.rating if rating is None else rating,
            review.comment if comment is None else comment
        )
        try:
            db.session.flush()
            self.recompute_room_rating(review.room_id)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return review

    def delete_review(self, review_id, actor):
        review = self._get_review(review_id)
        if not (actor.is_admin or actor.id == review.client_id):
            raise NotAuthorizedError('Not allowed to delete this review.')

        room_id = review.room_id
        try:
            db.session.delete(review)
            db.session.flush()
            self.recompute_room_rating(room_id)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Review %s deleted by user %s", review_id, actor.id)

    @staticmethod
    def list_room_reviews(room_id):
        return Review.query.filter_by(room_id=room_id).order_by(Review.created_at.desc()).all()

    @staticmethod
    def list_owner_reviews(owner_id):
        return Review.query.join(Room).filter(Room.owner_id == owner_id) \
            .order_by(Review.created_at.desc()).all()

    @staticmethod
    def list_all_reviews():
        return Review.query.order_by(Review.created_at.desc()).all()

    @staticmethod
    def _get_review(review_id):
        review = db.session.get(Review, review_id)
        if not review:
            raise NotFoundError('Review not found.')
        return review
