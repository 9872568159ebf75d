import pytest
from roomshare import db
from roomshare.errors import (
    DuplicateReviewError, NotAuthorizedError, NotFoundError, ReviewNotAllowedError, ValidationError,
)
from roomshare.models import Room
from roomshare.services.review_service import aggregate_ratings
from tests.helpers import at

@pytest.fixture
def finished(service, clock, init_data):
    """Two bookings by alice and one by bob, all ended."""
    bookings = [
        service.create_booking(init_data.room.id, init_data.alice, at(10), at(11), 2),
        service.create_booking(init_data.room.id, init_data.alice, at(12), at(13), 2),
        service.create_booking(init_data.room.id, init_data.bob, at(14), at(15), 2),
    ]
    clock.set(at(16))
    return bookings

def room_rating(room_id):
    room = db.session.get(Room, room_id)
    return room.rating_average, room.review_count

def test_aggregate_ratings():
    assert aggregate_ratings([]) == (0.0, 0)
    assert aggregate_ratings([4, 5, 3]) == (4.0, 3)

def test_review_after_completed_booking(reviews, init_data, finished):
    review = reviews.create_review(finished[0].id, init_data.alice, 4, '  Nice place  ')
    assert review.comment == 'Nice place'
    assert review.room_id == init_data.room.id
    assert room_rating(init_data.room.id) == (4.0, 1)

def test_review_before_end_is_refused(service, reviews, init_data):
    booking = service.create_booking(init_data.room.id, init_data.alice, at(10), at(11), 2)
    with pytest.raises(ReviewNotAllowedError):
        reviews.create_review(booking.id, init_data.alice, 5, 'Too early')

def test_only_the_client_can_review(reviews, init_data, finished):
    with pytest.raises(NotAuthorizedError):
        reviews.create_review(finished[0].id, init_data.bob, 5, 'Not mine')

def test_one_review_per_booking(reviews, init_data, finished):
    reviews.create_review(finished[0].id, init_data.alice, 5, 'Great')
    with pytest.raises(DuplicateReviewError):
        reviews.create_review(finished[0].id, init_data.alice, 1, 'Changed my mind')
    assert room_rating(init_data.room.id) == (5.0, 1)

def test_unknown_booking(reviews, init_data):
    with pytest.raises(NotFoundError):
        reviews.create_review(404, init_data.alice, 5, 'Ghost')

@pytest.mark.parametrize("rating, comment", [
    (0, 'ok'), (6, 'ok'), ('five', 'ok'), (True, 'ok'), (3, ''), (3, 'x' * 1001),
])
def test_review_validation(reviews, init_data, finished, rating, comment):
    with pytest.raises(ValidationError):
        reviews.create_review(finished[0].id, init_data.alice, rating, comment)
    assert room_rating(init_data.room.id) == (0, 0)

def test_rating_is_recomputed_on_every_change(reviews, init_data, finished):
    first = reviews.create_review(finished[0].id, init_data.alice, 5, 'Great')
    second = reviews.create_review(finished[1].id, init_data.alice, 3, 'Fine')
    bobs = reviews.create_review(finished[2].id, init_data.bob, 1, 'Noisy')
    assert room_rating(init_data.room.id) == (3.0, 3)

    reviews.update_review(bobs.id, init_data.bob, rating=4)
    assert room_rating(init_data.room.id) == (4.0, 3)

    reviews.delete_review(first.id, init_data.alice)
    assert room_rating(init_data.room.id) == (3.5, 2)

    reviews.delete_review(second.id, init_data.admin)
    reviews.delete_review(bobs.id, init_data.bob)
    assert room_rating(init_data.room.id) == (0.0, 0)

def test_review_edit_permissions(reviews, init_data, finished):
    review = reviews.create_review(finished[0].id, init_data.alice, 5, 'Great')
    with pytest.raises(NotAuthorizedError):
        reviews.update_review(review.id, init_data.bob, rating=1)
    with pytest.raises(NotAuthorizedError):
        reviews.delete_review(review.id, init_data.owner)

    updated = reviews.update_review(review.id, init_data.admin, comment='Moderated')
    assert updated.comment == 'Moderated'
    assert updated.rating == 5

def test_review_listings(reviews, init_data, finished):
    reviews.create_review(finished[0].id, init_data.alice, 5, 'Great')
    reviews.create_review(finished[2].id, init_data.bob, 2, 'Meh')

    assert len(reviews.list_room_reviews(init_data.room.id)) == 2
    assert len(reviews.list_owner_reviews(init_data.owner.id)) == 2
    assert reviews.list_owner_reviews(init_data.other_owner.id) == []
    assert len(reviews.list_all_reviews()) == 2
