import pytest
from types import SimpleNamespace
from roomshare import create_app, db
from roomshare.config import TestingConfig
from roomshare.models import User, Room, RoomStatus
from roomshare.services.booking_service import get_booking_service
from roomshare.services.review_service import get_review_service
from roomshare.utils.clock import FixedClock
from tests.helpers import NOW

@pytest.fixture
def clock():
    return FixedClock(NOW)

@pytest.fixture
def app(clock):
    app = create_app(TestingConfig, clock=clock)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def service(app):
    return get_booking_service()

@pytest.fixture
def reviews(app):
    return get_review_service()

def make_user(username, role):
    user = User(username=username, email=f'{username}@test.com', role=role)
    user.set_password('password')
    db.session.add(user)
    return user

@pytest.fixture
def init_data(app):
    admin = make_user('admin', User.ADMIN)
    owner = make_user('owner', User.OWNER)
    other_owner = make_user('other_owner', User.OWNER)
    alice = make_user('alice', User.CLIENT)
    bob = make_user('bob', User.CLIENT)
    db.session.flush()

    room = Room(owner_id=owner.id, title='Salle Alpha', description='Meeting room', city='Paris',
                capacity=10, rate_amount=20, rate_unit='hour', status=RoomStatus.APPROVED)
    pending_room = Room(owner_id=owner.id, title='Salle Beta', description='Not moderated yet', city='Lyon',
                        capacity=4, rate_amount=100, rate_unit='day', status=RoomStatus.PENDING)
    db.session.add_all([room, pending_room])
    db.session.commit()

    return SimpleNamespace(admin=admin, owner=owner, other_owner=other_owner, alice=alice, bob=bob,
                           room=room, pending_room=pending_room)
