"""
Double-booking protection: creation holds a per-room lock around
"check conflicts then insert", so racing requests for the same slot
cannot both succeed.
"""
import threading
import pytest
from roomshare import create_app, db
from roomshare.config import TestingConfig
from roomshare.errors import BookingConflictError
from roomshare.models import Booking, User, Room, RoomStatus
from roomshare.services.booking_service import get_booking_service
from roomshare.services.locks import RoomLocks
from roomshare.utils.clock import FixedClock
from tests.helpers import NOW, at

@pytest.fixture
def file_app(tmp_path):
    # Threads need their own connections, which an in-memory database cannot share
    config = type('FileConfig', (TestingConfig,), {
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'race.db'}"
    })
    app = create_app(config, clock=FixedClock(NOW))
    with app.app_context():
        db.create_all()
        owner = User(username='owner', email='owner@test.com', role=User.OWNER)
        clients = [User(username=f'client{i}', email=f'client{i}@test.com', role=User.CLIENT) for i in range(2)]
        db.session.add_all([owner] + clients)
        db.session.flush()
        room = Room(owner_id=owner.id, title='Race Room', capacity=5, rate_amount=10,
                    rate_unit='hour', status=RoomStatus.APPROVED)
        db.session.add(room)
        db.session.commit()
        ids = {'room': room.id, 'clients': [c.id for c in clients]}
    yield app, ids
    with app.app_context():
        db.session.remove()
        db.drop_all()

def test_identical_concurrent_requests_book_once(file_app):
    app, ids = file_app
    barrier = threading.Barrier(len(ids['clients']))
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt(client_id):
        with app.app_context():
            client = db.session.get(User, client_id)
            barrier.wait()
            try:
                booking = get_booking_service().create_booking(ids['room'], client, at(10), at(12), 2)
                result = ('ok', booking.id)
            except BookingConflictError as e:
                result = ('conflict', e.conflicting_ids)
            finally:
                db.session.remove()
            with outcomes_lock:
                outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(cid,)) for cid in ids['clients']]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    kinds = sorted(kind for kind, _ in outcomes)
    assert kinds == ['conflict', 'ok']

    winner_id = next(value for kind, value in outcomes if kind == 'ok')
    loser_ids = next(value for kind, value in outcomes if kind == 'conflict')
    assert loser_ids == [winner_id]

    with app.app_context():
        assert Booking.query.filter_by(room_id=ids['room']).count() == 1

def test_creation_runs_under_the_room_lock(app, init_data):
    held = []

    class RecordingLocks(RoomLocks):
        def hold(self, room_id):
            held.append(room_id)
            return super().hold(room_id)

    from roomshare.services.booking_service import BookingService
    service = BookingService(clock=FixedClock(NOW), locks=RecordingLocks())
    service.create_booking(init_data.room.id, init_data.alice, at(10), at(11), 1)
    assert held == [init_data.room.id]

def test_room_locks_are_per_room():
    locks = RoomLocks()
    assert locks.for_room(1) is locks.for_room(1)
    assert locks.for_room(1) is not locks.for_room(2)

    with locks.hold(1):
        assert locks.for_room(1).locked()
        assert not locks.for_room(2).locked()
    assert not locks.for_room(1).locked()

def test_unknown_room_takes_no_lock(app, init_data):
    held = []

    class RecordingLocks(RoomLocks):
        def hold(self, room_id):
            held.append(room_id)
            return super().hold(room_id)

    from roomshare.errors import NotFoundError
    from roomshare.services.booking_service import BookingService
    locks = RecordingLocks()
    service = BookingService(clock=FixedClock(NOW), locks=locks)
    for room_id in (404, 405, 406):
        with pytest.raises(NotFoundError):
            service.create_booking(room_id, init_data.alice, at(10), at(11), 1)
    assert held == []
    assert locks._locks == {}
