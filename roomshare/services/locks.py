import threading
from contextlib import contextmanager


class RoomLocks:
    """
    One lock per room id, so "check conflicts then insert" runs as a single
    unit for a given room while other rooms proceed in parallel.

    This only serializes requests inside one process. Across processes the
    booking service also takes a row lock on the room (SELECT ... FOR UPDATE).
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def for_room(self, room_id) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, room_id):
        with self.for_room(room_id):
            yield


room_locks = RoomLocks()
