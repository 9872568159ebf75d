from roomshare.models.user import User
from roomshare.models.room import Room, RoomStatus
from roomshare.models.booking import Booking
from roomshare.models.review import Review

__all__ = ["User", "Room", "RoomStatus", "Booking", "Review"]
