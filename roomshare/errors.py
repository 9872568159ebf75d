"""
Domain errors raised by the services.

Every error carries the HTTP status the API layer answers with, so routes can
let them propagate to the app-level error handler.
"""


class RoomshareError(Exception):
    status_code = 400
    default_message = 'Request could not be processed.'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        payload = {'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(RoomshareError):
    default_message = 'Invalid input.'


class InvalidRangeError(ValidationError):
    default_message = 'End time must be after start time.'


class InvalidRateUnitError(ValidationError):
    default_message = 'Unknown rate unit.'

    def __init__(self, unit):
        super().__init__(f"Unknown rate unit: {unit!r}.", unit=unit)


class RoomNotApprovedError(RoomshareError):
    default_message = 'This room is not approved or not available for booking.'


class CapacityExceededError(RoomshareError):

    def __init__(self, capacity, party_size):
        super().__init__(
            f"Room capacity error: Room holds {capacity}, requested {party_size}.",
            capacity=capacity,
            party_size=party_size,
        )


class BookingConflictError(RoomshareError):
    status_code = 409

    def __init__(self, conflicting_ids):
        self.conflicting_ids = list(conflicting_ids)
        super().__init__(
            'Room is already booked for this interval.',
            conflicting_ids=self.conflicting_ids,
        )


class InvalidTransitionError(RoomshareError):
    status_code = 409

    def __init__(self, current, target, reason=None):
        self.current = current
        self.target = target
        message = f"Cannot move booking from '{current}' to '{target}'."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, current=current, target=target)


class ReviewNotAllowedError(RoomshareError):
    default_message = 'Reviews can only be left for your own completed bookings.'


class DuplicateReviewError(RoomshareError):
    status_code = 409
    default_message = 'A review already exists for this booking.'


class RoomInUseError(RoomshareError):
    status_code = 409
    default_message = 'Room still has active bookings.'


class AuthenticationError(RoomshareError):
    status_code = 401
    default_message = 'Invalid credentials.'


class NotAuthorizedError(RoomshareError):
    status_code = 403
    default_message = 'Unauthorized.'


class NotFoundError(RoomshareError):
    status_code = 404
    default_message = 'Not found.'
