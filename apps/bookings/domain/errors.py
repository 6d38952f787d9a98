"""
Booking Errors

Every expected failure of the booking operations has its own type. The
command handlers catch BookingError and return it inside a result
object, so callers branch on `error.code` instead of exception handling.
Infrastructure errors (database, provider API) are not BookingErrors and
propagate normally.
"""

VALIDATION = 'validation'
CONFLICT = 'conflict'
NOT_FOUND = 'not_found'
AUTHORIZATION = 'authorization'
AUTHENTICATION = 'authentication'
STATE = 'state'


class BookingError(Exception):
    """Base class for expected booking failures"""
    code = 'booking_error'
    category = VALIDATION
    default_message = 'Booking request failed.'

    def __init__(self, message: str | None = None, *, field: str | None = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        data = {'code': self.code, 'message': self.message}
        if self.field:
            data['field'] = self.field
        return data


# ===== Validation =====

class InvalidBookingRequest(BookingError):
    code = 'invalid_request'
    default_message = 'Number of guests and number of rooms must be positive.'


class InvalidDateRange(BookingError):
    code = 'invalid_date_range'
    default_message = 'Check-out date must be after check-in date.'


class ZeroNightStay(BookingError):
    code = 'zero_night_stay'
    default_message = 'The stay must be at least one night.'


class CapacityExceeded(BookingError):
    code = 'capacity_exceeded'
    default_message = 'Number of guests exceeds the room capacity.'


class PriceComputationError(BookingError):
    code = 'price_computation_error'
    default_message = 'Could not compute the total price for this stay.'


# ===== Not found =====

class RoomNotFound(BookingError):
    code = 'room_not_found'
    category = NOT_FOUND
    default_message = 'Selected room was not found.'


class BookingNotFound(BookingError):
    code = 'booking_not_found'
    category = NOT_FOUND
    default_message = 'Booking not found.'


# ===== Conflicts =====

class RoomHotelMismatch(BookingError):
    code = 'room_hotel_mismatch'
    category = CONFLICT
    default_message = 'Selected room does not belong to this hotel.'


class InsufficientInventory(BookingError):
    code = 'insufficient_inventory'
    category = CONFLICT
    default_message = 'Not enough rooms of this type are available.'


# ===== Authorization =====

class Unauthenticated(BookingError):
    code = 'unauthenticated'
    category = AUTHENTICATION
    default_message = 'Authentication required.'


class Forbidden(BookingError):
    code = 'forbidden'
    category = AUTHORIZATION
    default_message = 'You do not have permission to change this booking.'


# ===== State =====

class InvalidStateForCancellation(BookingError):
    code = 'invalid_state_for_cancellation'
    category = STATE
    default_message = 'Booking cannot be cancelled in its current state.'


class InvalidStateForModification(BookingError):
    code = 'invalid_state_for_modification'
    category = STATE
    default_message = 'Booking cannot be modified in its current state.'
