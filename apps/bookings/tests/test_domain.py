import pytest

from apps.bookings.domain.entities import (
    ACTIVE_STATUSES,
    CANCELLABLE_STATUSES,
    BookingStatus,
    PaymentStatus,
)
from apps.bookings.domain.errors import (
    AUTHORIZATION,
    CONFLICT,
    InsufficientInventory,
    InvalidDateRange,
    Forbidden,
)
from apps.bookings.domain.inventory import InventoryEntry, can_accommodate


def test_can_accommodate_is_inclusive_of_the_allowance():
    entry = InventoryEntry(hotel_id=1, room_type="SUITE", allowed_count=2)
    assert can_accommodate(entry, 0, 2)
    assert can_accommodate(entry, 1, 1)
    assert not can_accommodate(entry, 2, 1)
    assert not can_accommodate(entry, 0, 3)


def test_inventory_entry_rejects_negative_allowance():
    with pytest.raises(ValueError):
        InventoryEntry(hotel_id=1, room_type="SUITE", allowed_count=-1)


def test_booking_state_machine():
    assert BookingStatus.PENDING.can_transition_to(BookingStatus.CONFIRMED)
    assert BookingStatus.PENDING.can_transition_to(BookingStatus.REJECTED)
    assert BookingStatus.PENDING.can_transition_to(BookingStatus.CANCELLED)
    assert BookingStatus.CONFIRMED.can_transition_to(BookingStatus.COMPLETED)
    assert not BookingStatus.CONFIRMED.can_transition_to(BookingStatus.REJECTED)
    assert not BookingStatus.CONFIRMED.can_transition_to(BookingStatus.PENDING)


@pytest.mark.parametrize(
    "status",
    [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.REJECTED],
)
def test_terminal_booking_states_allow_no_transition(status):
    assert status.is_terminal
    assert not any(status.can_transition_to(target) for target in BookingStatus)


def test_cancellable_and_active_states():
    assert set(CANCELLABLE_STATUSES) == {BookingStatus.PENDING, BookingStatus.CONFIRMED}
    assert set(ACTIVE_STATUSES) == {BookingStatus.PENDING, BookingStatus.CONFIRMED}


def test_payment_outcomes_are_final():
    assert not PaymentStatus.PENDING.is_terminal
    assert PaymentStatus.SUCCEEDED.is_terminal
    assert PaymentStatus.FAILED.is_terminal


def test_errors_carry_code_and_category():
    error = InsufficientInventory()
    assert error.category == CONFLICT
    assert error.to_dict() == {
        "code": "insufficient_inventory",
        "message": "Not enough rooms of this type are available.",
    }
    assert Forbidden().category == AUTHORIZATION
    assert InvalidDateRange(field="check_out").to_dict()["field"] == "check_out"
