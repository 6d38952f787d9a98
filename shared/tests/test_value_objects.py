from datetime import date, datetime
from decimal import Decimal

import pytest

from shared.domain.value_objects import DateRange, Money, nights_between


def test_money_is_quantized_to_cents():
    assert Money(Decimal("10.005")).amount == Decimal("10.01")
    assert Money("19.9").amount == Decimal("19.90")


def test_money_multiplication_has_no_float_drift():
    nightly = Money(Decimal("33.33"))
    total = nightly * 3 * 7
    assert total.amount == Decimal("699.93")
    assert total.minor_units == 69993


def test_money_rejects_floats_as_factor_and_bools():
    with pytest.raises(TypeError):
        Money(Decimal("1")) * 1.5
    with pytest.raises(TypeError):
        Money(Decimal("1")) * True


def test_money_rejects_negative_and_non_finite_amounts():
    with pytest.raises(ValueError):
        Money(Decimal("-1"))
    with pytest.raises(ValueError):
        Money(Decimal("NaN"))
    with pytest.raises(ValueError):
        Money(Decimal("Infinity"))


def test_money_addition_requires_same_currency():
    assert (Money("1.50") + Money("2.25")).amount == Decimal("3.75")
    with pytest.raises(ValueError):
        Money("1", "USD") + Money("1", "EUR")


def test_nights_between_dates_and_datetimes():
    assert nights_between(date(2024, 6, 1), date(2024, 6, 4)) == 3
    assert nights_between(date(2024, 6, 1), date(2024, 6, 1)) == 0
    # partial days round up
    assert nights_between(datetime(2024, 6, 1, 14), datetime(2024, 6, 2, 16)) == 2


def test_date_range_overlap_is_half_open():
    june = DateRange(date(2024, 6, 1), date(2024, 6, 4))
    assert june.overlaps_with(DateRange(date(2024, 6, 3), date(2024, 6, 5)))
    assert not june.overlaps_with(DateRange(date(2024, 6, 4), date(2024, 6, 6)))
    assert len(june) == 3


def test_date_range_requires_start_before_end():
    with pytest.raises(ValueError):
        DateRange(date(2024, 6, 1), date(2024, 6, 1))
