"""
Common Value Objects

Value objects used across the booking and payment contexts:
- Money: fixed-point monetary amount with currency
- DateRange: a stay from check-in (inclusive) to check-out (exclusive)
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from shared.domain.base import ValueObject

CENT = Decimal('0.01')
SUPPORTED_CURRENCIES = ('USD', 'EUR', 'GBP', 'MXN')
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are Decimals quantized to cents, so repeated multiplication
    (price per night * nights * rooms) never accumulates float drift.
    """
    amount: Decimal
    currency: str = 'USD'

    def __post_init__(self):
        try:
            amount = Decimal(str(self.amount)) if not isinstance(self.amount, Decimal) else self.amount
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {self.amount!r}")
        if not amount.is_finite():
            raise ValueError(f"Amount must be finite, got {amount}")
        if amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")
        object.__setattr__(self, 'amount', amount.quantize(CENT, rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls, currency: str = 'USD') -> 'Money':
        return cls(Decimal('0'), currency)

    @property
    def minor_units(self) -> int:
        """Amount in cents, as payment providers expect it"""
        return int((self.amount * 100).to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> 'Money':
        """Multiply by a whole quantity (nights, rooms)"""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by an integer or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    __rmul__ = __mul__

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


def nights_between(start, end) -> int:
    """
    Number of nights between two dates or datetimes, rounded up

    Partial days count as a full night.
    """
    if isinstance(start, datetime) or isinstance(end, datetime):
        start_dt = start if isinstance(start, datetime) else datetime(start.year, start.month, start.day)
        end_dt = end if isinstance(end, datetime) else datetime(end.year, end.month, end.day)
        return math.ceil((end_dt - start_dt).total_seconds() / SECONDS_PER_DAY)
    return (end - start).days


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Adjacent ranges do not overlap: checking out on the 4th and
        checking in on the 4th is allowed.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    @property
    def nights(self) -> int:
        return nights_between(self.start_date, self.end_date)

    def __len__(self) -> int:
        return self.nights

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
