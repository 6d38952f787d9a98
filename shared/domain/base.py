"""
Domain building blocks shared by the booking and payment contexts.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable, identity-free, equal when all attributes are equal."""


@dataclass
class DomainEvent:
    """
    Something that happened to bookings or payments

    Subclasses add their own fields. event_id and occurred_at are set
    on creation and are not constructor arguments.
    """
    event_id: UUID = field(default_factory=uuid4, init=False)
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )

    @property
    def name(self) -> str:
        return type(self).__name__
