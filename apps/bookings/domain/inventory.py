"""
Inventory Ledger

A hotel declares, per room type, how many rooms it may offer. The same
allowance bounds two things:

- how many Room records hotel administration may create for the type
- how many rooms of the type can be held by active bookings at once

Both checks go through can_accommodate(). Callers are responsible for
counting what is already materialized and for holding the row lock on
the ledger entry while they do so.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InventoryEntry:
    """Allowance for one (hotel, room type) pair"""
    hotel_id: int
    room_type: str
    allowed_count: int

    def __post_init__(self):
        if self.allowed_count < 0:
            raise ValueError("Allowed count cannot be negative")

    def remaining(self, already_materialized: int) -> int:
        return max(self.allowed_count - already_materialized, 0)


def can_accommodate(entry: InventoryEntry, already_materialized: int, requested: int) -> bool:
    """True if `requested` more units still fit within the allowance"""
    return already_materialized + requested <= entry.allowed_count
