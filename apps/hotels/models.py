"""Room catalog and inventory ledger models."""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.inventory import InventoryEntry, can_accommodate


class RoomType(models.TextChoices):
    STANDARD_SINGLE = "STANDARD_SINGLE", _("Standard single")
    STANDARD_DOUBLE = "STANDARD_DOUBLE", _("Standard double")
    DELUXE_KING = "DELUXE_KING", _("Deluxe king")
    DELUXE_QUEEN = "DELUXE_QUEEN", _("Deluxe queen")
    SUITE = "SUITE", _("Suite")


class Hotel(models.Model):
    """A hotel listed on the site."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hotel")
        verbose_name_plural = _("Hotels")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"


class RoomInventory(models.Model):
    """How many rooms of one type a hotel may offer."""

    hotel = models.ForeignKey(
        Hotel,
        on_delete=models.CASCADE,
        related_name="room_inventories",
    )
    room_type = models.CharField(max_length=32, choices=RoomType.choices)
    allowed_count = models.PositiveIntegerField(
        help_text=_("Maximum number of rooms of this type."),
    )

    class Meta:
        verbose_name = _("Room inventory")
        verbose_name_plural = _("Room inventories")
        constraints = [
            models.UniqueConstraint(
                fields=["hotel", "room_type"],
                name="hotel_roomtype_inventory_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.hotel_id}/{self.room_type}: {self.allowed_count}"

    def to_entry(self) -> InventoryEntry:
        return InventoryEntry(
            hotel_id=self.hotel_id,
            room_type=self.room_type,
            allowed_count=self.allowed_count,
        )


class Room(models.Model):
    """A concrete bookable room drawn from the hotel's inventory."""

    hotel = models.ForeignKey(
        Hotel,
        on_delete=models.CASCADE,
        related_name="rooms",
    )
    room_type = models.CharField(max_length=32, choices=RoomType.choices)
    description = models.TextField(blank=True)
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    capacity = models.PositiveSmallIntegerField(default=1)
    beds = models.PositiveSmallIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["hotel", "room_type", "price_per_night"]
        indexes = [
            models.Index(fields=["hotel", "room_type"], name="hotels_room_hotel_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_room_type_display()} #{self.pk} at {self.hotel_id}"

    def clean(self) -> None:
        # Only new rooms consume inventory; edits of existing rooms keep their slot.
        if not self._state.adding or not self.hotel_id or not self.room_type:
            return
        entry = RoomInventory.objects.filter(hotel_id=self.hotel_id, room_type=self.room_type).first()
        if entry is None:
            raise ValidationError(
                _("No inventory is defined for this room type at this hotel.")
            )
        existing = Room.objects.filter(hotel_id=self.hotel_id, room_type=self.room_type).count()
        if not can_accommodate(entry.to_entry(), existing, 1):
            raise ValidationError(
                _("Inventory limit of %(limit)s rooms reached for this room type."),
                params={"limit": entry.allowed_count},
            )
