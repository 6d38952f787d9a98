"""Admin registration for hotels, inventory and rooms."""

from __future__ import annotations

from django.contrib import admin

from .models import Hotel, Room, RoomInventory


class RoomInventoryInline(admin.TabularInline):
    model = RoomInventory
    extra = 0


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "country", "created_at")
    search_fields = ("name", "city")
    inlines = [RoomInventoryInline]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "hotel", "room_type", "price_per_night", "capacity")
    list_filter = ("room_type", "hotel")
    search_fields = ("hotel__name",)
