from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


ROOM_TYPE_CHOICES = [
    ("STANDARD_SINGLE", "Standard single"),
    ("STANDARD_DOUBLE", "Standard double"),
    ("DELUXE_KING", "Deluxe king"),
    ("DELUXE_QUEEN", "Deluxe queen"),
    ("SUITE", "Suite"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Hotel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("address", models.CharField(max_length=255)),
                ("city", models.CharField(max_length=100)),
                ("country", models.CharField(max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Hotel",
                "verbose_name_plural": "Hotels",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("room_type", models.CharField(choices=ROOM_TYPE_CHOICES, max_length=32)),
                ("description", models.TextField(blank=True)),
                (
                    "price_per_night",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("capacity", models.PositiveSmallIntegerField(default=1)),
                ("beds", models.PositiveSmallIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "hotel",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rooms",
                        to="hotels.hotel",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["hotel", "room_type", "price_per_night"],
                "indexes": [models.Index(fields=["hotel", "room_type"], name="hotels_room_hotel_type_idx")],
            },
        ),
        migrations.CreateModel(
            name="RoomInventory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("room_type", models.CharField(choices=ROOM_TYPE_CHOICES, max_length=32)),
                ("allowed_count", models.PositiveIntegerField(help_text="Maximum number of rooms of this type.")),
                (
                    "hotel",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="room_inventories",
                        to="hotels.hotel",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room inventory",
                "verbose_name_plural": "Room inventories",
                "constraints": [
                    models.UniqueConstraint(fields=("hotel", "room_type"), name="hotel_roomtype_inventory_unique")
                ],
            },
        ),
    ]
