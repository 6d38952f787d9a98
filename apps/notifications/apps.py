from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"
    verbose_name = "Notifications"

    def ready(self):
        from apps.bookings.domain.events import BookingsConfirmed
        from shared.application.message_bus import message_bus

        from .handlers import on_bookings_confirmed

        message_bus.register_event_handler(BookingsConfirmed, on_bookings_confirmed)
