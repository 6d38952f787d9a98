import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("hotel_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Release checkouts that were never paid - every 5 minutes
    "release-abandoned-checkouts": {
        "task": "bookings.release_abandoned_checkouts",
        "schedule": 300.0,
        "options": {"expires": 240},
    },
    # Close stays after check-out - daily at 03:00
    "complete-finished-stays": {
        "task": "bookings.complete_finished_stays",
        "schedule": crontab(minute=0, hour=3),
    },
}

app.conf.timezone = "UTC"
