"""Celery tasks for notifications."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from .services import send_booking_confirmation


@shared_task(name="notifications.send_booking_confirmation")
def send_booking_confirmation_task(booking_ids: list[str]) -> bool:
    return send_booking_confirmation(booking_ids)
