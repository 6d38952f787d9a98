"""Notification services for booking confirmation emails."""

from __future__ import annotations

import logging
from typing import Iterable

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    html_message: str,
) -> bool:
    """
    Send one email through Django's mail backend.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        html_message: HTML body; the plain text part is derived from it

    Returns:
        bool: True if the backend accepted the message
    """
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def booking_summary(booking) -> dict:
    return {
        "booking_id": str(booking.pk),
        "hotel_name": booking.hotel.name,
        "hotel_address": f"{booking.hotel.address}, {booking.hotel.city}",
        "room_type": booking.room.get_room_type_display(),
        "check_in": booking.check_in.strftime("%d %B %Y"),
        "check_out": booking.check_out.strftime("%d %B %Y"),
        "number_of_guests": booking.number_of_guests,
        "total_price": f"{booking.total_price:.2f} {booking.currency}",
    }


def render_confirmation_html(customer_name: str, summaries: list[dict]) -> str:
    parts = [
        f"<h1>Hello, {escape(customer_name)}!</h1>",
        "<p>Your payment was processed and your booking is confirmed. Thank you for choosing us!</p>",
        "<h2>Booking details</h2>",
    ]
    for summary in summaries:
        parts.append(
            "<div>"
            f"<p><strong>Hotel:</strong> {escape(summary['hotel_name'])}</p>"
            f"<p><strong>Location:</strong> {escape(summary['hotel_address'])}</p>"
            f"<p><strong>Room:</strong> {escape(summary['room_type'])}</p>"
            f"<p><strong>Check-in:</strong> {summary['check_in']}</p>"
            f"<p><strong>Check-out:</strong> {summary['check_out']}</p>"
            f"<p><strong>Guests:</strong> {summary['number_of_guests']}</p>"
            f"<p><strong>Total price:</strong> {summary['total_price']}</p>"
            f"<p><small>Booking {summary['booking_id']}</small></p>"
            "</div>"
        )
    return "<html><body>" + "".join(parts) + "</body></html>"


def send_booking_confirmation(booking_ids: Iterable) -> bool:
    """
    Email the guest a confirmation for freshly confirmed bookings.

    Only CONFIRMED bookings not yet notified are included. On success
    confirmation_email_sent is set with a separate update; on failure
    nothing is written and the error is only logged.
    """
    from apps.bookings.models import Booking

    booking_ids = [str(booking_id) for booking_id in booking_ids]
    bookings = list(
        Booking.objects.filter(
            pk__in=booking_ids,
            status=Booking.Status.CONFIRMED,
            confirmation_email_sent=False,
        )
        .select_related("user", "hotel", "room")
        .order_by("check_in")
    )
    if not bookings:
        logger.warning(f"No confirmed bookings awaiting a confirmation email: {booking_ids}")
        return False

    user = bookings[0].user
    if not user.email:
        logger.error(f"User {user.pk} has no email; confirmation for {booking_ids} not sent")
        return False

    customer_name = user.get_full_name() or user.get_username() or "Guest"
    summaries = [booking_summary(booking) for booking in bookings]

    sent = send_email_notification(
        recipient_email=user.email,
        subject="Your hotel booking is confirmed",
        html_message=render_confirmation_html(customer_name, summaries),
    )
    if not sent:
        return False

    updated = Booking.objects.filter(pk__in=[booking.pk for booking in bookings]).update(
        confirmation_email_sent=True
    )
    logger.info(f"Confirmation email sent to {user.email} for {updated} booking(s)")
    return True
