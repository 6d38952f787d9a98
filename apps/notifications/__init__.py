"""Notifications app package.

Sends booking confirmation emails after a payment settles. Delivery runs
in a Celery task triggered by the BookingsConfirmed domain event and
never affects booking or payment state.
"""
