"""Payments app package.

Holds the payment record shared by the bookings of one checkout, the
Stripe integration (checkout sessions and webhook intake) and the
settlement reconciler that applies provider outcomes to bookings and
payments exactly once.
"""
