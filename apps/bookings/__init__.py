"""Bookings: provisional reservations against the hotel inventory,
their cancellation and the periodic release of unpaid checkouts."""
