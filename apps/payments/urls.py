"""URL routing for the payments domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import CheckoutSessionBookingsView, PaymentCheckoutView, stripe_webhook

urlpatterns = [
    path("webhook/stripe/", stripe_webhook, name="stripe-webhook"),
    path("<uuid:pk>/checkout/", PaymentCheckoutView.as_view(), name="payment-checkout"),
    path(
        "checkout-sessions/<str:session_id>/",
        CheckoutSessionBookingsView.as_view(),
        name="checkout-session-bookings",
    ),
]
