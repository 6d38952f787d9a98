import json
import uuid

import pytest

from apps.payments.application.settlement import SettlementOutcome
from apps.payments.stripe_service import (
    CorrelationDataInvalid,
    booking_ids_from_metadata,
    settlement_event_from_stripe,
)

BOOKING_ID = str(uuid.uuid4())


def stripe_event(event_type, **obj):
    return {"id": "evt_1", "type": event_type, "data": {"object": obj}}


def metadata(*ids):
    return {"bookingIds": json.dumps(list(ids))}


def test_paid_checkout_session_is_a_success():
    event = stripe_event(
        "checkout.session.completed",
        id="cs_1",
        payment_status="paid",
        payment_intent="pi_1",
        metadata=metadata(BOOKING_ID),
    )

    settlement = settlement_event_from_stripe(event)

    assert settlement.outcome is SettlementOutcome.SUCCEEDED
    assert settlement.booking_ids == (uuid.UUID(BOOKING_ID),)
    assert settlement.provider_txn_id == "pi_1"
    assert settlement.source_event == "checkout.session.completed"


def test_unpaid_checkout_session_is_ignored():
    event = stripe_event(
        "checkout.session.completed",
        id="cs_1",
        payment_status="unpaid",
        payment_intent="pi_1",
        metadata=metadata(BOOKING_ID),
    )
    assert settlement_event_from_stripe(event) is None


def test_payment_intent_succeeded():
    event = stripe_event("payment_intent.succeeded", id="pi_2", metadata=metadata(BOOKING_ID))

    settlement = settlement_event_from_stripe(event)

    assert settlement.outcome is SettlementOutcome.SUCCEEDED
    assert settlement.provider_txn_id == "pi_2"


def test_payment_intent_failed_carries_reason():
    event = stripe_event(
        "payment_intent.payment_failed",
        id="pi_3",
        metadata=metadata(BOOKING_ID),
        last_payment_error={"message": "Your card was declined."},
    )

    settlement = settlement_event_from_stripe(event)

    assert settlement.outcome is SettlementOutcome.FAILED
    assert settlement.failure_reason == "Your card was declined."


def test_other_event_types_are_ignored():
    assert settlement_event_from_stripe(stripe_event("customer.created", id="cus_1")) is None


@pytest.mark.parametrize(
    "meta",
    [
        None,
        {},
        {"bookingIds": ""},
        {"bookingIds": "not json"},
        {"bookingIds": json.dumps("single")},
        {"bookingIds": json.dumps([])},
        {"bookingIds": json.dumps([1, 2])},
        {"bookingIds": json.dumps(["not-a-uuid"])},
    ],
)
def test_malformed_correlation_metadata(meta):
    with pytest.raises(CorrelationDataInvalid):
        booking_ids_from_metadata(meta, "pi_x")


def test_missing_metadata_on_success_event_raises():
    event = stripe_event("payment_intent.succeeded", id="pi_4", metadata={})
    with pytest.raises(CorrelationDataInvalid):
        settlement_event_from_stripe(event)
