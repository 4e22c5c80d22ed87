import json

import pytest
import stripe

from models import db
from models.booking import Booking
from models.enums import BookingStatus, PaymentStatus
from models.payment_settings import PaymentSettings
from services import bookings as booking_service
from services import payments as payment_service
from utils.errors import PaymentsDisabledError, ValidationError

from conftest import booking_payload


@pytest.fixture
def pending_booking(app, monday, morning_before):
    return booking_service.place_online_booking(booking_payload(monday), now=morning_before)


@pytest.fixture
def fake_checkout(monkeypatch):
    created = []

    def create(**kwargs):
        created.append(kwargs)
        return {"id": "cs_test_123", "url": "https://checkout.stripe.test/cs_test_123"}

    monkeypatch.setattr(stripe.checkout.Session, "create", create)
    return created


@pytest.fixture
def trusted_signatures(monkeypatch):
    monkeypatch.setattr(stripe.WebhookSignature, "verify_header", lambda *a, **kw: True)


def _event(event_type, booking, **session):
    obj = {"id": "cs_test_123", "metadata": {"booking_id": str(booking.id)}}
    obj.update(session)
    return {"type": event_type, "data": {"object": obj}}


def test_checkout_charges_the_advance_in_paise(app, pending_booking, fake_checkout):
    url = payment_service.start_checkout(pending_booking)
    assert url == "https://checkout.stripe.test/cs_test_123"
    assert pending_booking.stripe_session_id == "cs_test_123"

    line = fake_checkout[0]["line_items"][0]
    assert line["price_data"]["unit_amount"] == 20000
    assert line["price_data"]["currency"] == "inr"
    assert fake_checkout[0]["metadata"]["booking_ref"] == pending_booking.booking_ref
    assert "booking_ref=" in fake_checkout[0]["success_url"]


def test_checkout_refused_when_disabled(app, pending_booking, fake_checkout):
    PaymentSettings.update_settings(False, disabled_reason="Maintenance", updated_by="owner")
    with pytest.raises(PaymentsDisabledError):
        payment_service.start_checkout(pending_booking)
    assert fake_checkout == []


def test_checkout_refused_once_paid(app, pending_booking, fake_checkout):
    booking_service.confirm_payment(pending_booking)
    with pytest.raises(ValidationError):
        payment_service.start_checkout(pending_booking)


def test_completed_event_confirms_payment(app, pending_booking):
    payment_service.handle_event(_event("checkout.session.completed", pending_booking, payment_intent="pi_9"))
    db.session.expire_all()
    booking = db.session.get(Booking, pending_booking.id)
    assert booking.payment_status == PaymentStatus.SUCCESS.value
    assert booking.stripe_payment_intent_id == "pi_9"
    assert booking.status == BookingStatus.CONFIRMED.value


def test_expired_event_releases_slots(app, pending_booking):
    payment_service.handle_event(_event("checkout.session.expired", pending_booking))
    db.session.expire_all()
    booking = db.session.get(Booking, pending_booking.id)
    assert booking.status == BookingStatus.CANCELLED.value
    assert booking.payment_status == PaymentStatus.FAILED.value
    assert booking.cancelled_by == "stripe"


def test_other_events_are_ignored(app, pending_booking):
    assert payment_service.handle_event({"type": "payment_intent.created", "data": {"object": {}}}) is None


def test_bad_signature_is_rejected(app):
    with pytest.raises(ValidationError):
        payment_service.construct_event(b"{}", "t=1,v1=bogus")
    with pytest.raises(ValidationError):
        payment_service.construct_event(b"{}", None)


def test_webhook_route(client, pending_booking, trusted_signatures):
    payload = json.dumps(_event("checkout.session.completed", pending_booking)).encode()
    resp = client.post(
        "/webhooks/stripe",
        data=payload,
        headers={"Stripe-Signature": "t=1,v1=signed", "Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"received": True}
    db.session.expire_all()
    assert db.session.get(Booking, pending_booking.id).payment_status == PaymentStatus.SUCCESS.value


def test_start_payment_route(client, pending_booking, fake_checkout):
    resp = client.post("/payments/start", json={"booking_id": pending_booking.id})
    assert resp.status_code == 200
    assert resp.get_json()["checkout_url"].startswith("https://checkout.stripe.test/")


def test_start_payment_unknown_booking(client, fake_checkout):
    resp = client.post("/payments/start", json={"booking_id": 999})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Booking not found"}
