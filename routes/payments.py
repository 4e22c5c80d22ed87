from flask import Blueprint, request, jsonify

from models.payment_settings import PaymentSettings
from services import bookings as booking_service
from services import payments as payment_service
from utils.audit import log_event
from utils.errors import ValidationError
from utils.validation import json_body

payments_bp = Blueprint("payments", __name__, url_prefix="/payments")
webhook_bp = Blueprint("webhook", __name__, url_prefix="/webhooks")


@payments_bp.get("/status")
def payment_status():
    settings = PaymentSettings.get_settings()
    return jsonify(
        payments_enabled=settings.payments_enabled,
        disabled_reason=settings.disabled_reason,
    ), 200


@payments_bp.post("/start")
def start_payment():
    data = json_body()
    booking_id = data.get("booking_id")
    try:
        booking_id = int(booking_id)
    except (TypeError, ValueError):
        raise ValidationError("booking_id required", field="booking_id")

    booking = booking_service.get_booking(booking_id)
    checkout_url = payment_service.start_checkout(booking)

    log_event(
        "PAYMENT_START",
        actor=booking.email,
        entity="booking",
        entity_id=booking.id,
        metadata={"stripe_session_id": booking.stripe_session_id, "amount": booking.advance_payment},
    )
    return jsonify(checkout_url=checkout_url, booking_ref=booking.booking_ref), 200


@webhook_bp.post("/stripe")
def stripe_webhook():
    event = payment_service.construct_event(request.get_data(), request.headers.get("Stripe-Signature"))
    booking = payment_service.handle_event(event)

    if booking is not None:
        log_event(
            "PAYMENT_PAID" if event["type"] == "checkout.session.completed" else "PAYMENT_EXPIRED",
            actor="stripe",
            entity="booking",
            entity_id=booking.id,
            metadata={"stripe_session_id": event["data"]["object"].get("id"), "status": booking.status},
        )
    return jsonify(received=True), 200
