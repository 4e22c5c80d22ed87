import json
import logging
from decimal import Decimal
from urllib.parse import urlencode, urlparse, parse_qsl, urlunparse

import stripe
from flask import current_app

from models import db
from models.booking import Booking
from models.enums import BookingStatus, PaymentStatus
from models.payment_settings import PaymentSettings
from services import bookings as booking_service
from utils.errors import PaymentsDisabledError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)


def _append_query(url: str, params: dict) -> str:
    if not url:
        return url
    parts = urlparse(url)
    query = dict(parse_qsl(parts.query))
    query.update({k: v for k, v in params.items() if v is not None})
    return urlunparse(parts._replace(query=urlencode(query)))


def _configure_stripe():
    api_key = current_app.config.get("STRIPE_SECRET_KEY")
    if not api_key:
        raise UpstreamError("Payment gateway configuration missing. Please contact support.")
    stripe.api_key = api_key
    stripe.max_network_retries = 1
    stripe.default_http_client = stripe.RequestsClient(
        timeout=current_app.config.get("STRIPE_TIMEOUT_SECONDS", 15)
    )


def start_checkout(booking: Booking) -> str:
    """Open a Stripe Checkout Session for the booking's online amount and return its URL."""
    settings = PaymentSettings.get_settings()
    if not settings.payments_enabled:
        raise PaymentsDisabledError(reason=settings.disabled_reason)

    if booking.status != BookingStatus.CONFIRMED.value:
        raise ValidationError("Booking is not awaiting payment", field="booking_id")
    if booking.payment_status != PaymentStatus.PENDING.value:
        raise ValidationError("Booking already settled", field="booking_id")

    success_url = current_app.config.get("STRIPE_SUCCESS_URL")
    cancel_url = current_app.config.get("STRIPE_CANCEL_URL")
    if not success_url or not cancel_url:
        raise UpstreamError("Stripe success/cancel URLs not configured")

    _configure_stripe()

    # Stripe expects the smallest currency unit (paise)
    amount_paise = int((Decimal(booking.advance_payment) * 100).to_integral_value())
    if amount_paise < 100:
        raise ValidationError("Online amount must be at least ₹1", field="booking_id")

    currency = current_app.config.get("CURRENCY", "INR").lower()
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            line_items=[{
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": f"{booking.sport} {booking.ground} booking {booking.booking_ref}",
                        "description": f"{booking.date.isoformat()} {', '.join(booking.slot_list)}",
                    },
                    "unit_amount": amount_paise,
                },
                "quantity": 1,
            }],
            customer_email=booking.email,
            success_url=_append_query(success_url, {"booking_ref": booking.booking_ref}),
            cancel_url=_append_query(cancel_url, {"booking_ref": booking.booking_ref}),
            metadata={
                "booking_id": str(booking.id),
                "booking_ref": booking.booking_ref,
            },
        )
    except stripe.StripeError as exc:
        logger.error("Stripe session creation failed for booking %s: %s", booking.id, exc)
        raise UpstreamError("Payment service error. Please try again.")

    booking.stripe_session_id = session["id"]
    db.session.commit()
    return session["url"]


def construct_event(payload: bytes, sig_header: str):
    secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not secret:
        raise UpstreamError("Webhook secret not configured")
    if not sig_header:
        raise ValidationError("Invalid webhook signature")
    try:
        stripe.WebhookSignature.verify_header(payload.decode("utf-8"), sig_header, secret)
        return json.loads(payload)
    except (ValueError, stripe.SignatureVerificationError):
        raise ValidationError("Invalid webhook signature")


def _booking_for_session(session) -> Booking:
    meta = session.get("metadata", {}) or {}
    booking = None
    if meta.get("booking_id"):
        booking = db.session.get(Booking, int(meta["booking_id"]))
    if booking is None and session.get("id"):
        booking = Booking.query.filter_by(stripe_session_id=session["id"]).first()
    return booking


def handle_event(event):
    """Apply a checkout webhook event; returns the booking touched, if any."""
    event_type = event.get("type")
    if event_type not in ("checkout.session.completed", "checkout.session.expired"):
        return None

    session = event["data"]["object"]
    booking = _booking_for_session(session)
    if booking is None:
        logger.warning("Stripe event %s for unknown session %s", event_type, session.get("id"))
        return None

    if event_type == "checkout.session.completed":
        return booking_service.confirm_payment(booking, payment_intent_id=session.get("payment_intent"))
    return booking_service.fail_payment(booking, cancelled_by="stripe")
