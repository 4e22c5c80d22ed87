from flask import Blueprint, jsonify, request

from services import bookings as booking_service
from utils.audit import log_event
from utils.clock import local_now
from utils.errors import NotFoundError
from utils.validation import json_body

bookings_bp = Blueprint("bookings", __name__, url_prefix="/bookings")


@bookings_bp.post("")
def create_online_booking():
    data = json_body()
    booking = booking_service.place_online_booking(data, now=local_now())

    log_event(
        "BOOKING_CREATE",
        actor=booking.email,
        entity="booking",
        entity_id=booking.id,
        metadata={"ground": booking.ground, "date": booking.date, "slots": booking.slot_list},
    )
    return jsonify(
        booking=booking.to_dict(),
        payment_required=True,
        amount_due_online=float(booking.advance_payment),
    ), 201


@bookings_bp.get("/history")
def history():
    email = request.args.get("email")
    mobile = request.args.get("mobile")
    return jsonify(booking_service.booking_history(local_now(), email=email, mobile=mobile)), 200


@bookings_bp.get("/<ref>")
def lookup(ref):
    # the reference alone is guessable, the email must match too
    email = (request.args.get("email") or "").strip().lower()
    booking = booking_service.find_by_ref(ref)
    if not email or booking.email != email:
        raise NotFoundError("Booking not found")
    return jsonify(booking=booking.to_dict()), 200
