"""
Booking lifecycle: placing online and offline bookings, cancellation, the
lazy CONFIRMED -> COMPLETED sweep and customer-facing lookups.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_

from models import db
from models.booking import Booking, BOOKING_REF_PREFIX
from models.enums import BookingSource, BookingStatus, PaymentStatus
from models.payment_settings import PaymentSettings
from services import pricing
from services.booking_writer import BookingRequest, create_booking
from services.coupons import CouponContext, redeem_coupon, validate_coupon
from utils.audit import log_event
from utils.emailer import send_booking_confirmation
from utils.errors import NotFoundError, PaymentsDisabledError, ValidationError
from utils.slots import latest_end
from utils.validation import normalize_mobile, validate_booking_form

logger = logging.getLogger(__name__)


def price_booking(form: dict) -> dict:
    """Day pricing, then the coupon on top of the discounted price."""
    q = pricing.quote(form["ground"], form["date"], len(form["slots"]))
    final_price = q.final_price
    coupon_discount = pricing.money(0)
    coupon_code = None

    if form.get("coupon_code"):
        ctx = CouponContext(
            ground=form["ground"],
            sport=form["sport"],
            date=form["date"],
            slots=form["slots"],
            email=form["email"],
        )
        result = validate_coupon(form["coupon_code"], ctx, q.final_price)
        if not result.valid:
            raise ValidationError(result.message, field="coupon_code")
        coupon_discount = result.discount
        final_price = result.final_price
        coupon_code = result.coupon.code

    advance, remaining = pricing.split_payment(form["ground"], final_price)
    return {
        "base_price": q.base_price,
        "discount_percentage": q.discount_percentage,
        "discount_amount": q.discount_amount,
        "coupon_code": coupon_code,
        "coupon_discount": coupon_discount,
        "final_price": final_price,
        "advance_payment": advance,
        "remaining_payment": remaining,
    }


def _request_from(form: dict, prices: dict, **extra) -> BookingRequest:
    return BookingRequest(
        ground=form["ground"],
        sport=form["sport"],
        date=form["date"],
        slots=list(form["slots"]),
        name=form["name"],
        mobile=form["mobile"],
        email=form["email"],
        **prices,
        **extra,
    )


def place_online_booking(data: dict, now: datetime) -> Booking:
    """
    Customer checkout. The booking holds its slots as CONFIRMED with a
    PENDING payment; the payment webhook settles it.
    """
    settings = PaymentSettings.get_settings()
    if not settings.payments_enabled:
        raise PaymentsDisabledError(reason=settings.disabled_reason)

    form = validate_booking_form(data, today=now.date())
    prices = price_booking(form)
    return create_booking(_request_from(form, prices), now=now)


def place_offline_booking(data: dict, now: datetime, admin) -> Booking:
    """Walk-in or phone booking entered by staff; paid at the turf."""
    form = validate_booking_form(data, today=now.date())
    prices = price_booking(form)
    prices["advance_payment"] = pricing.money(0)
    prices["remaining_payment"] = prices["final_price"]

    booking = create_booking(
        _request_from(
            form,
            prices,
            source=BookingSource.OFFLINE,
            payment_status=PaymentStatus.NOT_REQUIRED,
            created_by=admin.id,
        ),
        now=now,
    )
    if booking.coupon_code:
        redeem_coupon(booking.coupon_code, booking)
    send_booking_confirmation(booking)
    return booking


def confirm_payment(booking: Booking, payment_intent_id: Optional[str] = None) -> Booking:
    """Record a successful payment, then count the coupon and notify."""
    if booking.payment_status == PaymentStatus.SUCCESS.value:
        return booking
    booking.payment_status = PaymentStatus.SUCCESS.value
    booking.stripe_payment_intent_id = payment_intent_id
    booking.paid_at = datetime.utcnow()
    db.session.commit()

    if booking.status_enum is not BookingStatus.CONFIRMED:
        # slots were already released; the payment needs a manual refund
        logger.warning("Payment %s received for %s booking %s", payment_intent_id, booking.status, booking.booking_ref)
        log_event(
            "PAYMENT_FOR_CANCELLED",
            actor="stripe",
            entity="booking",
            entity_id=booking.id,
            metadata={"status": booking.status, "payment_intent": payment_intent_id},
        )
        return booking

    if booking.coupon_code:
        redeem_coupon(booking.coupon_code, booking)
    send_booking_confirmation(booking)
    return booking


def fail_payment(booking: Booking, cancelled_by: str = "system") -> Booking:
    """An abandoned or expired checkout releases the slots it was holding."""
    if booking.payment_status == PaymentStatus.SUCCESS.value:
        return booking
    booking.payment_status = PaymentStatus.FAILED.value
    if booking.status_enum is BookingStatus.CONFIRMED:
        _cancel(booking, cancelled_by, "Payment not completed")
    db.session.commit()
    return booking


def _cancel(booking: Booking, cancelled_by: str, reason: Optional[str]):
    booking.transition_to(BookingStatus.CANCELLED)
    booking.cancelled_at = datetime.utcnow()
    booking.cancelled_by = cancelled_by
    booking.cancel_reason = reason
    # delete-orphan removes the claim rows, freeing the slots
    booking.claims.clear()


def cancel_booking(booking: Booking, cancelled_by: str, reason: Optional[str] = None) -> Booking:
    if booking.status_enum is not BookingStatus.CONFIRMED:
        raise ValidationError("Booking not cancellable", field="status")
    _cancel(booking, cancelled_by, reason)
    db.session.commit()
    return booking


def sweep_completed(now: datetime) -> int:
    """
    Mark CONFIRMED bookings whose last slot has ended as COMPLETED.
    Run lazily before listing; there is no background scheduler.
    """
    today = now.date()
    updated = (
        Booking.query
        .filter(Booking.status == BookingStatus.CONFIRMED.value, Booking.date < today)
        .update({Booking.status: BookingStatus.COMPLETED.value}, synchronize_session=False)
    )

    todays = Booking.query.filter(
        Booking.status == BookingStatus.CONFIRMED.value,
        Booking.date == today,
    ).all()
    for booking in todays:
        if latest_end(booking.date, booking.slot_list) <= now:
            booking.transition_to(BookingStatus.COMPLETED)
            updated += 1

    db.session.commit()
    return updated


def get_booking(booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


def find_by_ref(ref: str) -> Booking:
    ref = (ref or "").strip().upper()
    if ref.startswith(BOOKING_REF_PREFIX):
        ref = ref[len(BOOKING_REF_PREFIX):]
    if not ref.isdigit():
        raise NotFoundError("Booking not found")
    return get_booking(int(ref))


def list_bookings(now: datetime, ground=None, sport=None, day=None, status=None, limit=200):
    sweep_completed(now)
    q = Booking.query
    if ground is not None:
        q = q.filter(Booking.ground == ground.value)
    if sport:
        q = q.filter(Booking.sport == sport)
    if day is not None:
        q = q.filter(Booking.date == day)
    if status is not None:
        q = q.filter(Booking.status == status.value)
    return q.order_by(Booking.date.desc(), Booking.created_at.desc()).limit(limit).all()


def search_bookings(now: datetime, email: Optional[str] = None, mobile: Optional[str] = None, limit=200):
    if not email and not mobile:
        raise ValidationError("email or mobile is required")
    sweep_completed(now)
    filters = []
    if email:
        filters.append(Booking.email == email.strip().lower())
    if mobile:
        filters.append(Booking.mobile == normalize_mobile(mobile))
    return (
        Booking.query
        .filter(or_(*filters))
        .order_by(Booking.date.desc(), Booking.created_at.desc())
        .limit(limit)
        .all()
    )


def booking_history(now: datetime, email: Optional[str] = None, mobile: Optional[str] = None) -> dict:
    rows = search_bookings(now, email=email, mobile=mobile)
    counts = {s.value: 0 for s in BookingStatus}
    for b in rows:
        counts[b.status] = counts.get(b.status, 0) + 1
    return {
        "bookings": [b.to_dict() for b in rows],
        "stats": {
            "total": len(rows),
            "confirmed": counts[BookingStatus.CONFIRMED.value],
            "completed": counts[BookingStatus.COMPLETED.value],
            "cancelled": counts[BookingStatus.CANCELLED.value],
        },
    }


def dashboard_stats(now: datetime) -> dict:
    sweep_completed(now)
    by_status = dict(
        db.session.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
    )
    paid_total = (
        db.session.query(func.coalesce(func.sum(Booking.advance_payment), 0))
        .filter(Booking.payment_status == PaymentStatus.SUCCESS.value)
        .scalar()
    )
    upcoming = Booking.query.filter(
        Booking.status == BookingStatus.CONFIRMED.value,
        Booking.date >= now.date(),
    ).count()
    return {
        "bookings_by_status": {s.value: by_status.get(s.value, 0) for s in BookingStatus},
        "upcoming": upcoming,
        "online_collected": float(paid_total or 0),
    }
