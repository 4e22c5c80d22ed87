"""
Conflict-checked, all-or-nothing booking insert.

The availability check is repeated inside the write transaction, and every
slot a booking holds is also claimed as a BookingSlot row whose unique
(ground, date, slot) constraint makes the database the final arbiter when
two writers pass the check at the same time. Nothing here relies on
in-process locks, so it holds across processes and machines.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError

from models import db
from models.booking import Booking, BookingSlot
from models.enums import BookingSource, BookingStatus, Ground, PaymentStatus
from services.availability import booked_slots, find_unavailable
from utils.clock import local_now
from utils.errors import ConflictError, UpstreamError, ValidationError
from utils.slots import slot_start, sort_slots

logger = logging.getLogger(__name__)

RACE_LOST_MESSAGE = "This slot was just booked by someone else. Please refresh and try again."


@dataclass
class BookingRequest:
    ground: Ground
    sport: str
    date: date
    slots: list
    name: str
    mobile: str
    email: str
    base_price: Decimal
    discount_percentage: int
    discount_amount: Decimal
    final_price: Decimal
    advance_payment: Decimal
    remaining_payment: Decimal
    coupon_code: Optional[str] = None
    coupon_discount: Decimal = Decimal("0")
    source: BookingSource = BookingSource.ONLINE
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_by: Optional[int] = None


def _conflict_message(booked: dict, frozen: dict) -> str:
    parts = []
    for slot, sport in booked.items():
        parts.append(
            f"Slot {slot} is already booked for {sport} on this ground. "
            "Since it's a shared ground, this time is unavailable for all sports."
        )
    for slot, sport in frozen.items():
        parts.append(f"Slot {slot} is frozen ({sport}) and unavailable for booking.")
    return " ".join(parts)


def _build(req: BookingRequest) -> Booking:
    booking = Booking(
        ground=req.ground.value,
        sport=req.sport,
        date=req.date,
        slots=", ".join(req.slots),
        name=req.name,
        mobile=req.mobile,
        email=req.email,
        base_price=req.base_price,
        discount_percentage=req.discount_percentage,
        discount_amount=req.discount_amount,
        coupon_code=req.coupon_code,
        coupon_discount=req.coupon_discount,
        final_price=req.final_price,
        advance_payment=req.advance_payment,
        remaining_payment=req.remaining_payment,
        source=req.source.value,
        status=BookingStatus.CONFIRMED.value,
        payment_status=req.payment_status.value,
        created_by=req.created_by,
    )
    booking.claims = [
        BookingSlot(ground=req.ground.value, date=req.date, slot=s, sport=req.sport)
        for s in req.slots
    ]
    return booking


def _write_once(req: BookingRequest) -> Booking:
    booked, frozen = find_unavailable(req.ground, req.date, req.slots, lock=True)
    if booked or frozen:
        db.session.rollback()
        raise ConflictError(
            _conflict_message(booked, frozen),
            slots=sort_slots(list(booked) + list(frozen)),
            reason="booked" if booked else "frozen",
        )

    booking = _build(req)
    db.session.add(booking)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # another writer claimed at least one slot between our check and insert
        taken = booked_slots(req.ground, req.date)
        collided = [s for s in req.slots if s in taken] or list(req.slots)
        raise ConflictError(RACE_LOST_MESSAGE, slots=collided, reason="booked")
    return booking


def create_booking(req: BookingRequest, now: Optional[datetime] = None) -> Booking:
    """
    Persist a booking for req.slots or raise ConflictError naming the blocked
    slots. `now` is naive local business time; started slots are refused.
    """
    now = now or local_now()
    if not req.slots:
        raise ValidationError("Please select at least one time slot", field="slots")
    if len(set(req.slots)) != len(req.slots):
        raise ValidationError("Duplicate time slots selected", field="slots")
    req.slots = sort_slots(req.slots)

    started = [s for s in req.slots if slot_start(req.date, s) <= now]
    if started:
        raise ValidationError("Cannot book past/started slots", field="slots")

    attempts = 2
    for attempt in range(1, attempts + 1):
        try:
            return _write_once(req)
        except OperationalError:
            db.session.rollback()
            if attempt == attempts:
                logger.exception("Booking write failed for %s %s %s", req.ground.value, req.date, req.slots)
                raise UpstreamError("Booking service is temporarily unavailable. Please try again.")
            logger.warning("Booking write hit a database error, retrying once")
