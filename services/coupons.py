"""
Coupon validation and redemption.

validate_coupon() is read-only: it runs the eligibility checks in a fixed
order and reports the first failure. Usage counters only move through
redeem_coupon(), once a booking is confirmed.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import pytz
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import db
from models.coupon import Coupon, CouponUsage
from models.enums import CouponBookingType, DiscountType, Ground, Sport, parse_enum
from services.pricing import money
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.slots import DAILY_SLOTS

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^[A-Z0-9]{3,20}$")


def normalize_code(code) -> str:
    if not isinstance(code, str):
        return ""
    return code.strip().upper()


@dataclass
class CouponContext:
    ground: Ground
    sport: str
    date: date
    slots: list = field(default_factory=list)
    email: Optional[str] = None


@dataclass
class CouponResult:
    valid: bool
    message: str
    discount: Decimal = Decimal("0")
    final_price: Optional[Decimal] = None
    coupon: Optional[Coupon] = None

    def to_dict(self):
        if not self.valid:
            return {"valid": False, "message": self.message}
        return {
            "valid": True,
            "message": self.message,
            "discount": float(self.discount),
            "final_price": float(self.final_price),
            "coupon": {
                "code": self.coupon.code,
                "discount_type": self.coupon.discount_type,
                "discount_value": float(self.coupon.discount_value),
                "discount_amount": float(self.discount),
            },
        }


def _invalid(message):
    return CouponResult(valid=False, message=message)


def _slots_match(coupon: Coupon, ctx: CouponContext) -> bool:
    allowed = {(s.get("date"), s.get("slot")) for s in (coupon.applicable_slots or [])}
    day = ctx.date.isoformat()
    if not ctx.slots:
        return any(d == day for d, _ in allowed)
    return all((day, s) in allowed for s in ctx.slots)


def user_usage_count(code: str, email: str) -> int:
    return CouponUsage.query.filter_by(coupon_code=code, email=email.lower()).count()


def validate_coupon(code, ctx: CouponContext, base_amount, now: Optional[datetime] = None) -> CouponResult:
    code = normalize_code(code)
    base_amount = money(base_amount)
    now = now or datetime.utcnow()

    coupon = Coupon.query.filter_by(code=code).first() if code else None
    if coupon is None:
        return _invalid("Invalid coupon code")

    if not coupon.is_active:
        return _invalid("This coupon is no longer active")

    if coupon.expiry_date < now:
        return _invalid("This coupon has expired")

    email = ctx.email.strip().lower() if isinstance(ctx.email, str) else ""
    assigned = [u.lower() for u in (coupon.assigned_users or [])]
    if assigned and email not in assigned:
        return _invalid("This coupon is not assigned to you")

    if coupon.usage_limit > 0 and coupon.used_count >= coupon.usage_limit:
        return _invalid("This coupon has reached its usage limit")

    if email and coupon.per_user_limit > 0 and user_usage_count(coupon.code, email) >= coupon.per_user_limit:
        return _invalid("You have already used this coupon")

    booking_type = ctx.ground.value
    if coupon.booking_type != CouponBookingType.BOTH.value and coupon.booking_type != booking_type:
        return _invalid(f"This coupon is not valid for {booking_type} bookings")

    if coupon.sports and ctx.sport not in coupon.sports:
        return _invalid(f"This coupon is not valid for {ctx.sport}")

    if coupon.applicable_slots and not _slots_match(coupon, ctx):
        return _invalid("This coupon is not valid for the selected date and time slot")

    min_amount = money(coupon.min_amount or 0)
    if base_amount < min_amount:
        return _invalid(f"Minimum booking amount of ₹{min_amount.normalize():f} required for this coupon")

    value = money(coupon.discount_value)
    if coupon.discount_type == DiscountType.FLAT.value:
        discount = value
    else:
        discount = money(base_amount * value / 100)
    discount = min(discount, base_amount)
    final_price = max(money(0), base_amount - discount)

    return CouponResult(
        valid=True,
        message="Coupon applied successfully",
        discount=discount,
        final_price=final_price,
        coupon=coupon,
    )


def redeem_coupon(code, booking) -> bool:
    """
    Count one use of the coupon for a confirmed booking.
    The increment is a single conditional UPDATE so concurrent redemptions
    cannot push used_count past usage_limit.
    """
    code = normalize_code(code)
    if not code:
        return False

    if CouponUsage.query.filter_by(booking_id=booking.id).first():
        return False

    updated = (
        Coupon.query
        .filter(
            Coupon.code == code,
            or_(Coupon.usage_limit == 0, Coupon.used_count < Coupon.usage_limit),
        )
        .update({Coupon.used_count: Coupon.used_count + 1}, synchronize_session=False)
    )
    if not updated:
        db.session.rollback()
        logger.warning("Coupon %s not counted for booking %s: missing or limit reached", code, booking.id)
        return False

    db.session.add(CouponUsage(
        coupon_code=code,
        email=booking.email,
        mobile=booking.mobile,
        booking_id=booking.id,
    ))
    try:
        db.session.commit()
    except IntegrityError:
        # another request already redeemed for this booking
        db.session.rollback()
        return False
    return True


def list_available_coupons(email: str, now: Optional[datetime] = None):
    now = now or datetime.utcnow()
    email = (email or "").strip().lower()
    rows = (
        Coupon.query
        .filter(Coupon.is_active.is_(True), Coupon.expiry_date > now)
        .order_by(Coupon.created_at.desc())
        .all()
    )
    return [
        c for c in rows
        if not c.assigned_users or email in [u.lower() for u in c.assigned_users]
    ]


def list_home_page_offers(now: Optional[datetime] = None):
    now = now or datetime.utcnow()
    return (
        Coupon.query
        .filter(
            Coupon.is_active.is_(True),
            Coupon.show_on_home_page.is_(True),
            Coupon.expiry_date > now,
        )
        .order_by(Coupon.created_at.desc())
        .all()
    )


# ---------- admin management ----------

def _parse_decimal(value, name):
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number", field=name)


def _parse_non_negative_int(value, name):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", field=name)
    if number < 0:
        raise ValidationError(f"{name} must be non-negative", field=name)
    return number


def _parse_expiry(value):
    if not value:
        raise ValidationError("expiry_date is required", field="expiry_date")
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError("Invalid expiry_date. Use ISO e.g. 2026-12-31T23:59:59", field="expiry_date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(pytz.utc).replace(tzinfo=None)
    return parsed


def _parse_applicable_slots(value):
    if not isinstance(value, list):
        raise ValidationError("applicable_slots must be a list", field="applicable_slots")
    out = []
    for item in value:
        if not isinstance(item, dict):
            raise ValidationError("applicable_slots entries need date and slot", field="applicable_slots")
        day, slot = item.get("date"), item.get("slot")
        try:
            date.fromisoformat(day or "")
        except ValueError:
            raise ValidationError("applicable_slots date must be YYYY-MM-DD", field="applicable_slots")
        if slot not in DAILY_SLOTS:
            raise ValidationError(f"Invalid slot in applicable_slots: {slot}", field="applicable_slots")
        out.append({"date": day, "slot": slot})
    return out


def _apply_fields(coupon: Coupon, data: dict, creating: bool):
    if creating or "discount_type" in data:
        dtype = parse_enum(DiscountType, data.get("discount_type"))
        if dtype is None:
            raise ValidationError('discount_type must be "flat" or "percent"', field="discount_type")
        coupon.discount_type = dtype.value

    if creating or "discount_value" in data:
        if data.get("discount_value") is None:
            raise ValidationError("discount_value is required", field="discount_value")
        value = _parse_decimal(data.get("discount_value"), "discount_value")
        if value <= 0:
            raise ValidationError("discount_value must be greater than 0", field="discount_value")
        coupon.discount_value = value

    if coupon.discount_type == DiscountType.PERCENT.value and Decimal(str(coupon.discount_value)) > 100:
        raise ValidationError("discount_value cannot exceed 100 for percent discount", field="discount_value")

    if creating or "expiry_date" in data:
        coupon.expiry_date = _parse_expiry(data.get("expiry_date"))

    if "booking_type" in data or creating:
        btype = parse_enum(CouponBookingType, data.get("booking_type") or "both")
        if btype is None:
            raise ValidationError('booking_type must be "match", "practice" or "both"', field="booking_type")
        coupon.booking_type = btype.value

    if "sports" in data or creating:
        sports = data.get("sports") or []
        valid = {s.value for s in Sport}
        if not isinstance(sports, list) or any(s not in valid for s in sports):
            raise ValidationError("Invalid sport", field="sports")
        coupon.sports = sports

    if "applicable_slots" in data or creating:
        coupon.applicable_slots = _parse_applicable_slots(data.get("applicable_slots") or [])

    if "assigned_users" in data or creating:
        users = data.get("assigned_users") or []
        if not isinstance(users, list):
            raise ValidationError("assigned_users must be a list of emails", field="assigned_users")
        coupon.assigned_users = [str(u).strip().lower() for u in users if str(u).strip()]

    if "min_amount" in data or creating:
        min_amount = _parse_decimal(data.get("min_amount") or 0, "min_amount")
        if min_amount < 0:
            raise ValidationError("min_amount must be non-negative", field="min_amount")
        coupon.min_amount = min_amount

    if "usage_limit" in data or creating:
        coupon.usage_limit = _parse_non_negative_int(data.get("usage_limit") or 0, "usage_limit")

    if "per_user_limit" in data or creating:
        raw = data.get("per_user_limit")
        coupon.per_user_limit = _parse_non_negative_int(1 if raw is None else raw, "per_user_limit")

    if "show_on_home_page" in data or creating:
        coupon.show_on_home_page = bool(data.get("show_on_home_page"))

    if "offer_title" in data or creating:
        title = (data.get("offer_title") or "").strip()
        if len(title) > 100:
            raise ValidationError("offer_title must not exceed 100 characters", field="offer_title")
        coupon.offer_title = title

    if "is_active" in data:
        coupon.is_active = bool(data.get("is_active"))


def create_coupon(data: dict, created_by: str) -> Coupon:
    code = normalize_code(data.get("code"))
    if not _CODE_RE.match(code):
        raise ValidationError("Code must be 3-20 uppercase letters and numbers", field="code")
    if Coupon.query.filter_by(code=code).first():
        raise ConflictError("Coupon code already exists")

    coupon = Coupon(code=code, used_count=0, is_active=True, created_by=created_by)
    _apply_fields(coupon, data, creating=True)
    db.session.add(coupon)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Coupon code already exists")
    return coupon


def list_all_coupons():
    return Coupon.query.order_by(Coupon.created_at.desc()).all()


def get_coupon(coupon_id: int) -> Coupon:
    coupon = db.session.get(Coupon, coupon_id)
    if coupon is None:
        raise NotFoundError("Coupon not found")
    return coupon


def update_coupon(coupon: Coupon, data: dict) -> Coupon:
    _apply_fields(coupon, data, creating=False)
    db.session.commit()
    return coupon


def toggle_coupon(coupon: Coupon) -> Coupon:
    coupon.is_active = not coupon.is_active
    db.session.commit()
    return coupon


def delete_coupon(coupon: Coupon):
    db.session.delete(coupon)
    db.session.commit()
