from flask import Blueprint, jsonify, g, request

from models.enums import BookingStatus, parse_enum
from models.payment_settings import PaymentSettings
from security.rbac import require_permission, require_roles
from services import bookings as booking_service
from services import coupons as coupon_service
from services import freezes
from services import newsletter as newsletter_service
from services import reviews as review_service
from services.availability import cleanup_expired_freezes
from utils.audit import log_event
from utils.clock import local_now
from utils.errors import ValidationError
from utils.validation import clean_text, json_body, parse_date, parse_ground, validate_sport

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


# ---------- bookings ----------

@admin_bp.get("/bookings")
@require_permission("can_view_bookings")
def list_bookings():
    now = local_now()
    email = request.args.get("email")
    mobile = request.args.get("mobile")
    if email or mobile:
        rows = booking_service.search_bookings(now, email=email, mobile=mobile)
    else:
        ground = parse_ground(request.args["ground"]) if request.args.get("ground") else None
        day = parse_date(request.args["date"]) if request.args.get("date") else None
        status = None
        if request.args.get("status"):
            status = parse_enum(BookingStatus, request.args["status"])
            if status is None:
                raise ValidationError("Invalid status", field="status")
        rows = booking_service.list_bookings(
            now,
            ground=ground,
            sport=request.args.get("sport") or None,
            day=day,
            status=status,
        )
    return jsonify(bookings=[b.to_dict() for b in rows], count=len(rows)), 200


@admin_bp.post("/bookings")
@require_permission("can_create_booking")
def create_offline_booking():
    data = json_body()
    booking = booking_service.place_offline_booking(data, now=local_now(), admin=g.user)

    log_event(
        "BOOKING_CREATE_OFFLINE",
        user_id=g.user.id,
        entity="booking",
        entity_id=booking.id,
        metadata={"ground": booking.ground, "date": booking.date, "slots": booking.slot_list},
    )
    return jsonify(booking=booking.to_dict()), 201


@admin_bp.post("/bookings/<int:booking_id>/cancel")
@require_permission("can_delete_booking")
def cancel_booking(booking_id):
    data = json_body()
    reason = clean_text(data.get("reason"))
    if len(reason) < 3:
        return jsonify(error="A valid cancellation reason is required (min 3 characters)"), 400

    booking = booking_service.get_booking(booking_id)
    booking_service.cancel_booking(booking, cancelled_by=g.user.email, reason=reason)

    log_event(
        "BOOKING_CANCEL",
        user_id=g.user.id,
        entity="booking",
        entity_id=booking.id,
        metadata={"reason": reason, "slots": booking.slot_list},
    )
    return jsonify(message="Booking cancelled", booking=booking.to_dict()), 200


# ---------- slot freezes ----------

def _freeze_target(data):
    ground = parse_ground(data.get("ground"))
    sport = validate_sport(ground, data.get("sport"))
    day = parse_date(data.get("date"))
    slot = clean_text(data.get("slot"))
    return ground, sport, day, slot


@admin_bp.post("/slots/freeze")
@require_permission("can_freeze_slots")
def freeze_slot():
    data = json_body()
    ground, sport, day, slot = _freeze_target(data)
    if day < local_now().date():
        return jsonify(error="Cannot freeze slots in the past"), 400

    row = freezes.freeze_slot(ground, sport, day, slot, frozen_by=g.user.email)
    log_event("SLOT_FREEZE", user_id=g.user.id, entity="frozen_slot", entity_id=row.id, metadata=row.to_dict())
    return jsonify(message="Slot frozen", frozen_slot=row.to_dict()), 201


@admin_bp.delete("/slots/freeze")
@require_permission("can_unfreeze_slots")
def unfreeze_slot():
    data = json_body()
    ground, sport, day, slot = _freeze_target(data)

    row = freezes.unfreeze_slot(ground, sport, day, slot)
    log_event("SLOT_UNFREEZE", user_id=g.user.id, entity="frozen_slot", entity_id=row.id, metadata=row.to_dict())
    return jsonify(message="Slot unfrozen"), 200


@admin_bp.get("/slots/frozen")
@require_permission("can_view_slots")
def list_frozen_slots():
    cleanup_expired_freezes(local_now())
    ground = parse_ground(request.args["ground"]) if request.args.get("ground") else None
    day = parse_date(request.args["date"]) if request.args.get("date") else None
    rows = freezes.list_frozen(ground=ground, day=day)
    return jsonify(frozen_slots=[r.to_dict() for r in rows]), 200


# ---------- coupons ----------

@admin_bp.get("/coupons")
@require_permission("can_view_coupons")
def list_coupons():
    rows = coupon_service.list_all_coupons()
    return jsonify(coupons=[c.to_dict() for c in rows]), 200


@admin_bp.post("/coupons")
@require_permission("can_create_coupon")
def create_coupon():
    data = json_body()
    coupon = coupon_service.create_coupon(data, created_by=g.user.email)
    log_event("COUPON_CREATE", user_id=g.user.id, entity="coupon", entity_id=coupon.id, metadata={"code": coupon.code})
    return jsonify(coupon=coupon.to_dict()), 201


@admin_bp.put("/coupons/<int:coupon_id>")
@require_permission("can_edit_coupon")
def update_coupon(coupon_id):
    data = json_body()
    coupon = coupon_service.update_coupon(coupon_service.get_coupon(coupon_id), data)
    log_event("COUPON_UPDATE", user_id=g.user.id, entity="coupon", entity_id=coupon.id, metadata={"fields": sorted(data)})
    return jsonify(coupon=coupon.to_dict()), 200


@admin_bp.post("/coupons/<int:coupon_id>/toggle")
@require_permission("can_edit_coupon")
def toggle_coupon(coupon_id):
    coupon = coupon_service.toggle_coupon(coupon_service.get_coupon(coupon_id))
    log_event(
        "COUPON_TOGGLE",
        user_id=g.user.id,
        entity="coupon",
        entity_id=coupon.id,
        metadata={"is_active": coupon.is_active},
    )
    return jsonify(coupon=coupon.to_dict()), 200


@admin_bp.delete("/coupons/<int:coupon_id>")
@require_permission("can_delete_coupon")
def delete_coupon(coupon_id):
    coupon = coupon_service.get_coupon(coupon_id)
    code = coupon.code
    coupon_service.delete_coupon(coupon)
    log_event("COUPON_DELETE", user_id=g.user.id, entity="coupon", entity_id=coupon_id, metadata={"code": code})
    return jsonify(message="Coupon deleted"), 200


# ---------- payment settings and dashboard ----------

@admin_bp.get("/payment-settings")
@require_roles("ADMIN")
def get_payment_settings():
    return jsonify(PaymentSettings.get_settings().to_dict()), 200


@admin_bp.put("/payment-settings")
@require_roles("ADMIN")
def update_payment_settings():
    data = json_body()
    enabled = data.get("payments_enabled")
    if not isinstance(enabled, bool):
        return jsonify(error="payments_enabled must be a boolean"), 400

    reason = clean_text(data.get("disabled_reason"))
    if len(reason) > 255:
        return jsonify(error="disabled_reason must not exceed 255 characters"), 400

    settings = PaymentSettings.update_settings(enabled, disabled_reason=reason, updated_by=g.user.email)
    log_event(
        "PAYMENTS_ENABLED" if enabled else "PAYMENTS_DISABLED",
        user_id=g.user.id,
        entity="payment_settings",
        entity_id=settings.id,
        metadata={"reason": settings.disabled_reason},
    )
    return jsonify(settings.to_dict()), 200


@admin_bp.get("/dashboard")
@require_permission("can_view_dashboard")
def dashboard():
    stats = booking_service.dashboard_stats(local_now())
    log_event("ADMIN_DASHBOARD_VIEW", user_id=g.user.id)
    return jsonify(stats), 200


# ---------- reviews and newsletter ----------

@admin_bp.get("/reviews")
@require_roles("ADMIN")
def list_reviews():
    result = review_service.list_for_admin(
        status=request.args.get("status") or None,
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return jsonify(result), 200


@admin_bp.post("/reviews/<int:review_id>/approve")
@require_roles("ADMIN")
def approve_review(review_id):
    review = review_service.approve_review(review_id, approved_by=g.user.email)
    log_event("REVIEW_APPROVE", user_id=g.user.id, entity="review", entity_id=review.id)
    return jsonify(message="Review approved successfully", review=review.to_dict()), 200


@admin_bp.delete("/reviews/<int:review_id>")
@require_roles("ADMIN")
def delete_review(review_id):
    review_service.delete_review(review_id)
    log_event("REVIEW_DELETE", user_id=g.user.id, entity="review", entity_id=review_id)
    return jsonify(message="Review deleted"), 200


@admin_bp.get("/newsletter/subscribers")
@require_permission("can_view_newsletter")
def list_newsletter_subscribers():
    result = newsletter_service.list_subscribers(
        active_only=request.args.get("active") == "true",
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return jsonify(result), 200
