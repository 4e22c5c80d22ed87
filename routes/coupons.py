from flask import Blueprint, jsonify, request

from services import pricing
from services.coupons import (
    CouponContext,
    list_available_coupons,
    list_home_page_offers,
    validate_coupon,
)
from utils.errors import ValidationError
from utils.slots import DAILY_SLOTS, split_slots
from utils.validation import is_valid_email, json_body, parse_date, parse_ground

coupons_bp = Blueprint("coupons", __name__, url_prefix="/coupons")


@coupons_bp.post("/validate")
def validate():
    data = json_body()
    code = data.get("code") or data.get("coupon_code")
    if not code:
        return jsonify(valid=False, message="Coupon code is required"), 400

    ground = parse_ground(data.get("ground"))
    day = parse_date(data.get("date"))
    try:
        slots = split_slots(data.get("slots", data.get("slot")))
    except ValueError:
        slots = []
    if not slots or any(s not in DAILY_SLOTS for s in slots):
        raise ValidationError("Please select valid time slots", field="slots")

    # the coupon applies to the day-discounted price, never to a client-sent amount
    amount = pricing.quote(ground, day, len(slots)).final_price
    ctx = CouponContext(
        ground=ground,
        sport=data.get("sport"),
        date=day,
        slots=slots,
        email=data.get("email"),
    )
    result = validate_coupon(code, ctx, amount)
    body = result.to_dict()
    body["amount"] = float(amount)
    return jsonify(body), 200 if result.valid else 400


@coupons_bp.get("")
def list_for_user():
    email = (request.args.get("email") or "").strip().lower()
    if not is_valid_email(email):
        return jsonify(error="A valid email is required"), 400
    return jsonify(coupons=[c.to_public_dict() for c in list_available_coupons(email)]), 200


@coupons_bp.get("/offers")
def home_page_offers():
    return jsonify(offers=[c.to_public_dict() for c in list_home_page_offers()]), 200
