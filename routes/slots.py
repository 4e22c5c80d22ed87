from flask import Blueprint, jsonify, request

from services import pricing
from services.availability import cleanup_expired_freezes, get_ground_availability
from utils.clock import local_now
from utils.errors import ValidationError
from utils.slots import slot_start, split_slots, DAILY_SLOTS
from utils.validation import parse_date, parse_ground, sports_for, validate_sport

slots_bp = Blueprint("slots", __name__)


@slots_bp.get("/slots/availability")
def availability():
    ground = parse_ground(request.args.get("ground"))
    day = parse_date(request.args.get("date"))
    sport = request.args.get("sport")
    if sport:
        validate_sport(ground, sport)

    now = local_now()
    cleanup_expired_freezes(now)
    grid = []
    for item in get_ground_availability(ground, day):
        row = item.to_dict()
        # started slots stay visible but cannot be booked
        row["bookable"] = item.available and slot_start(day, item.slot) > now
        grid.append(row)

    return jsonify(
        ground=ground.value,
        date=day.isoformat(),
        sport=sport,
        sports=sports_for(ground),
        day_name=pricing.get_day_name(day),
        discount_info=pricing.discount_info(ground, day),
        slots=grid,
        available_slots=[r["slot"] for r in grid if r["bookable"]],
    ), 200


def _slot_count(raw) -> int:
    raw = (raw or "").strip()
    if raw.isdigit():
        count = int(raw)
        if count > len(DAILY_SLOTS):
            raise ValidationError(f"A day has only {len(DAILY_SLOTS)} slots", field="slots")
        return count
    labels = split_slots(raw)
    if any(s not in DAILY_SLOTS for s in labels):
        raise ValidationError("One or more invalid time slots selected", field="slots")
    return len(labels)


@slots_bp.get("/pricing/quote")
def price_quote():
    ground = parse_ground(request.args.get("ground"))
    day = parse_date(request.args.get("date"))
    q = pricing.quote(ground, day, _slot_count(request.args.get("slots")))
    data = q.to_dict()
    data["discount_info"] = pricing.discount_info(ground, day)
    return jsonify(data), 200
