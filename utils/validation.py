import re
from datetime import date, timedelta

from flask import current_app, request

from models.enums import Ground, parse_enum
from utils.errors import ValidationError
from utils.slots import DAILY_SLOTS, split_slots, sort_slots

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def clean_text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and len(email) <= 255 and bool(_EMAIL_RE.match(email))


def normalize_mobile(mobile: str) -> str:
    # keep the last 10 digits, drops +91 / 0 prefixes
    if not isinstance(mobile, str):
        return ""
    return re.sub(r"\D", "", mobile)[-10:]


def is_valid_mobile(mobile: str) -> bool:
    return bool(_MOBILE_RE.match(normalize_mobile(mobile)))


def parse_date(value, field="date") -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError("Invalid date. Use YYYY-MM-DD", field=field)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Invalid date. Use YYYY-MM-DD", field=field)


def parse_ground(value) -> Ground:
    ground = parse_enum(Ground, value)
    if ground is None:
        raise ValidationError('Invalid booking type. Must be "match" or "practice"', field="ground")
    return ground


def sports_for(ground: Ground):
    return current_app.config["GROUND_SPORTS"].get(ground.value, [])


def validate_sport(ground: Ground, sport) -> str:
    if sport not in sports_for(ground):
        raise ValidationError(f"{sport} is not available for {ground.value} bookings", field="sport")
    return sport


def _text(data: dict, key: str, errors: list):
    """Stripped string value of key, "" when absent, None (with an error) for other types."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        errors.append({"field": key, "message": f"{key} must be text"})
        return None
    return value.strip()


def validate_booking_form(data: dict, today: date) -> dict:
    """
    Check a booking payload and return the cleaned values.
    Every problem is collected; one ValidationError carries all of them.
    """
    errors = []

    ground = parse_enum(Ground, data.get("ground"))
    if ground is None:
        errors.append({"field": "ground", "message": "Invalid booking type"})

    sport = data.get("sport")
    if ground is not None and sport not in sports_for(ground):
        errors.append({"field": "sport", "message": f"{sport} is not available for {ground.value} bookings"})

    day = None
    raw_date = data.get("date")
    if not raw_date:
        errors.append({"field": "date", "message": "Please select a date"})
    else:
        try:
            day = parse_date(raw_date)
        except ValidationError:
            errors.append({"field": "date", "message": "Invalid date. Use YYYY-MM-DD"})
        else:
            horizon = current_app.config.get("BOOKING_HORIZON_DAYS", 90)
            if day < today:
                errors.append({"field": "date", "message": "Please select a future date"})
            elif day > today + timedelta(days=horizon):
                errors.append({"field": "date", "message": f"Bookings open only {horizon} days ahead"})

    try:
        slots = split_slots(data.get("slots", data.get("slot")))
    except ValueError:
        slots = None
    if slots is None:
        errors.append({"field": "slots", "message": "Time slots must be a list of slot labels"})
    elif not slots:
        errors.append({"field": "slots", "message": "Please select at least one time slot"})
    elif any(s not in DAILY_SLOTS for s in slots):
        errors.append({"field": "slots", "message": "One or more invalid time slots selected"})

    name = _text(data, "name", errors)
    if name == "":
        errors.append({"field": "name", "message": "Please enter your full name"})
    elif name is not None and not 2 <= len(name) <= 100:
        errors.append({"field": "name", "message": "Name must be between 2 and 100 characters"})

    mobile = _text(data, "mobile", errors)
    if mobile == "":
        errors.append({"field": "mobile", "message": "Please enter your mobile number"})
    elif mobile is not None and not is_valid_mobile(mobile):
        errors.append({"field": "mobile", "message": "Please enter a valid 10-digit Indian mobile number"})

    email = _text(data, "email", errors)
    email = email.lower() if email is not None else None
    if email == "":
        errors.append({"field": "email", "message": "Please enter your email address"})
    elif email is not None and not is_valid_email(email):
        errors.append({"field": "email", "message": "Please enter a valid email address"})

    coupon_code = _text(data, "coupon_code", errors)

    if errors:
        raise ValidationError("Validation failed", errors=errors)

    return {
        "ground": ground,
        "sport": sport,
        "date": day,
        "slots": sort_slots(slots),
        "name": name,
        "mobile": normalize_mobile(mobile),
        "email": email,
        "coupon_code": coupon_code.upper() or None,
    }
