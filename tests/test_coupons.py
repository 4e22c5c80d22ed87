from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from models import db
from models.coupon import Coupon
from models.enums import Ground
from services.booking_writer import create_booking
from services.coupons import (
    CouponContext,
    create_coupon,
    list_available_coupons,
    list_home_page_offers,
    redeem_coupon,
    update_coupon,
    validate_coupon,
)
from utils.errors import ConflictError, ValidationError

from conftest import make_request


def _coupon(**overrides):
    data = {
        "code": "SAVE10",
        "discount_type": "percent",
        "discount_value": 10,
        "expiry_date": (datetime.utcnow() + timedelta(days=30)).isoformat(),
    }
    data.update(overrides)
    return create_coupon(data, created_by="admin@turf.test")


def _ctx(day, **overrides):
    fields = dict(ground=Ground.MATCH, sport="Cricket", date=day, slots=["18:00-19:00"], email="asha@example.com")
    fields.update(overrides)
    return CouponContext(**fields)


def test_percent_coupon_on_discounted_price(app, monday):
    _coupon()
    result = validate_coupon("save10", _ctx(monday), Decimal("1680"))
    assert result.valid
    assert result.message == "Coupon applied successfully"
    assert result.discount == Decimal("168.00")
    assert result.final_price == Decimal("1512.00")


def test_flat_coupon_never_goes_negative(app, monday):
    _coupon(code="FLAT500", discount_type="flat", discount_value=500)
    result = validate_coupon("FLAT500", _ctx(monday), Decimal("300"))
    assert result.valid
    assert result.discount == Decimal("300.00")
    assert result.final_price == Decimal("0.00")


def test_unknown_code(app, monday):
    result = validate_coupon("NOPE", _ctx(monday), Decimal("1000"))
    assert not result.valid
    assert result.message == "Invalid coupon code"


def test_first_failing_check_wins(app, monday):
    coupon = _coupon(expiry_date=(datetime.utcnow() - timedelta(days=1)).isoformat())
    coupon.is_active = False
    db.session.commit()
    result = validate_coupon("SAVE10", _ctx(monday), Decimal("1000"))
    assert result.message == "This coupon is no longer active"

    coupon.is_active = True
    db.session.commit()
    result = validate_coupon("SAVE10", _ctx(monday), Decimal("1000"))
    assert result.message == "This coupon has expired"


@pytest.mark.parametrize(
    "overrides, ctx_overrides, message",
    [
        ({"assigned_users": ["vip@example.com"]}, {}, "This coupon is not assigned to you"),
        ({"booking_type": "practice"}, {}, "This coupon is not valid for match bookings"),
        ({"sports": ["Football"]}, {}, "This coupon is not valid for Cricket"),
        ({"min_amount": 5000}, {}, "Minimum booking amount of ₹5000 required for this coupon"),
    ],
)
def test_eligibility_messages(app, monday, overrides, ctx_overrides, message):
    _coupon(**overrides)
    result = validate_coupon("SAVE10", _ctx(monday, **ctx_overrides), Decimal("1680"))
    assert not result.valid
    assert result.message == message


def test_slot_restricted_coupon_needs_every_slot(app, monday):
    _coupon(applicable_slots=[{"date": monday.isoformat(), "slot": "18:00-19:00"}])
    ok = validate_coupon("SAVE10", _ctx(monday), Decimal("1000"))
    assert ok.valid

    partial = validate_coupon("SAVE10", _ctx(monday, slots=["18:00-19:00", "19:00-20:00"]), Decimal("2000"))
    assert not partial.valid
    assert partial.message == "This coupon is not valid for the selected date and time slot"


def test_validation_does_not_count_usage(app, monday):
    coupon = _coupon(usage_limit=1)
    for _ in range(3):
        assert validate_coupon("SAVE10", _ctx(monday), Decimal("1000")).valid
    assert coupon.used_count == 0


def test_redeem_is_idempotent_per_booking(app, monday, morning_before):
    coupon = _coupon()
    booking = create_booking(make_request(day=monday, coupon_code="SAVE10"), now=morning_before)

    assert redeem_coupon("SAVE10", booking) is True
    assert redeem_coupon("SAVE10", booking) is False
    db.session.refresh(coupon)
    assert coupon.used_count == 1


def test_redeem_respects_usage_limit(app, monday, morning_before):
    coupon = _coupon(usage_limit=1, per_user_limit=0)
    first = create_booking(make_request(day=monday, slots=("06:00-07:00",)), now=morning_before)
    second = create_booking(make_request(day=monday, slots=("07:00-08:00",)), now=morning_before)

    assert redeem_coupon("SAVE10", first) is True
    assert redeem_coupon("SAVE10", second) is False
    db.session.refresh(coupon)
    assert coupon.used_count == 1

    result = validate_coupon("SAVE10", _ctx(monday), Decimal("1000"))
    assert result.message == "This coupon has reached its usage limit"


def test_per_user_limit(app, monday, morning_before):
    _coupon()
    booking = create_booking(make_request(day=monday, email="asha@example.com"), now=morning_before)
    redeem_coupon("SAVE10", booking)

    again = validate_coupon("SAVE10", _ctx(monday, email="asha@example.com"), Decimal("1000"))
    assert again.message == "You have already used this coupon"
    other = validate_coupon("SAVE10", _ctx(monday, email="ravi@example.com"), Decimal("1000"))
    assert other.valid


def test_create_rejects_duplicates_and_bad_values(app):
    _coupon()
    with pytest.raises(ConflictError):
        _coupon()
    with pytest.raises(ValidationError):
        _coupon(code="BIG", discount_value=150)
    with pytest.raises(ValidationError):
        _coupon(code="x!")


def test_update_coupon_fields(app):
    coupon = _coupon()
    update_coupon(coupon, {"discount_value": 15, "show_on_home_page": True, "offer_title": "Monsoon offer"})
    assert coupon.discount_value == Decimal("15")
    assert [c.code for c in list_home_page_offers()] == ["SAVE10"]


def test_available_coupons_hide_other_users_assignments(app):
    _coupon(code="PUBLIC1")
    _coupon(code="VIPONLY", assigned_users=["vip@example.com"])
    codes = {c.code for c in list_available_coupons("asha@example.com")}
    assert codes == {"PUBLIC1"}
    codes = {c.code for c in list_available_coupons("VIP@example.com")}
    assert codes == {"PUBLIC1", "VIPONLY"}


def test_coupon_model_defaults(app):
    coupon = _coupon()
    stored = Coupon.query.filter_by(code="SAVE10").one()
    assert stored.id == coupon.id
    assert stored.per_user_limit == 1
    assert stored.booking_type == "both"


def test_invalid_coupon_gives_the_same_answer_twice(app, monday, morning_before):
    _coupon(code="TINY", usage_limit=1)
    booking = create_booking(make_request(day=monday), now=morning_before)
    assert redeem_coupon("TINY", booking)

    first = validate_coupon("TINY", _ctx(monday), Decimal("1680"))
    second = validate_coupon("TINY", _ctx(monday), Decimal("1680"))
    assert not first.valid
    assert first.message == second.message == "This coupon has reached its usage limit"
    assert Coupon.query.filter_by(code="TINY").one().used_count == 1


def test_non_text_email_is_treated_as_missing(app, monday):
    _coupon(code="VIPONLY", assigned_users=["asha@example.com"])
    result = validate_coupon("VIPONLY", _ctx(monday, email=7), Decimal("1000"))
    assert result.message == "This coupon is not assigned to you"
    assert validate_coupon(123, _ctx(monday), Decimal("1000")).message == "Invalid coupon code"
