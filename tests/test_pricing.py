from datetime import date, timedelta
from decimal import Decimal

import pytest

from models.enums import Ground
from services import pricing
from utils.errors import ValidationError


def test_match_weekday_quote(app, monday):
    q = pricing.quote(Ground.MATCH, monday, 2)
    assert q.base_price == Decimal("2400.00")
    assert q.discount_percentage == 30
    assert q.discount_amount == Decimal("720.00")
    assert q.final_price == Decimal("1680.00")
    assert q.advance_payment == Decimal("200.00")
    assert q.remaining_payment == Decimal("1480.00")
    assert q.day_name == "Monday"


def test_match_weekend_quote(app, friday):
    q = pricing.quote(Ground.MATCH, friday, 2)
    assert q.discount_percentage == 10
    assert q.final_price == Decimal("2160.00")
    assert q.advance_payment + q.remaining_payment == q.final_price


def test_practice_is_never_discounted(app, monday, friday):
    for day in (monday, friday):
        q = pricing.quote(Ground.PRACTICE, day, 3)
        assert q.discount_percentage == 0
        assert q.final_price == Decimal("750.00")
        assert q.advance_payment == q.final_price
        assert q.remaining_payment == Decimal("0.00")


def test_discount_follows_day_of_week(app, monday):
    # one slot at 1200: Mon-Thu pay 70%, Fri-Sun 90%
    expected = {0: 840, 1: 840, 2: 840, 3: 840, 4: 1080, 5: 1080, 6: 1080}
    for offset in range(7):
        day = monday + timedelta(days=offset)
        q = pricing.quote(Ground.MATCH, day, 1)
        assert q.final_price == Decimal(expected[day.weekday()])


def test_quote_rejects_zero_slots(app, monday):
    with pytest.raises(ValidationError):
        pricing.quote(Ground.MATCH, monday, 0)


def test_split_payment_caps_advance_at_amount(app):
    advance, remaining = pricing.split_payment(Ground.MATCH, Decimal("150"))
    assert advance == Decimal("150.00")
    assert remaining == Decimal("0.00")


def test_discount_info_wording(app, monday, friday):
    assert pricing.discount_info(Ground.MATCH, monday) == "30% discount on Mondays (Mon-Thu)"
    assert pricing.discount_info(Ground.MATCH, friday) == "10% discount on Fridays (Fri-Sun)"
    assert pricing.discount_info(Ground.PRACTICE, monday) == "Regular pricing on Mondays"


def test_day_of_week_is_memoized(app):
    pricing.configure_day_cache(3600, 100)
    day = date(2026, 10, 19)
    assert pricing.get_day_of_week(day) == 0
    assert pricing.get_day_of_week(day) == 0
    assert len(pricing._day_cache) == 1


def test_day_cache_is_bounded(app):
    pricing.configure_day_cache(3600, 2)
    for offset in range(5):
        pricing.get_day_of_week(date(2026, 10, 19) + timedelta(days=offset))
    assert len(pricing._day_cache) == 2
    assert pricing.get_day_of_week(date(2026, 10, 19)) == 0


def test_day_cache_reconfigure_drops_entries(app):
    pricing.configure_day_cache(3600, 100)
    pricing.get_day_of_week(date(2026, 10, 23))
    pricing.configure_day_cache(60, 10)
    assert len(pricing._day_cache) == 0
    assert pricing._day_cache.ttl == 60
    assert pricing._day_cache.maxsize == 10
