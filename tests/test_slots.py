from datetime import date, datetime

import pytest

from utils.errors import ValidationError
from utils.slots import DAILY_SLOTS, latest_end, slot_end, sort_slots, split_slots
from utils.validation import normalize_mobile, parse_date, validate_booking_form


def test_daily_schedule():
    assert len(DAILY_SLOTS) == 24
    assert DAILY_SLOTS[0] == "00:00-01:00"
    assert DAILY_SLOTS[-1] == "23:00-00:00"


def test_last_slot_ends_next_day():
    day = date(2026, 10, 19)
    assert slot_end(day, "23:00-00:00") == datetime(2026, 10, 20, 0, 0)
    assert latest_end(day, ["06:00-07:00", "23:00-00:00"]) == datetime(2026, 10, 20, 0, 0)


def test_split_and_sort():
    assert split_slots("19:00-20:00, 18:00-19:00,19:00-20:00") == ["19:00-20:00", "18:00-19:00"]
    assert sort_slots(["19:00-20:00", "06:00-07:00"]) == ["06:00-07:00", "19:00-20:00"]
    assert split_slots(None) == []


def test_mobile_normalisation():
    assert normalize_mobile("+91 98765-43210") == "9876543210"
    assert normalize_mobile("09876543210") == "9876543210"


def test_parse_date_rejects_other_formats():
    assert parse_date("2026-10-19") == date(2026, 10, 19)
    with pytest.raises(ValidationError):
        parse_date("19/10/2026")


def test_past_dates_rejected(app):
    data = {
        "ground": "practice", "sport": "Badminton", "date": "2026-10-18", "slots": ["06:00-07:00"],
        "name": "Asha", "mobile": "9876543210", "email": "asha@example.com",
    }
    with pytest.raises(ValidationError) as exc:
        validate_booking_form(data, today=date(2026, 10, 19))
    assert [e["field"] for e in exc.value.errors] == ["date"]

    form = validate_booking_form(data, today=date(2026, 10, 17))
    assert form["ground"].value == "practice"
    assert form["coupon_code"] is None


def test_split_slots_rejects_other_types():
    assert split_slots(["18:00-19:00", 5, "18:00-19:00"]) == ["18:00-19:00"]
    with pytest.raises(ValueError):
        split_slots(5)
    with pytest.raises(ValueError):
        split_slots({"slot": "18:00-19:00"})


def test_form_reports_each_non_text_field(app):
    data = {
        "ground": "practice", "sport": "Badminton", "date": "2026-10-19", "slots": "06:00-07:00",
        "name": 42, "mobile": 9876543210, "email": ["asha@example.com"],
    }
    with pytest.raises(ValidationError) as exc:
        validate_booking_form(data, today=date(2026, 10, 17))
    assert [e["field"] for e in exc.value.errors] == ["name", "mobile", "email"]
    assert normalize_mobile(9876543210) == ""
