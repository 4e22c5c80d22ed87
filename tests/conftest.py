from datetime import date, datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.enums import Ground
from services.booking_writer import BookingRequest
from services.pricing import quote, split_payment
from utils.seed import create_staff_user, seed_roles


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def upcoming(weekday: int, min_days_ahead: int = 2) -> date:
    """First date at least min_days_ahead from today falling on weekday (0 = Monday)."""
    day = date.today() + timedelta(days=min_days_ahead)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return day


@pytest.fixture
def monday():
    return upcoming(0)


@pytest.fixture
def friday():
    return upcoming(4)


@pytest.fixture
def morning_before(monday):
    """A 'now' the day before the Monday fixture, so every slot is in the future."""
    return datetime.combine(monday - timedelta(days=1), datetime.min.time()).replace(hour=9)


def make_request(ground=Ground.MATCH, sport="Cricket", day=None, slots=("18:00-19:00",), email="player@example.com", **extra):
    q = quote(ground, day, len(slots))
    advance, remaining = split_payment(ground, q.final_price)
    fields = dict(
        ground=ground,
        sport=sport,
        date=day,
        slots=list(slots),
        name="Test Player",
        mobile="9876543210",
        email=email,
        base_price=q.base_price,
        discount_percentage=q.discount_percentage,
        discount_amount=q.discount_amount,
        final_price=q.final_price,
        advance_payment=advance,
        remaining_payment=remaining,
    )
    fields.update(extra)
    return BookingRequest(**fields)


def booking_payload(day, **overrides):
    data = {
        "ground": "match",
        "sport": "Cricket",
        "date": day.isoformat(),
        "slots": ["18:00-19:00", "19:00-20:00"],
        "name": "Asha Rao",
        "mobile": "+91 98765 43210",
        "email": "asha@example.com",
    }
    data.update(overrides)
    return data


def csrf_headers(client):
    cookie = client.get_cookie("csrf_token")
    return {"X-CSRF-Token": cookie.value if cookie else ""}


def login(client, email, password):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp


@pytest.fixture
def admin_user(app):
    return create_staff_user("admin@turf.test", "admin-pass-123")


@pytest.fixture
def super_admin_user(app):
    return create_staff_user("owner@turf.test", "owner-pass-123", super_admin=True)


@pytest.fixture
def admin_client(client, admin_user):
    login(client, "admin@turf.test", "admin-pass-123")
    return client


@pytest.fixture
def super_admin_client(client, super_admin_user):
    login(client, "owner@turf.test", "owner-pass-123")
    return client
